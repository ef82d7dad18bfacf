#!/usr/bin/env python3
"""Quick base8 benchmark comparison - scalar loop vs NumPy path"""
import os
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from base8.main import base8


PAYLOAD = os.urandom(8192)
ROUNDS = 200


def bench(label, func, arg):
    start = time.perf_counter()
    for _ in range(ROUNDS):
        result = func(arg)
    elapsed = time.perf_counter() - start
    print(f"  {label:<16} {elapsed:.3f}s ({elapsed / ROUNDS * 1000:.2f} ms/op)")
    return result


def main():
    print(f"Benchmarking base8 ({ROUNDS} iterations)...")
    print(f"Input size: {len(PAYLOAD)} bytes\n")

    print("Encode")
    scalar = bench("scalar", base8._encode_scalar, PAYLOAD)
    fast = bench("numpy", base8._fast_encode, PAYLOAD)
    if scalar != fast:
        raise SystemExit("encode mismatch between scalar and NumPy paths")

    print("Decode")
    bench("scalar", lambda data: base8._decode_quanta(data, bytearray()), scalar)
    bench("numpy", lambda data: base8._fast_decode(data, bytearray()), scalar)

    print("\nBenchmark complete")


if __name__ == '__main__':
    main()
