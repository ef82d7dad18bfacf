# BASE8 CODEC ENGINE ->

import os as _os_module
import warnings as _warnings_module

from .errors import Base8Error, CorruptInputError, UnexpectedEndError


class base8:
    import enum
    import io
    import typing
    import numpy as np

    @staticmethod
    def _env_int(name: str) -> "base8.typing.Optional[int]":
        value = _os_module.getenv(name)
        if not value:
            return None
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            parsed = 0
        if parsed <= 0:
            _warnings_module.warn(
                f"Ignoring {name}={value!r}; expected a positive integer, using the default.",
                RuntimeWarning
            )
            return None
        return parsed

    @staticmethod
    def _fast_mode_enabled() -> bool:
        raw = _os_module.getenv("BASE8_FAST")
        if not raw:
            return True
        return raw.strip().lower() not in ("0", "false", "no", "off")

    ENGINE_VERSION = "1.0.0"
    ENCODE_TABLE = "01234567"
    PAD_CHAR = "="
    QUANTUM_BYTES = 3
    QUANTUM_SYMBOLS = 8
    _ENCODE_TABLE_BYTES = ENCODE_TABLE.encode("ascii")
    _PAD_BYTE = ord(PAD_CHAR)
    _INVALID = 0xFF
    # Maps ASCII byte -> 3-bit value (255 = not in the alphabet)
    _DECODE_LUT: typing.ClassVar[bytes] = bytes([255] * 48 + list(range(8)) + [255] * 200)
    # Significant symbols for a final quantum of 0..3 bytes
    _SIGNIFICANT: typing.ClassVar[tuple[int, ...]] = (0, 3, 6, 8)
    # Data symbols before padding -> bytes carried by the quantum
    _PADDED_BYTES: typing.ClassVar[dict[int, int]] = {3: 1, 6: 2}
    STREAM_BUFFER_SIZE = 1024  # symbols per sink write / source read
    _FAST_THRESHOLD = 1024  # Use NumPy for data >= this size
    _STREAM_BUFFER_ENV = _env_int("BASE8_STREAM_BUFFER")
    if _STREAM_BUFFER_ENV is not None:
        STREAM_BUFFER_SIZE = max(QUANTUM_SYMBOLS, _STREAM_BUFFER_ENV // QUANTUM_SYMBOLS * QUANTUM_SYMBOLS)
    _FAST_THRESHOLD_ENV = _env_int("BASE8_FAST_THRESHOLD")
    if _FAST_THRESHOLD_ENV is not None:
        _FAST_THRESHOLD = _FAST_THRESHOLD_ENV

    class _Outcome(enum.Enum):
        PROGRESS = "progress"
        TERMINATED = "terminated"
        CORRUPT = "corrupt"

    class _DecodeResult(typing.NamedTuple):
        """Outcome of one decode pass; ``offset`` is only set for CORRUPT."""

        outcome: "base8._Outcome"
        written: int
        offset: int = -1

    @staticmethod
    def _coerce_bytes(data: "base8.typing.Union[str, bytes, bytearray, memoryview]", label: str) -> bytes:
        if isinstance(data, str):
            return data.encode("utf-8")
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise TypeError(f"{label} expects bytes-like or str input, got {type(data).__name__}")

    @staticmethod
    def _writable_view(dst, label: str) -> memoryview:
        view = memoryview(dst)
        if view.readonly:
            raise TypeError(f"{label} requires a writable buffer")
        return view.cast("B")

    @staticmethod
    def _use_fast_path(length: int) -> bool:
        return length >= base8._FAST_THRESHOLD and base8._fast_mode_enabled()

    # QUANTUM TRANSFORM

    @staticmethod
    def _split_quantum(chunk, count: int) -> "list[int]":
        """Unpack ``count`` (1-3) bytes into eight 3-bit values, most significant first.

        Bytes missing from a short final quantum are taken as zero.
        """
        word = 0
        for idx in range(count):
            word |= chunk[idx] << (16 - idx * 8)
        return [(word >> shift) & 0x07 for shift in range(21, -1, -3)]

    @staticmethod
    def _join_quantum(values: "list[int]", count: int) -> bytes:
        """Pack leading 3-bit values back into ``count`` bytes."""
        word = 0
        for idx, value in enumerate(values):
            word |= value << (21 - idx * 3)
        return word.to_bytes(3, "big")[:count]

    @staticmethod
    def _encode_quantum(chunk) -> bytes:
        count = len(chunk)
        values = base8._split_quantum(chunk, count)
        significant = base8._SIGNIFICANT[count]
        table = base8._ENCODE_TABLE_BYTES
        out = bytearray(table[value] for value in values[:significant])
        out.extend(bytes([base8._PAD_BYTE]) * (base8.QUANTUM_SYMBOLS - significant))
        return bytes(out)

    @staticmethod
    def _decode_quanta(src, out: bytearray) -> "base8._DecodeResult":
        """Decode whole quanta of ``src`` onto ``out``.

        Offsets in a CORRUPT result are relative to the start of ``src``.
        A padded quantum ends the message; anything after it is corrupt.
        """
        lut = base8._DECODE_LUT
        pad = base8._PAD_BYTE
        corrupt = base8._Outcome.CORRUPT
        olen = len(src)
        start = len(out)
        i = 0
        while i < olen:
            values: "list[int]" = []
            j = 0
            while j < base8.QUANTUM_SYMBOLS:
                if i == olen:
                    return base8._DecodeResult(corrupt, len(out) - start, i - j)
                symbol = src[i]
                i += 1
                remaining = olen - i
                if symbol == pad and j >= 2 and remaining < base8.QUANTUM_SYMBOLS:
                    if remaining + j < base8.QUANTUM_SYMBOLS - 1:
                        return base8._DecodeResult(corrupt, len(out) - start, olen)
                    for k in range(base8.QUANTUM_SYMBOLS - 1 - j):
                        if src[i + k] != pad:
                            return base8._DecodeResult(corrupt, len(out) - start, i + k - 1)
                    count = base8._PADDED_BYTES.get(j)
                    if count is None:
                        return base8._DecodeResult(corrupt, len(out) - start, i - 1)
                    out += base8._join_quantum(values, count)
                    tail = i + base8.QUANTUM_SYMBOLS - 1 - j
                    if tail < olen:
                        return base8._DecodeResult(corrupt, len(out) - start, tail)
                    return base8._DecodeResult(base8._Outcome.TERMINATED, len(out) - start)
                value = lut[symbol]
                if value == base8._INVALID:
                    return base8._DecodeResult(corrupt, len(out) - start, i - 1)
                values.append(value)
                j += 1
            out += base8._join_quantum(values, base8.QUANTUM_BYTES)
        return base8._DecodeResult(base8._Outcome.PROGRESS, len(out) - start)

    # WHOLE-BUFFER CODEC

    @staticmethod
    def _encode_scalar(data: bytes) -> bytes:
        out = bytearray()
        for offset in range(0, len(data), base8.QUANTUM_BYTES):
            out += base8._encode_quantum(data[offset:offset + base8.QUANTUM_BYTES])
        return bytes(out)

    @staticmethod
    def _fast_encode(data: bytes) -> bytes:
        """NumPy-accelerated encoding of the full quanta; the short tail goes through the scalar path."""
        np = base8.np
        full = len(data) - len(data) % base8.QUANTUM_BYTES
        if not full:
            return base8._encode_scalar(data)
        arr = np.frombuffer(data, dtype=np.uint8, count=full)

        # Reshape into 24-bit words, one per quantum
        groups = arr.reshape(-1, 3).astype(np.uint32)
        words = (groups[:, 0] << 16) | (groups[:, 1] << 8) | groups[:, 2]

        # Extract 8 x 3-bit values from each word
        shifts = np.arange(21, -1, -3, dtype=np.uint32)
        values = (words[:, None] >> shifts) & 0x07

        lut = np.frombuffer(base8._ENCODE_TABLE_BYTES, dtype=np.uint8)
        body = lut[values.ravel()].tobytes()
        if full == len(data):
            return body
        return body + base8._encode_quantum(data[full:])

    @staticmethod
    def _fast_decode(data: bytes, out: bytearray) -> "base8._DecodeResult":
        """NumPy-accelerated decoding of every quantum but the last.

        Any symbol outside the alphabet in the body sends the whole input
        through the scalar pass so corruption offsets stay exact.
        """
        np = base8.np
        body_len = (len(data) - 1) // base8.QUANTUM_SYMBOLS * base8.QUANTUM_SYMBOLS
        if body_len <= 0:
            return base8._decode_quanta(data, out)
        arr = np.frombuffer(data, dtype=np.uint8, count=body_len)

        lut = np.frombuffer(base8._DECODE_LUT, dtype=np.uint8)
        vals = lut[arr]
        if (vals == base8._INVALID).any():
            return base8._decode_quanta(data, out)

        # Combine 8 x 3-bit values into 3 bytes
        groups = vals.reshape(-1, 8)
        packed = np.empty((len(groups), 3), dtype=np.uint8)
        packed[:, 0] = (groups[:, 0] << 5) | (groups[:, 1] << 2) | (groups[:, 2] >> 1)
        packed[:, 1] = (groups[:, 2] << 7) | (groups[:, 3] << 4) | (groups[:, 4] << 1) | (groups[:, 5] >> 2)
        packed[:, 2] = (groups[:, 5] << 6) | (groups[:, 6] << 3) | groups[:, 7]

        start = len(out)
        out += packed.tobytes()
        tail = base8._decode_quanta(memoryview(data)[body_len:], out)
        written = len(out) - start
        if tail.outcome is base8._Outcome.CORRUPT:
            return base8._DecodeResult(tail.outcome, written, tail.offset + body_len)
        return base8._DecodeResult(tail.outcome, written)

    @staticmethod
    def _decode_buffer(data: bytes, out: bytearray) -> "base8._DecodeResult":
        if base8._use_fast_path(len(data)):
            return base8._fast_decode(data, out)
        return base8._decode_quanta(data, out)

    @staticmethod
    def encoded_len(n: int) -> int:
        if n < 0:
            raise ValueError("length must be non-negative")
        return (n + 2) // 3 * 8

    @staticmethod
    def decoded_len(n: int) -> int:
        if n < 0:
            raise ValueError("length must be non-negative")
        return n // 8 * 3

    @staticmethod
    def encode(data: "base8.typing.Union[str, bytes, bytearray, memoryview]") -> bytes:
        raw = base8._coerce_bytes(data, "encode")
        if base8._use_fast_path(len(raw)):
            return base8._fast_encode(raw)
        return base8._encode_scalar(raw)

    @staticmethod
    def encode_to_string(data: "base8.typing.Union[str, bytes, bytearray, memoryview]") -> str:
        return base8.encode(data).decode("ascii")

    @staticmethod
    def encode_into(dst, src: "base8.typing.Union[str, bytes, bytearray, memoryview]") -> int:
        view = base8._writable_view(dst, "encode_into")
        encoded = base8.encode(src)
        if len(view) < len(encoded):
            raise ValueError(f"encode_into needs {len(encoded)} bytes of output space, got {len(view)}")
        view[:len(encoded)] = encoded
        return len(encoded)

    @staticmethod
    def decode(data: "base8.typing.Union[str, bytes, bytearray, memoryview]") -> bytes:
        raw = base8._coerce_bytes(data, "decode")
        out = bytearray()
        result = base8._decode_buffer(raw, out)
        if result.outcome is base8._Outcome.CORRUPT:
            raise CorruptInputError(result.offset, result.written)
        return bytes(out)

    @staticmethod
    def decode_string(string: str) -> bytes:
        if not isinstance(string, str):
            raise TypeError(f"decode_string expects str input, got {type(string).__name__}")
        return base8.decode(string)

    @staticmethod
    def decode_into(dst, src: "base8.typing.Union[str, bytes, bytearray, memoryview]") -> int:
        """Decode ``src`` into ``dst`` and return the number of bytes written.

        On corrupt input the bytes decoded before the defect are left in
        ``dst`` and the raised CorruptInputError reports how many there are.
        """
        view = base8._writable_view(dst, "decode_into")
        raw = base8._coerce_bytes(src, "decode_into")
        need = base8.decoded_len(len(raw))
        if len(view) < need:
            raise ValueError(f"decode_into needs {need} bytes of output space, got {len(view)}")
        out = bytearray()
        result = base8._decode_buffer(raw, out)
        view[:len(out)] = out
        if result.outcome is base8._Outcome.CORRUPT:
            raise CorruptInputError(result.offset, result.written)
        return result.written

    # STREAMING

    class Encoder(io.RawIOBase):
        """Incremental encoder writing base8 symbols to ``sink``.

        Whole quanta are encoded as soon as they are complete; up to two
        trailing bytes wait for more input or for close(), which pads them.
        The first error raised by the sink is kept and re-raised by every
        later call. The sink itself is never closed.
        """

        def __init__(self, sink) -> None:
            super().__init__()
            self._sink = sink
            self._fringe = bytearray()
            self._error: "base8.typing.Optional[BaseException]" = None
            self._batch = base8.STREAM_BUFFER_SIZE // base8.QUANTUM_SYMBOLS * base8.QUANTUM_BYTES

        @property
        def error(self) -> "base8.typing.Optional[BaseException]":
            return self._error

        def writable(self) -> bool:
            return True

        def _emit(self, symbols: bytes) -> None:
            try:
                self._sink.write(symbols)
            except Exception as exc:
                self._error = exc
                raise

        def write(self, data) -> int:
            if self._error is not None:
                raise self._error
            if self.closed:
                raise ValueError("write to closed base8 encoder")
            view = memoryview(data).cast("B")
            consumed = len(view)

            # Leading fringe.
            if self._fringe:
                take = min(base8.QUANTUM_BYTES - len(self._fringe), len(view))
                self._fringe += view[:take]
                view = view[take:]
                if len(self._fringe) < base8.QUANTUM_BYTES:
                    return consumed
                quantum = bytes(self._fringe)
                self._fringe.clear()
                self._emit(base8._encode_quantum(quantum))

            # Large interior chunks.
            while len(view) >= base8.QUANTUM_BYTES:
                size = min(self._batch, len(view) - len(view) % base8.QUANTUM_BYTES)
                self._emit(base8.encode(view[:size]))
                view = view[size:]

            # Trailing fringe.
            self._fringe += view
            return consumed

        def close(self) -> None:
            if self.closed:
                return
            try:
                if self._error is None and self._fringe:
                    quantum = bytes(self._fringe)
                    self._fringe.clear()
                    self._emit(base8._encode_quantum(quantum))
            finally:
                super().close()
            if self._error is not None:
                raise self._error

        def __del__(self) -> None:
            if not self.closed:
                if getattr(self, "_error", None) is not None:
                    # The sink already failed; mark closed without re-raising.
                    base8.io.RawIOBase.close(self)
                elif getattr(self, "_fringe", None):
                    _warnings_module.warn(
                        f"unclosed base8 encoder with {len(self._fringe)} pending byte(s)",
                        ResourceWarning,
                        source=self
                    )
            super().__del__()

    class Decoder(io.RawIOBase):
        """Incremental decoder reading base8 symbols from ``source``.

        ``source`` only needs ``read(size)`` returning ``b""`` at its end.
        Decoded bytes that do not fit the caller's buffer are kept and handed
        out first on the next call; an error found in the same pass is raised
        once they are drained. Errors are sticky, end of stream keeps
        returning 0. Corruption offsets count symbols from the start of the
        stream. The source itself is never closed.
        """

        def __init__(self, source) -> None:
            super().__init__()
            self._source = source
            self._fringe = bytearray()
            self._pending = bytearray()
            self._consumed = 0
            self._written = 0
            self._end = False
            self._eof = False
            self._error: "base8.typing.Optional[BaseException]" = None

        @property
        def error(self) -> "base8.typing.Optional[BaseException]":
            return self._error

        def readable(self) -> bool:
            return True

        def _fail(self, exc: BaseException) -> int:
            self._error = exc
            raise exc

        def _fill(self, limit: int) -> bool:
            """Read until a whole quantum is buffered; False once the source is exhausted."""
            while len(self._fringe) < base8.QUANTUM_SYMBOLS:
                try:
                    chunk = self._source.read(limit - len(self._fringe))
                except Exception as exc:
                    self._error = exc
                    raise
                if not chunk:
                    return False
                if isinstance(chunk, str):
                    chunk = chunk.encode("utf-8")
                self._fringe += chunk
            return True

        def _deliver(self, view: memoryview, out: bytearray) -> int:
            n = min(len(view), len(out))
            view[:n] = out[:n]
            self._pending += out[n:]
            if not n and self._error is not None:
                raise self._error
            return n

        def readinto(self, buffer) -> int:
            if self.closed:
                raise ValueError("read from closed base8 decoder")
            view = memoryview(buffer).cast("B")

            # Leftover decoded output from the last call.
            if self._pending:
                n = min(len(view), len(self._pending))
                view[:n] = self._pending[:n]
                del self._pending[:n]
                return n

            if self._error is not None:
                raise self._error
            if self._eof or not len(view):
                return 0

            limit = len(view) // base8.QUANTUM_BYTES * base8.QUANTUM_SYMBOLS
            limit = min(max(limit, base8.QUANTUM_SYMBOLS), base8.STREAM_BUFFER_SIZE)
            filled = self._fill(limit)
            if self._end and self._fringe:
                return self._fail(CorruptInputError(self._consumed, self._written))
            if not filled:
                if not self._fringe:
                    self._eof = True
                    return 0
                return self._fail(UnexpectedEndError(self._consumed, len(self._fringe)))

            usable = len(self._fringe) - len(self._fringe) % base8.QUANTUM_SYMBOLS
            # A quantum holding "=" is decoded as the last one of its block.
            pad_at = self._fringe.find(base8._PAD_BYTE, 0, usable)
            if pad_at >= 0:
                usable = (pad_at // base8.QUANTUM_SYMBOLS + 1) * base8.QUANTUM_SYMBOLS
            block = bytes(self._fringe[:usable])
            del self._fringe[:usable]
            out = bytearray()
            result = base8._decode_buffer(block, out)
            base_offset = self._consumed
            self._consumed += usable
            self._written += result.written
            if result.outcome is base8._Outcome.CORRUPT:
                self._error = CorruptInputError(base_offset + result.offset, self._written)
            elif result.outcome is base8._Outcome.TERMINATED:
                self._end = True
                if self._fringe:
                    self._error = CorruptInputError(self._consumed, self._written)
            return self._deliver(view, out)

    @staticmethod
    def open_encoder(sink) -> "base8.Encoder":
        return base8.Encoder(sink)

    @staticmethod
    def open_decoder(source) -> "base8.Decoder":
        return base8.Decoder(source)


__all__ = ["Base8Error", "CorruptInputError", "UnexpectedEndError", "base8"]
