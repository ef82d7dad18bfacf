"""String/byte codec convenience wrappers."""

from .main import base8

ENCODE_TABLE = base8.ENCODE_TABLE
PAD_CHAR = base8.PAD_CHAR


def encode(data):
    return base8.encode(data)


def encode_to_string(data):
    return base8.encode_to_string(data)


def encode_into(dst, src):
    return base8.encode_into(dst, src)


def decode(data):
    return base8.decode(data)


def decode_string(string: str):
    return base8.decode_string(string)


def decode_into(dst, src):
    return base8.decode_into(dst, src)


def encoded_length(byte_count: int) -> int:
    return base8.encoded_len(byte_count)


def decoded_length(symbol_count: int) -> int:
    return base8.decoded_len(symbol_count)


__all__ = [
    "ENCODE_TABLE",
    "PAD_CHAR",
    "decode",
    "decode_into",
    "decode_string",
    "decoded_length",
    "encode",
    "encode_into",
    "encode_to_string",
    "encoded_length",
]
