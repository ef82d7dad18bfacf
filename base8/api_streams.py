"""Incremental encoder/decoder wrappers."""

from .main import base8

Encoder = base8.Encoder
Decoder = base8.Decoder


def open_encoder(sink):
    return base8.open_encoder(sink)


def open_decoder(source):
    return base8.open_decoder(source)


__all__ = ["Decoder", "Encoder", "open_decoder", "open_encoder"]
