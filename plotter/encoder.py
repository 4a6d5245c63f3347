"""Encoders: turn a finished RGB canvas buffer into an output byte stream.

SixelEncoder writes a DEC sixel stream for terminal display through
libsixel, dithered to its builtin xterm 256-colour palette. PngEncoder
writes a PNG file via QImage. Both take the raw (width*height*3,)
row-major RGB buffer.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Protocol

import numpy as np
from PyQt6.QtCore import QBuffer, QByteArray, QIODevice

from plotter.coloring import numpy_to_qimage

logger = logging.getLogger(__name__)

# Sixel control sequences
DCS = b"\x1bP"
ST = b"\x1b\\"


class Encoder(Protocol):
    """Protocol for canvas encoders."""

    def encode(
        self,
        buffer,
        width: int,
        height: int,
        stream: BinaryIO,
        channels: int = 3,
    ) -> None:
        ...


def _as_image(buffer, width: int, height: int, channels: int) -> np.ndarray:
    """View a flat RGB buffer as (height, width, 3) uint8."""
    if channels != 3:
        raise ValueError(f"Only 3-channel RGB buffers are supported, got {channels}")
    data = np.frombuffer(buffer, dtype=np.uint8)
    expected = width * height * channels
    if data.size != expected:
        raise ValueError(
            f"Buffer has {data.size} bytes, expected {expected} for {width}x{height}"
        )
    return data.reshape(height, width, channels)


class SixelEncoder:
    """Encode RGB buffers as DEC sixel graphics with libsixel."""

    def encode(
        self,
        buffer,
        width: int,
        height: int,
        stream: BinaryIO,
        channels: int = 3,
    ) -> None:
        stream.write(self.encode_bytes(buffer, width, height, channels))

    def encode_bytes(self, buffer, width: int, height: int, channels: int = 3) -> bytes:
        pixels = _as_image(buffer, width, height, channels).tobytes()

        # Deferred so PNG output works where the libsixel shared library is absent
        import libsixel

        chunks: list[bytes] = []
        output = libsixel.sixel_output_new(lambda data, priv: chunks.append(data))
        dither = libsixel.sixel_dither_get(libsixel.SIXEL_BUILTIN_XTERM256)
        try:
            libsixel.sixel_encode(pixels, width, height, channels, dither, output)
        finally:
            libsixel.sixel_dither_unref(dither)
            libsixel.sixel_output_unref(output)

        data = b"".join(chunks)
        logger.debug("Sixel-encoded %dx%d (%d bytes)", width, height, len(data))
        return data


class PngEncoder:
    """Encode RGB buffers as PNG through QImage."""

    def encode(
        self,
        buffer,
        width: int,
        height: int,
        stream: BinaryIO,
        channels: int = 3,
    ) -> None:
        stream.write(self.encode_bytes(buffer, width, height, channels))

    def encode_bytes(self, buffer, width: int, height: int, channels: int = 3) -> bytes:
        # QImage needs a writable buffer; frombuffer views are read-only
        image = numpy_to_qimage(_as_image(buffer, width, height, channels).copy())

        data = QByteArray()
        qbuffer = QBuffer(data)
        qbuffer.open(QIODevice.OpenModeFlag.WriteOnly)
        ok = image.save(qbuffer, "PNG")
        qbuffer.close()
        if not ok:
            raise OSError("QImage failed to encode PNG")
        return data.data()


ENCODERS = {
    "sixel": SixelEncoder,
    "png": PngEncoder,
}
