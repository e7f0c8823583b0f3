"""In-memory RGB images and loading of the PNG files this package writes."""

from __future__ import annotations

import io
import os
import struct
import zlib
from dataclasses import dataclass, field
from typing import Union

from .png import IDAT, IHDR, PNG_SIGNATURE, write_png

PathType = Union[str, "os.PathLike[str]"]


class ImageError(Exception):
    """Raised when an image cannot be read or decoded."""


@dataclass
class Image:
    """An RGB image, 3 bytes per pixel, rows stored top to bottom."""

    width: int
    height: int
    data: bytearray = field(repr=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("image dimensions must not be negative")
        self.data = bytearray(self.data)
        expected = self.width * self.height * 3
        if len(self.data) != expected:
            raise ValueError(
                f"expected {expected} bytes of pixel data, got {len(self.data)}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "Image":
        """Create an all-black image of the given size."""
        return cls(width, height, bytearray(width * height * 3))

    @classmethod
    def from_png_bytes(cls, raw: bytes) -> "Image":
        """Decode a PNG whose first chunks are IHDR then a single IDAT.

        Scanline filter bytes are dropped without being applied.
        """
        stream = io.BytesIO(raw)

        if _read(stream, 8) != PNG_SIGNATURE:
            raise ImageError("not a PNG file")

        (length,) = struct.unpack(">I", _read(stream, 4))
        if length != 13:
            raise ImageError(f"IHDR length must be 13, got {length}")
        if _read(stream, 4) != IHDR:
            raise ImageError("first chunk is not IHDR")
        width, height, _depth, _color, _comp, _filter, _interlace = struct.unpack(
            ">IIBBBBB", _read(stream, 13)
        )
        _read(stream, 4)  # IHDR CRC, not verified

        (length,) = struct.unpack(">I", _read(stream, 4))
        if _read(stream, 4) != IDAT:
            raise ImageError("second chunk is not IDAT")
        compressed = _read(stream, length)

        row_size = width * 3
        image_size = height * (row_size + 1)
        inflater = zlib.decompressobj()
        try:
            scanlines = inflater.decompress(compressed)
        except zlib.error as exc:
            raise ImageError(f"corrupt image data: {exc}") from exc
        if not inflater.eof or len(scanlines) != image_size:
            raise ImageError("image data does not match the declared size")

        stride = row_size + 1
        pixels = bytearray().join(
            scanlines[start + 1:start + stride]
            for start in range(0, image_size, stride)
        )
        return cls(width, height, pixels)

    @classmethod
    def load(cls, path: PathType) -> "Image":
        """Read and decode the PNG file at ``path``."""
        try:
            with open(path, "rb") as handle:
                raw = handle.read()
        except OSError as exc:
            raise ImageError(f"cannot read {os.fspath(path)}: {exc}") from exc
        return cls.from_png_bytes(raw)

    def save(self, path: PathType) -> None:
        """Write the image to ``path`` as a PNG file."""
        write_png(path, bytes(self.data), self.width, self.height)


def _read(stream: io.BytesIO, size: int) -> bytes:
    chunk = stream.read(size)
    if len(chunk) != size:
        raise ImageError("unexpected end of PNG data")
    return chunk