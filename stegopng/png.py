"""Writer for uncompressed-filter, 8-bit RGB PNG files."""

from __future__ import annotations

import os
import struct
import zlib
from typing import Union

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
IHDR = b"IHDR"
IDAT = b"IDAT"
IEND = b"IEND"

_BIT_DEPTH = 8
_COLOR_TYPE_RGB = 2
_MAX_DIMENSION = 0xFFFFFFFF

PathType = Union[str, "os.PathLike[str]"]


def _chunk(kind: bytes, payload: bytes) -> bytes:
    """Frame a payload as a PNG chunk: length, type, payload, CRC."""
    crc = zlib.crc32(payload, zlib.crc32(kind)) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", crc)


def _check_dimensions(width: int, height: int) -> None:
    for name, value in (("width", width), ("height", height)):
        if not 0 <= value <= _MAX_DIMENSION:
            raise ValueError(f"{name} {value} is outside the PNG range")


def encode_png(data: bytes, width: int, height: int) -> bytes:
    """Encode packed RGB pixels (3 bytes per pixel) as a PNG image.

    Every scanline uses filter type 0 and all image data goes into a
    single IDAT chunk.
    """
    _check_dimensions(width, height)
    row_size = width * 3
    pixels = bytes(data)
    if len(pixels) != row_size * height:
        raise ValueError(
            f"expected {row_size * height} bytes of RGB data for "
            f"{width}x{height}, got {len(pixels)}"
        )

    scanlines = b"".join(
        b"\x00" + pixels[start:start + row_size]
        for start in range(0, row_size * height, row_size or 1)
    ) if row_size else b"\x00" * height

    header = struct.pack(
        ">IIBBBBB", width, height, _BIT_DEPTH, _COLOR_TYPE_RGB, 0, 0, 0
    )
    return b"".join(
        (
            PNG_SIGNATURE,
            _chunk(IHDR, header),
            _chunk(IDAT, zlib.compress(scanlines)),
            _chunk(IEND, b""),
        )
    )


def write_png(path: PathType, data: bytes, width: int, height: int) -> None:
    """Write packed RGB pixels to ``path`` as a PNG file."""
    encoded = encode_png(data, width, height)
    with open(path, "wb") as handle:
        handle.write(encoded)