"""Hiding files in the low bits of PNG images and getting them back.

Each hidden byte takes the two low bits of four consecutive channel
bytes. The payload is preceded by its length as four little-endian
bytes, stored the same way.
"""

from __future__ import annotations

import math
import os
import zlib
from typing import Optional, Tuple, Union

from .cipher import DecryptionError, decrypt, derive_key, encrypt, is_encrypted
from .image import Image, ImageError

PathType = Union[str, "os.PathLike[str]"]

LENGTH_BYTES = 4
_SLOT = 4  # channel bytes consumed by one hidden byte
_SHIFTS = (6, 4, 2, 0)


class StegoError(Exception):
    """Raised when data cannot be hidden in or recovered from an image."""


def _check_slot(pixels: bytearray, offset: int) -> None:
    if offset < 0 or offset + _SLOT > len(pixels):
        raise IndexError(f"offset {offset} leaves no room for a hidden byte")


def embed_byte(pixels: bytearray, offset: int, value: int) -> None:
    """Store ``value`` in the two low bits of ``pixels[offset:offset + 4]``."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"byte value {value} out of range")
    _check_slot(pixels, offset)
    for position, shift in enumerate(_SHIFTS, start=offset):
        pixels[position] = (pixels[position] & 0xFC) | ((value >> shift) & 0x03)


def extract_byte(pixels: bytes, offset: int) -> int:
    """Read back a byte stored by :func:`embed_byte`."""
    _check_slot(pixels, offset)
    return sum(
        (pixels[position] & 0x03) << shift
        for position, shift in enumerate(_SHIFTS, start=offset)
    )


def capacity(image: Image) -> int:
    """Number of bytes, length header included, that ``image`` can hold."""
    return image.width * image.height * 3 // _SLOT


def embed_data(image: Image, data: bytes) -> None:
    """Hide ``data`` with its length header in ``image``, in place."""
    data = bytes(data)
    room = capacity(image)
    if len(data) + LENGTH_BYTES > room:
        raise StegoError(
            f"image holds {room} bytes, {len(data) + LENGTH_BYTES} needed"
        )
    header = (len(data) & 0xFFFFFFFF).to_bytes(LENGTH_BYTES, "little")
    for index, value in enumerate(header + data):
        embed_byte(image.data, index * _SLOT, value)


def extract_data(image: Image) -> bytes:
    """Recover the data hidden in ``image`` by :func:`embed_data`."""
    room = capacity(image)
    if room < LENGTH_BYTES:
        raise StegoError("image is too small to hold hidden data")
    length = int.from_bytes(
        bytes(extract_byte(image.data, i * _SLOT) for i in range(LENGTH_BYTES)),
        "little",
    )
    if length > room - LENGTH_BYTES:
        raise StegoError(f"hidden length {length} exceeds image capacity")
    return bytes(
        extract_byte(image.data, (LENGTH_BYTES + i) * _SLOT) for i in range(length)
    )


def cover_image(width: int, height: int) -> Image:
    """Create an image filled with a simple pattern whose low bits are clear."""
    data = bytearray()
    for y in range(height):
        for x in range(width):
            data += bytes(((x + y) & 0xFC, (x * y) & 0xFC, (x - y) & 0xFC))
    return Image(width, height, data)


def _cover_size(required_pixels: int) -> Tuple[int, int]:
    width = math.isqrt(required_pixels)
    if width * width < required_pixels:
        width += 1
    height = -(-required_pixels // width)
    return width, height


def _reusable_image(path: PathType, required_pixels: int) -> Optional[Image]:
    if not os.path.exists(path):
        return None
    try:
        image = Image.load(path)
    except ImageError:
        return None
    print(f"Loaded existing image {image.width}x{image.height}")
    if image.width * image.height < required_pixels:
        print("Existing image too small, creating new one")
        return None
    return image


def hide(
    input_path: PathType,
    output_path: PathType,
    password: Optional[str] = None,
) -> None:
    """Compress, optionally encrypt, and hide a file in a PNG image.

    An existing PNG at ``output_path`` that is large enough is reused as
    the cover; otherwise a new patterned image is created.
    """
    try:
        with open(input_path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise StegoError(f"failed to read input file: {exc}") from exc
    print(f"Input size: {len(data)} bytes")

    payload = zlib.compress(data, 9)
    print(f"Compressed size: {len(payload)} bytes")

    if password is not None:
        print("Encrypting with password")
        payload = encrypt(payload, derive_key(password))
        print(f"Encrypted size: {len(payload)} bytes")

    required_pixels = ((len(payload) + LENGTH_BYTES) * _SLOT + 2) // 3
    width, height = _cover_size(required_pixels)
    print(f"Creating {width}x{height} image")

    image = _reusable_image(output_path, required_pixels)
    if image is None:
        image = cover_image(width, height)
        print("Created new image")

    embed_data(image, payload)
    print("Data embedded successfully")

    try:
        image.save(output_path)
    except OSError as exc:
        raise StegoError(f"failed to save image: {exc}") from exc


def extract(
    image_path: PathType,
    output_path: PathType,
    password: Optional[str] = None,
) -> bytes:
    """Recover a hidden file from ``image_path`` and write it to ``output_path``.

    Returns the recovered contents.
    """
    try:
        image = Image.load(image_path)
    except ImageError as exc:
        raise StegoError(f"failed to load image: {exc}") from exc

    payload = extract_data(image)

    if is_encrypted(payload) and password is None:
        raise StegoError("hidden data is encrypted; a password is required")

    if password is not None:
        try:
            payload = decrypt(payload, derive_key(password))
        except DecryptionError as exc:
            raise StegoError(f"decryption failed: {exc}") from exc

    try:
        data = zlib.decompress(payload)
    except zlib.error as exc:
        raise StegoError(f"hidden data is corrupt: {exc}") from exc

    try:
        with open(output_path, "wb") as handle:
            handle.write(data)
    except OSError as exc:
        raise StegoError(f"failed to write output file: {exc}") from exc
    return data