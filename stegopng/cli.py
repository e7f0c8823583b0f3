"""Command-line interface for hiding and extracting files."""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import urllib.request
from typing import Callable, List, Optional, Sequence

from .stego import StegoError, extract, hide

USAGE = (
    "Usage:\n"
    "  Hide file:    stego hide <input_file> <output.png> [-p password]\n"
    "  Hide text:    stego hide -t <text> <output.png> [-p password]\n"
    "  Extract:      stego extract <image.png> <output_file> [-p password]\n"
    "  URL extract:  stego -u <url_to_png> -o <output_file> [-p password]\n"
)


def download_file(url: str, output_path: str) -> None:
    """Fetch ``url``, following redirects, and save the body to ``output_path``."""
    with urllib.request.urlopen(url) as response, open(output_path, "wb") as out:
        shutil.copyfileobj(response, out)


def _usage_failure() -> int:
    """Show the usage text and return the failing exit status."""
    sys.stdout.write(USAGE)
    return 1


def _run(action: Callable[..., object], *args: object) -> int:
    try:
        action(*args)
    except StegoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _extract_from_url(url: str, output_file: str, password: Optional[str]) -> int:
    try:
        fd, temp_png = tempfile.mkstemp(prefix="stego_", suffix=".png")
    except OSError as exc:
        print(f"Failed to create temp file: {exc}", file=sys.stderr)
        return 1
    os.close(fd)
    try:
        try:
            download_file(url, temp_png)
        except (OSError, ValueError):
            print("Failed to download URL", file=sys.stderr)
            return 1
        return _run(extract, temp_png, output_file, password)
    finally:
        os.remove(temp_png)


def _hide_text(text: str, output_file: str, password: Optional[str]) -> int:
    with tempfile.TemporaryDirectory() as workdir:
        temp_txt = os.path.join(workdir, "temp.txt")
        with open(temp_txt, "wb") as handle:
            handle.write(text.encode("utf-8", "surrogateescape"))
        return _run(hide, temp_txt, output_file, password)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line and return the exit status."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _usage_failure()

    password: Optional[str] = None
    output_file: Optional[str] = None
    url: Optional[str] = None
    for flag, value in zip(args, args[1:]):
        if flag == "-p":
            password = value
        elif flag == "-o":
            output_file = value
        elif flag == "-u":
            url = value

    if url is not None:
        if output_file is None:
            print("Error: -o <output_file> is required", file=sys.stderr)
            return _usage_failure()
        return _extract_from_url(url, output_file, password)

    if len(args) < 3:
        return _usage_failure()

    command = args[0]
    is_text = command == "hide" and args[1] == "-t"
    source = args[2] if is_text else args[1]

    for flag, value in zip(args[3:], args[4:]):
        if flag == "-p":
            password = value
            break

    if command == "hide":
        if is_text:
            if len(args) < 4:
                return _usage_failure()
            return _hide_text(source, args[3], password)
        return _run(hide, source, args[2], password)
    if command == "extract":
        return _run(extract, args[1], args[2], password)

    return _usage_failure()


if __name__ == "__main__":
    sys.exit(main())