"""Hide files and text in the low bits of PNG images, optionally encrypted."""

__version__ = "1.0.0"