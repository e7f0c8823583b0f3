# stegopng

Hide a file or a piece of text inside a PNG image and get it back later.
The payload is zlib-compressed, optionally encrypted with a password, and
written into the two lowest bits of the image's colour channels.

## Installation

```
pip install .
```

This installs the `stego` command. The package has no dependencies outside
the standard library. To run the tests, install the `test` extra
(`pip install .[test]`) and run `pytest`.

## Command line

Hide a file:

```
stego hide notes.txt cover.png
stego hide notes.txt cover.png -p password
```

Hide a piece of text given on the command line:

```
stego hide -t "meet at noon" cover.png -p password
```

Extract what was hidden:

```
stego extract cover.png recovered.txt
stego extract cover.png recovered.txt -p password
```

Download a PNG and extract from it in one step (`-o` is required):

```
stego -u https://example.com/picture.png -o recovered.txt -p password
```

The command exits with status 0 on success and 1 on failure. Hiding prints
its progress (input, compressed and encrypted sizes, image size) to standard
output; errors are reported on standard error. Wrong or missing arguments
print the usage text.

If the output image of `stego hide` already exists, can be loaded and has at
least as many pixels as the payload needs, the data is written into it;
otherwise a new image just big enough for the payload is created, filled with
a simple pattern whose low bits are clear.

## Python API

```python
from stegopng.stego import hide, extract

password = "password"
hide("notes.txt", "cover.png", password)
data = extract("cover.png", "recovered.txt", password)
```

`extract` writes the recovered file and also returns its contents. Pass
`None` as the password to store the data unencrypted. Both functions raise
`stegopng.stego.StegoError` on failure: for example when the input cannot be
read, the payload does not fit, the hidden data is encrypted and no password
is given, or the password is wrong.

Lower-level pieces are available as well:

- `stegopng.image.Image` — an RGB image (`width`, `height`, `data` with 3
  bytes per pixel) with `Image.blank`, `Image.load`, `Image.from_png_bytes`
  and `Image.save`. Decoding problems raise `stegopng.image.ImageError`.
- `stegopng.png.encode_png` and `stegopng.png.write_png` — produce a minimal
  8-bit RGB PNG from raw pixel bytes.
- `stegopng.stego.embed_byte`, `extract_byte`, `embed_data`, `extract_data`,
  `capacity` and `cover_image` — put bytes into an image's low bits, read
  them back, and build a patterned cover image.
- `stegopng.cipher.encrypt`, `decrypt`, `derive_key`, `is_encrypted`,
  `chacha20_block` and `poly1305_tag` — the ChaCha20 and Poly1305 based
  encryption used for password-protected payloads. `decrypt` raises
  `stegopng.cipher.DecryptionError` when the data is malformed or its tag
  does not match.

## Format

Each hidden byte occupies four consecutive channel values, two bits in each.
The first four hidden bytes hold the payload length (little-endian), followed
by the payload. An encrypted payload starts with the marker `FERNET:`, then a
12-byte nonce, the ciphertext and a 16-byte tag.

## Limitations

- Loading expects the IHDR chunk to be followed directly by one IDAT chunk
  holding all the image data. The data is read as 8-bit RGB and scanline
  filters are dropped rather than applied, so only unfiltered RGB images such
  as those this tool writes come back correctly.
- The tag covers only the whole 16-byte blocks of the ciphertext; the marker,
  the nonce and a trailing partial block are not authenticated.
- The password-based key derivation is a simple home-grown scheme and runs
  100,000 rounds in pure Python, so it takes a moment; treat the encryption as
  a way to keep casual readers out, not as strong protection.