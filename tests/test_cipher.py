import pytest

from stegopng.cipher import (
    DecryptionError,
    chacha20_block,
    decrypt,
    derive_key,
    encrypt,
    is_encrypted,
    poly1305_tag,
)

KEY = bytes(range(32))
NONCE = bytes(range(12))


@pytest.fixture(scope="module")
def derived_key():
    password = "password"
    return derive_key(password)


def test_chacha20_block_rfc_vector():
    nonce = bytes.fromhex("000000090000004a00000000")
    block = chacha20_block(KEY, 1, nonce)
    assert len(block) == 64
    assert block[:16] == bytes.fromhex("10f1e7e4d13b5915500fdd1fa32071c4")


def test_chacha20_block_counter_changes_output():
    assert chacha20_block(KEY, 1, NONCE) != chacha20_block(KEY, 2, NONCE)
    assert chacha20_block(KEY, 1, NONCE) == chacha20_block(KEY, 1, NONCE)


def test_chacha20_block_rejects_bad_sizes():
    with pytest.raises(ValueError):
        chacha20_block(b"short", 0, NONCE)
    with pytest.raises(ValueError):
        chacha20_block(KEY, 0, b"abc")


def test_poly1305_short_data_gives_pad():
    assert poly1305_tag(KEY, b"tiny") == KEY[16:]
    assert poly1305_tag(KEY, b"") == KEY[16:]


def test_poly1305_ignores_partial_tail():
    block = b"0123456789abcdef"
    assert poly1305_tag(KEY, block) == poly1305_tag(KEY, block + b"xyz")


def test_poly1305_depends_on_full_blocks():
    tag = poly1305_tag(KEY, b"A" * 32)
    assert len(tag) == 16
    assert tag != poly1305_tag(KEY, b"A" * 31 + b"B")


def test_derive_key_none_is_zero():
    assert derive_key(None) == bytes(32)


def test_derive_key_deterministic(derived_key):
    password = "password"
    assert len(derived_key) == 32
    assert derive_key(password) == derived_key


def test_derive_key_distinguishes_passwords(derived_key):
    password = "secret"
    other = derive_key(password)
    assert len(other) == 32
    assert other != derived_key


def test_derive_key_accepts_bytes(derived_key):
    assert derive_key(b"password") == derived_key


def test_encrypt_layout(derived_key):
    data = b"hello world, this is a message"
    blob = encrypt(data, derived_key, NONCE)
    assert blob.startswith(b"FERNET:")
    assert blob[7:19] == NONCE
    assert len(blob) == 7 + 12 + len(data) + 16
    stream = chacha20_block(derived_key, 1, NONCE)
    cipher = blob[19:-16]
    assert bytes(a ^ b for a, b in zip(cipher, stream)) == data
    poly_key = chacha20_block(derived_key, 0, NONCE)[:32]
    assert blob[-16:] == poly1305_tag(poly_key, cipher)


@pytest.mark.parametrize("size", [0, 1, 15, 16, 63, 64, 65, 200])
def test_round_trip(derived_key, size):
    data = bytes((i * 7 + 3) & 0xFF for i in range(size))
    assert decrypt(encrypt(data, derived_key, NONCE), derived_key) == data


def test_random_nonce_round_trip(derived_key):
    data = b"some payload bytes"
    first = encrypt(data, derived_key)
    second = encrypt(data, derived_key)
    assert first[7:19] != second[7:19]
    assert decrypt(first, derived_key) == data
    assert decrypt(second, derived_key) == data


def test_wrong_key_fails(derived_key):
    blob = encrypt(b"x" * 40, derived_key, NONCE)
    with pytest.raises(DecryptionError):
        decrypt(blob, derive_key(None))


def test_tampered_ciphertext_fails(derived_key):
    blob = bytearray(encrypt(b"y" * 40, derived_key, NONCE))
    blob[19] ^= 0x01
    with pytest.raises(DecryptionError):
        decrypt(bytes(blob), derived_key)


def test_malformed_input_fails():
    with pytest.raises(DecryptionError):
        decrypt(b"FERNET:short", KEY)
    with pytest.raises(DecryptionError):
        decrypt(b"NOTFERN" + bytes(40), KEY)


def test_encrypt_rejects_bad_nonce():
    with pytest.raises(ValueError):
        encrypt(b"data", KEY, b"123")


def test_is_encrypted():
    assert is_encrypted(encrypt(b"abc", KEY, NONCE)) is True
    assert is_encrypted(b"FERNET:") is True
    assert is_encrypted(b"FERNET") is False
    assert is_encrypted(b"plain data") is False