import pytest

from stegopng.cli import download_file, main

TEXT = "This is test data that will be hidden and extracted"


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_too_few_arguments(capsys):
    assert main(["hide", "only_one"]) == 1
    assert "stego hide <input_file> <output.png>" in capsys.readouterr().out


def test_unknown_command(tmp_path, capsys):
    assert main(["bogus", str(tmp_path / "a"), str(tmp_path / "b")]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_hide_and_extract_file(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text(TEXT)
    image = tmp_path / "out.png"
    extracted = tmp_path / "extracted.txt"
    assert main(["hide", str(source), str(image)]) == 0
    assert main(["extract", str(image), str(extracted)]) == 0
    assert extracted.read_text() == TEXT


def test_hide_text_with_password(tmp_path):
    image = tmp_path / "out.png"
    extracted = tmp_path / "extracted.txt"
    assert main(["hide", "-t", TEXT, str(image), "-p", "secret"]) == 0
    assert main(["extract", str(image), str(extracted)]) == 1
    assert main(["extract", str(image), str(extracted), "-p", "secret"]) == 0
    assert extracted.read_text() == TEXT


def test_wrong_password_fails(tmp_path, capsys):
    source = tmp_path / "in.txt"
    source.write_text(TEXT)
    image = tmp_path / "out.png"
    assert main(["hide", str(source), str(image), "-p", "secret"]) == 0
    code = main(["extract", str(image), str(tmp_path / "x.txt"), "-p", "password"])
    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_hide_text_missing_output(capsys):
    assert main(["hide", "-t", TEXT]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_missing_input_fails(tmp_path):
    assert main(["hide", str(tmp_path / "nope"), str(tmp_path / "o.png")]) == 1


def test_url_mode_requires_output(capsys):
    assert main(["-u", "file:///nowhere.png"]) == 1
    err = capsys.readouterr().err
    assert "Error: -o <output_file> is required" in err


def test_url_mode_extracts(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text(TEXT)
    image = tmp_path / "out.png"
    assert main(["hide", str(source), str(image)]) == 0
    extracted = tmp_path / "from_url.txt"
    assert main(["-u", image.as_uri(), "-o", str(extracted)]) == 0
    assert extracted.read_text() == TEXT


def test_url_mode_download_failure(tmp_path, capsys):
    missing = (tmp_path / "missing.png").as_uri()
    assert main(["-u", missing, "-o", str(tmp_path / "x.txt")]) == 1
    assert "Failed to download URL" in capsys.readouterr().err


def test_download_file_copies_contents(tmp_path):
    source = tmp_path / "src.bin"
    source.write_bytes(b"\x00\x01payload\xff")
    target = tmp_path / "dst.bin"
    download_file(source.as_uri(), str(target))
    assert target.read_bytes() == b"\x00\x01payload\xff"


def test_download_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        download_file((tmp_path / "absent").as_uri(), str(tmp_path / "out"))