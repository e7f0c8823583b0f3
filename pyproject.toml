[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stegopng"
version = "1.0.0"
description = "Hide files and text in the low bits of PNG images, optionally encrypted with a password"
requires-python = ">=3.10"
dependencies = []
keywords = ["steganography", "png", "lsb", "chacha20", "poly1305", "hide", "extract"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
stego = "stegopng.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["stegopng"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
