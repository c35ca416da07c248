[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gbsplayer"
version = "0.1.0"
description = "Game Boy sound player toolkit: subsong and playlist logic, cartridge mappers, impulse tables, MIDI and register dump outputs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "gameboy",
    "gbs",
    "chiptune",
    "music",
    "midi",
    "playlist",
    "audio",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gbsplayer-impulse = "gbsplayer.impulsegen:main"

[tool.hatch.build.targets.wheel]
packages = ["gbsplayer"]

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
warn_unused_ignores = true
warn_redundant_casts = true
