[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fzterm"
version = "0.1.0"
description = "Building blocks for a terminal fuzzy finder: field tokenizing, text buffers, themes, key decoding and a light ANSI renderer"
requires-python = ">=3.10"
keywords = ["fuzzy", "finder", "terminal", "tui", "tokenizer", "ansi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Terminals",
    "Topic :: Utilities",
]
dependencies = [
    "regex",
    "wcwidth",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fzterm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
