[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "idz"
version = "0.1.0"
description = "Identity Disk files: text chunks, JSON metadata and float32 embeddings in one SQLite file, with cosine search and a curses explorer"
requires-python = ">=3.10"
dependencies = []
keywords = ["embeddings", "vector-search", "sqlite", "semantic-search", "cosine", "curses"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
idz-cli = "idz.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["idz"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
