[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "csvtable"
version = "0.1.0"
description = "CSV tables with cell addressing, typed values, streaming, compression and a small query language"
requires-python = ">=3.10"
keywords = ["csv", "table", "spreadsheet", "parser", "gzip", "zstd", "encoding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Environment :: Console",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Text Processing :: General",
    "Topic :: Utilities",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
csvtable = "csvtable.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["csvtable"]

[tool.pytest.ini_options]
addopts = "-ra"
