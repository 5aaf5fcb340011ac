[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "influxline"
version = "0.1.0"
description = "Parse, build and serialise InfluxDB line protocol points"
requires-python = ">=3.10"
dependencies = []
keywords = ["influxdb", "line-protocol", "time-series", "metrics", "parser"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["influxline"]

[tool.hatch.build.targets.sdist]
include = ["influxline", "tests", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
