[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "colmena"
version = "0.5.0.dev0"
description = "Building blocks of a NixOS deployment tool: job monitoring, goals, limits, options, Nix expressions and flakes"
requires-python = ">=3.10"
dependencies = []
keywords = ["nix", "nixos", "deployment", "flakes", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["colmena"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
