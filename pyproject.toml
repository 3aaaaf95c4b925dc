[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dlt645"
version = "0.1.0"
description = "Client for DL/T 645-2007 electricity meters over serial lines"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["dlt645", "dl/t 645", "meter", "rs485", "serial", "bcd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["dlt645"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
