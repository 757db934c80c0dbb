[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvtool"
version = "0.1.1"
description = "Ruby version management: discover, pin, install and activate Ruby interpreters"
requires-python = ">=3.10"
keywords = ["ruby", "version-manager", "rubies", "shell", "environment"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rv = "rvtool.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rvtool"]

[tool.pytest.ini_options]
addopts = "-ra"
