[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tug"
version = "0.1.0"
description = "A small container image builder driven by Tugfiles, with a command-line client and a build daemon"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["container", "image", "builder", "tugfile", "registry", "daemon"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
tug = "tug.cli:main"
tugd = "tug.daemon:main"

[tool.hatch.build.targets.wheel]
packages = ["tug"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
