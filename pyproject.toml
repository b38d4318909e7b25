[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "renoderun"
version = "0.2.0"
description = "Run embedded programs in the Renode emulator"
requires-python = ">=3.11"
dependencies = []
keywords = ["renode", "emulator", "embedded", "runner", "resc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
renode-run = "renoderun.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["renoderun"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
