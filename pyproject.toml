[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oedoana"
version = "0.1.0"
description = "Raw module decoders, Brho reconstruction, hit processing and analysis helpers for OEDO beam-line experiment data"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "nuclear physics",
    "data acquisition",
    "decoder",
    "brho",
    "spectrometer",
    "GET electronics",
    "analysis",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oedoana-analysis = "oedoana.analysis:main"

[tool.hatch.build.targets.wheel]
packages = ["oedoana"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
