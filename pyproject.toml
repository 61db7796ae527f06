[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cnfsub"
version = "0.1.0"
description = "DIMACS CNF simplification and d-DNNF circuit structures for model counting"
requires-python = ">=3.10"
dependencies = []
keywords = ["cnf", "dimacs", "sat", "model counting", "d-dnnf", "knowledge compilation"]
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
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cnfsub"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
