[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "confscope"
version = "0.1.0"
description = "Slice srcML documents to find which functions and loops a configuration variable influences"
requires-python = ">=3.10"
dependencies = []
keywords = ["srcml", "static analysis", "program slicing", "configuration", "xml"]
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
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["confscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
