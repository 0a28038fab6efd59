[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hadoopstream"
version = "0.1.0"
description = "Typed mapper and reducer framework for Hadoop Streaming jobs"
requires-python = ">=3.10"
dependencies = []
keywords = ["hadoop", "streaming", "mapreduce", "mapper", "reducer"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hadoopstream-simple = "hadoopstream.cli:main"
hadoopstream-readlines = "hadoopstream.readlines:main"

[tool.hatch.build.targets.wheel]
packages = ["hadoopstream"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
