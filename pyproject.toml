[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gmvstream"
version = "0.1.0"
description = "Media stream building blocks: RTP framing, reordering demux, MPEG-PS parsing and FLV/H.264 muxing"
requires-python = ">=3.10"
dependencies = []
keywords = ["rtp", "mpeg-ps", "pes", "flv", "h264", "amf0", "gb28181", "streaming"]
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
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gmvstream"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
