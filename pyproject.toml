[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wtserver"
version = "0.1.0"
description = "WebTransport-over-HTTP/3 server layer: HTTP/3 frames, settings, stream headers, QPACK, requests, responses and sessions"
requires-python = ">=3.10"
dependencies = []
keywords = ["webtransport", "http3", "quic", "qpack", "server", "datagram"]
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
    "Framework :: AsyncIO",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["wtserver"]

[tool.hatch.build.targets.sdist]
include = ["wtserver", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
