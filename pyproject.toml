[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pokerroom"
version = "0.1.0"
description = "A small Texas Hold'em room server over HTTP and WebSocket"
requires-python = ">=3.10"
keywords = ["poker", "texas-holdem", "websocket", "game-server", "aiohttp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "aiohttp>=3.9",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "pytest-asyncio>=0.21",
]

[project.scripts]
pokerroom = "pokerroom.app:main"

[tool.hatch.build.targets.wheel]
packages = ["pokerroom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
