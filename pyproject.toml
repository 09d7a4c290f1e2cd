[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "keybot"
version = "1.0.0"
description = "A Discord bot that keeps a shared pool of game keys members can add, search, list and take."
requires-python = ">=3.10"
keywords = ["discord", "bot", "game keys", "steam", "gog", "slash commands"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "aiohttp>=3.8",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "pytest-asyncio>=0.21",
]

[project.scripts]
keybot = "keybot.bot:main"
keybot-db = "keybot.dbtools:main"

[tool.hatch.build.targets.wheel]
packages = ["keybot"]

[tool.hatch.build.targets.sdist]
include = ["keybot", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
