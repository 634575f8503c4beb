[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chatplugins"
version = "0.1.0"
description = "Game, fortune and helper logic for group chat bots: tarot, wordle, marriage registry, sign-in scores, sleep tracking and more"
requires-python = ">=3.10"
keywords = ["chat", "bot", "tarot", "wordle", "plugins", "group chat", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
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
    "lxml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["chatplugins"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
