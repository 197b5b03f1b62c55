[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cardrooms"
version = "0.1.0"
description = "Room, union and game-rule engine for Hong Zhong mahjong and three-card (San Zhang) poker tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["mahjong", "hongzhong", "sanzhang", "card games", "game rooms", "hu detection"]
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
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cardrooms"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
