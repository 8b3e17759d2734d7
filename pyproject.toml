[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lodestar"
version = "0.1.0"
description = "Chess engine search core: transposition table, time management, search heuristics, UCI helpers and an evaluation tuner"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "chess",
    "chess-engine",
    "uci",
    "alpha-beta",
    "transposition-table",
    "time-management",
    "tuning",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lodestar"]

[tool.hatch.build.targets.sdist]
include = ["lodestar", "tests", "README.md", "pyproject.toml"]

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
