[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "patchrun"
version = "0.1.0"
description = "Building blocks for running a repo-mutating command in a disposable Git worktree: option parsing, prompts, colour output, run policy and permission-preserving copies."
requires-python = ">=3.10"
dependencies = []
keywords = ["git", "worktree", "patch", "diff", "options", "prompt", "copy"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["patchrun"]

[tool.hatch.build.targets.sdist]
include = ["patchrun", "tests", "pyproject.toml", "README.md"]

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
