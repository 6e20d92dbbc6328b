[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "framedot"
version = "0.1.0"
description = "A small frame-loop engine with a command-queue software rasterizer, input handling, a minimal ECS and a curses terminal output adapter"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "game-loop",
    "software-renderer",
    "rasterizer",
    "ecs",
    "pixels",
    "terminal",
    "curses",
    "thread-pool",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
framedot-smoke = "framedot.smoke:main"
framedot-term-demo = "framedot.terminal:main"

[tool.hatch.build.targets.wheel]
packages = ["framedot"]

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
