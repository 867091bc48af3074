[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "craterlite"
version = "0.1.0"
description = "Toolchain specs, bot command parsing, agent tracking and GitHub helpers for a crate experiment server"
requires-python = ">=3.11"
dependencies = [
    "requests",
]
keywords = ["toolchain", "experiments", "github", "webhooks", "agents"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["craterlite"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
