[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghaflow"
version = "0.1.0"
description = "Action and step models, the github context, expression parsing and value rules, and workflow command handling for GitHub Actions style workflows"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["github-actions", "workflow", "ci", "expressions", "action.yml"]
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
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ghaflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
