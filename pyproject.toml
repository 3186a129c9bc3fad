[build-system]
requires = ["hatchling>=1.18"]
build-backend = "hatchling.build"

[project]
name = "osdkit"
version = "0.1.0"
description = "Helpers for managing OpenShift Dedicated clusters: service log templates, organization queries, egress checks, packet captures and STS policies"
requires-python = ">=3.10"
keywords = [
    "openshift",
    "osd",
    "rosa",
    "sre",
    "servicelog",
    "sts",
    "packet-capture",
    "cli",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests>=2.28",
    "pyyaml>=6.0",
    "semver>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
osdkit = "osdkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["osdkit"]

[tool.hatch.build.targets.sdist]
include = ["osdkit", "tests", "pyproject.toml"]

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
