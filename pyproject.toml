[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kameo"
version = "0.19.2"
description = "Building blocks for fault-tolerant asyncio actors: mailboxes, signals, errors and a local registry"
requires-python = ">=3.10"
dependencies = []
keywords = ["actor", "asyncio", "mailbox", "concurrency", "registry"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["kameo"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
