[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sv2upstream"
version = "1.0.0"
description = "Pool-facing side of a Stratum V1 to V2 mining translator proxy: channel setup, job relay and share submission"
requires-python = ">=3.10"
dependencies = []
keywords = ["stratum", "mining", "bitcoin", "protocol", "proxy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Topic :: Internet :: Proxy Servers",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["sv2upstream"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
