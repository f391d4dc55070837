[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "blemodem"
version = "0.1.0"
description = "In-memory state and event encoding for a BLE peripheral modem: GAP state, bonding, connections, GATT registry and advertising control"
requires-python = ">=3.10"
dependencies = []
keywords = ["ble", "bluetooth", "gatt", "gap", "modem", "advertising", "bonding"]
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
    "Topic :: Communications",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["blemodem"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
