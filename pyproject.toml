[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "modmqttgw"
version = "0.1.0"
description = "Building blocks of a Modbus to MQTT gateway: register ranges, poll scheduling, watchdog, configuration and converter specifications"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["modbus", "mqtt", "gateway", "iot", "home-automation", "rtu", "tcp"]
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
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["modmqttgw"]

[tool.hatch.build.targets.sdist]
include = ["modmqttgw", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
