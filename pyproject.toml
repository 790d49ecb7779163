[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robotica-remote"
version = "0.1.0"
description = "Button remote for a home automation system driven over MQTT"
requires-python = ">=3.10"
keywords = ["home automation", "mqtt", "remote", "buttons", "lights", "debounce"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]
dependencies = [
    "paho-mqtt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
robotica-remote = "robotica_remote.app:main"

[tool.hatch.build.targets.wheel]
packages = ["robotica_remote"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
