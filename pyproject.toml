[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "j1939stack"
version = "1.0.0"
description = "SAE J1939 and ISO 11783-7 protocol stack for CAN bus ECUs"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "j1939",
    "sae-j1939",
    "iso11783",
    "isobus",
    "can",
    "can-bus",
    "ecu",
    "diagnostics",
    "transport-protocol",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN) :: J1939",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["j1939stack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
