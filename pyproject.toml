[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "smctools"
version = "1.0.0"
description = "Decode SMC key values, check Apple RTC memory checksums and list SMC firmware key tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["smc", "rtc", "firmware", "checksum", "nvram", "hardware"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rtcread = "smctools.rtc:main"
smcread = "smctools.smcread:main"

[tool.hatch.build.targets.wheel]
packages = ["smctools"]

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
