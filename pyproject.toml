[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "treehouse"
version = "0.1.0"
description = "Development control tool that runs, watches and health-checks a set of local services"
requires-python = ">=3.10"
keywords = ["development", "services", "process-manager", "health-check", "tui"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
treehouse = "treehouse.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["treehouse"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
