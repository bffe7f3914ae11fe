[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "n7sim"
version = "0.1.0"
description = "A simulated teaching kernel: console, paging, descriptor tables, interrupts, timer, system calls and a small C-style runtime library."
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "simulation", "paging", "x86", "printf", "teaching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
n7sim = "n7sim.kernel:main"

[tool.hatch.build.targets.wheel]
packages = ["n7sim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
