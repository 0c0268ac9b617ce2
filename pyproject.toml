[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minicontainer"
version = "0.1.0"
description = "Building blocks for a small container runtime: memory-limit monitoring, log buffering, control messages and test workloads"
requires-python = ">=3.12"
dependencies = []
keywords = [
    "containers",
    "memory-limits",
    "rss",
    "bounded-buffer",
    "ioctl",
    "workloads",
    "scheduling",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: System :: Monitoring",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minicontainer-cpu-hog = "minicontainer.cpu_hog:main"
minicontainer-io-pulse = "minicontainer.io_pulse:main"
minicontainer-memory-hog = "minicontainer.memory_hog:main"

[tool.hatch.build.targets.wheel]
packages = ["minicontainer"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py312"

[tool.mypy]
python_version = "3.12"
warn_unused_ignores = true
