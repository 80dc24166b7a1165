[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "secos"
version = "0.1.0"
description = "Models of a small hobby kernel's filesystems, drivers and x86 descriptor tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "ramfs", "vfs", "ext2", "fat32", "framebuffer", "gdt", "idt", "tss"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["secos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
