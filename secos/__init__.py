"""Models of a small kernel's filesystems, drivers, console and x86 descriptor tables."""

__version__ = "0.1.0"