"""Build container root filesystems from Tugfiles, with a client and a build daemon."""

__version__ = "0.1.0"