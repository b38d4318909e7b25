"""Generate Renode scripts for embedded executables and run them in Renode."""

__version__ = "0.2.0"