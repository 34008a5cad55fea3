"""mstodo - a command-line client for Microsoft To Do."""

__version__ = "0.1.0"
