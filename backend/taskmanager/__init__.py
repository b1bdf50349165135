"""IT Task Manager backend."""

__version__ = "0.1.0"
