"""Project metadata."""

PROJECT_NAME = "praetor"
__version__ = "0.1.0"
