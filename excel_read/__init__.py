"""Excel read: extract header-keyed rows and typed records from .xlsx files."""

__version__ = "0.1.0"
