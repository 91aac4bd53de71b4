"""
In-memory library package.

This package contains:
- Book and PagedResult models
- Reader/writer lock
- Thread-safe book store with search and pagination
"""

__version__ = "1.0.0"
