"""
FastAPI RESTful API for the library book catalogue.

This module provides a REST API for:
- Paginated book listing
- Case-insensitive search by title or owner
- Creating, fetching and deleting books
"""
