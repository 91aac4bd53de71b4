"""
Thread-safe in-memory book store.

The store owns the only copy of the book collection. Reads run concurrently
under a shared lock; ``add`` and ``delete`` take the lock exclusively, so a
reader always sees the collection either fully before or fully after a write.
"""

import uuid
from typing import Dict, List, Optional, Tuple

import structlog

from library.locking import ReaderWriterLock
from library.models import Book, PagedResult

logger = structlog.get_logger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SAMPLE_BOOKS: Tuple[Tuple[str, str, bool], ...] = (
    ("The Pragmatic Programmer", "Andy", True),
    ("Clean Code", "Robert", False),
    ("Design Patterns", "Erich", True),
)


def normalize_query(query: Optional[str]) -> str:
    """Treat None as empty, strip surrounding whitespace and case-fold."""
    return (query or "").strip().casefold()


def normalize_paging(page: int, page_size: int) -> Tuple[int, int]:
    """
    Clamp paging arguments into their valid ranges.

    Args:
        page: Requested 1-based page; values <= 0 become 1
        page_size: Requested size; values <= 0 become 10, values above 100 become 100

    Returns:
        Tuple of (page, page_size) actually used
    """
    if page <= 0:
        page = DEFAULT_PAGE
    if page_size <= 0:
        page_size = DEFAULT_PAGE_SIZE
    elif page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page, page_size


class BookStore:
    """In-memory repository of books with search and pagination."""

    def __init__(self, seed: bool = True):
        self._books: Dict[uuid.UUID, Book] = {}
        self._lock = ReaderWriterLock()

        if seed:
            for title, owner, availability in SAMPLE_BOOKS:
                self.add(title, owner, availability)

    def add(self, title: str, owner: str, availability: bool) -> Book:
        """
        Create and store a new book.

        Inputs are stored as given; trimming and validation belong to the caller.

        Returns:
            The created book with a freshly generated id
        """
        book = Book(id=uuid.uuid4(), title=title, owner=owner, availability=availability)
        with self._lock.write_lock():
            self._books[book.id] = book
        logger.debug("Book added", book_id=str(book.id), title=title)
        return book

    def get_by_id(self, book_id: uuid.UUID) -> Optional[Book]:
        """Return the book with ``book_id``, or None if it does not exist."""
        with self._lock.read_lock():
            return self._books.get(book_id)

    def delete(self, book_id: uuid.UUID) -> bool:
        """Remove a book. Returns False when no book has that id."""
        with self._lock.write_lock():
            removed = self._books.pop(book_id, None)
        if removed is None:
            return False
        logger.debug("Book deleted", book_id=str(book_id))
        return True

    def search(self, query: Optional[str]) -> List[Book]:
        """
        Find books whose title or owner contains ``query``, ignoring case.

        An empty, whitespace-only or None query matches every book.

        Returns:
            New list sorted by title, then owner
        """
        normalized = normalize_query(query)
        with self._lock.read_lock():
            matches = [book for book in self._books.values() if book.matches(normalized)]
        return sorted(matches, key=Book.sort_key)

    def get_page(self, page: int, page_size: int) -> PagedResult[Book]:
        """
        Return one page of the collection sorted by title, then owner.

        A page past the end yields no items but still reports accurate totals.
        """
        page, page_size = normalize_paging(page, page_size)
        with self._lock.read_lock():
            snapshot = list(self._books.values())

        total_count = len(snapshot)
        start = (page - 1) * page_size
        items = sorted(snapshot, key=Book.sort_key)[start:start + page_size]

        return PagedResult[Book](
            items=items,
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=PagedResult.count_pages(total_count, page_size),
        )

    def count(self) -> int:
        """Number of books currently stored."""
        with self._lock.read_lock():
            return len(self._books)
