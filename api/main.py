"""
FastAPI main application for the Library Book API.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import config as api_config
from api.models import CreateBookRequest, ErrorResponse, HealthResponse
from library.models import Book, PagedResult
from library.store import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, BookStore
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(
        log_level=api_config.log_level,
        log_format=api_config.log_format,
        log_file=api_config.log_file,
        debug=api_config.debug,
    )
    logger.info("Starting Library Book API")

    app.state.book_store = BookStore()
    logger.info("Book store initialized", book_count=app.state.book_store.count())

    yield

    # Shutdown
    logger.info("Shutting down Library Book API")


# Create FastAPI application
app = FastAPI(
    title=api_config.api_title,
    description="""
    A small REST API over an in-memory catalogue of books.

    ## Features

    * **Listing**: Books sorted by title then owner, with pagination
    * **Search**: Case-insensitive substring search on title or owner
    * **Management**: Create, fetch and delete books

    The catalogue lives in process memory and is re-seeded with three sample
    books on every start.
    """,
    version=api_config.api_version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


def get_book_store(request: Request) -> BookStore:
    """Return the store owned by the running application."""
    store = getattr(request.app.state, "book_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Book store not available"
        )
    return store


def parse_book_id(book_id: str) -> uuid.UUID:
    """Parse a path id, treating anything that is not a UUID as unknown."""
    try:
        return uuid.UUID(book_id)
    except ValueError:
        logger.info("Malformed book id", book_id=book_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with ID '{book_id}' not found"
        )


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            status_code=exc.status_code
        ).model_dump(),
        headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Report invalid requests as 400 Bad Request."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info("Request validation failed", path=request.url.path, errors=messages)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="Validation failed",
            detail="; ".join(messages),
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if api_config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(store: BookStore = Depends(get_book_store)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=api_config.api_version,
        book_count=store.count()
    )


# Books endpoints
@app.get("/books", response_model=PagedResult[Book], tags=["Books"])
def list_books(
    page: int = DEFAULT_PAGE,
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    store: BookStore = Depends(get_book_store)
):
    """
    Get one page of books sorted by title, then owner.

    - **page**: Page number (starts from 1; values below 1 mean 1)
    - **pageSize**: Items per page (values below 1 mean 10; capped at 100)
    """
    return store.get_page(page, page_size)


@app.get("/books/search", response_model=List[Book], tags=["Books"])
def search_books(
    q: Optional[str] = "",
    store: BookStore = Depends(get_book_store)
):
    """
    Search books by title or owner.

    - **q**: Case-insensitive substring; empty returns every book
    """
    return store.search(q)


@app.post(
    "/books",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
def create_book(
    payload: CreateBookRequest,
    response: Response,
    store: BookStore = Depends(get_book_store)
):
    """
    Create a book.

    - **title**: Required, trimmed, at most 200 characters
    - **owner**: Required, trimmed, at most 200 characters
    - **availability**: Optional flag, defaults to false
    """
    book = store.add(payload.title, payload.owner, payload.availability)
    response.headers["Location"] = app.url_path_for("get_book", book_id=str(book.id))
    logger.info("Book created", book_id=str(book.id))
    return book


@app.get("/books/{book_id}", response_model=Book, tags=["Books"])
def get_book(
    book_id: str,
    store: BookStore = Depends(get_book_store)
):
    """
    Get a single book by ID.

    - **book_id**: Book identifier (UUID)
    """
    book = store.get_by_id(parse_book_id(book_id))
    if book is None:
        logger.info("Book not found", book_id=book_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with ID '{book_id}' not found"
        )
    return book


@app.delete(
    "/books/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    tags=["Books"]
)
def delete_book(
    book_id: str,
    store: BookStore = Depends(get_book_store)
):
    """
    Delete a book by ID.

    - **book_id**: Book identifier (UUID)
    """
    if not store.delete(parse_book_id(book_id)):
        logger.info("Book not found for deletion", book_id=book_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with ID '{book_id}' not found"
        )
    logger.info("Book deleted", book_id=book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level=api_config.log_level.lower()
    )
