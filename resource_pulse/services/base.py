"""Helpers shared by all services."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from resource_pulse.exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    """
    Converts SQLAlchemy failures raised inside the block into app exceptions.

    Integrity violations (unique keys, foreign keys) become ConflictError;
    everything else becomes a generic DatabaseError with the driver error
    logged server-side only. Application exceptions pass through untouched.

    Usage:
        with translate_db_errors("create project"):
            db.add(project)
            await db.flush()
    """
    try:
        yield
    except IntegrityError as e:
        logger.warning("Integrity error during %s: %s", operation, e.orig)
        raise ConflictError(
            message=f"Could not {operation}: it conflicts with existing data",
        )
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, e, exc_info=True)
        raise DatabaseError(
            message=f"Could not {operation}. Please try again.",
            context={"error_type": type(e).__name__},
        )
