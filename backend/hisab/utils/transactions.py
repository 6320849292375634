from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hisab.errors import StorageFailure
from hisab.utils.log import get_logger

log = get_logger("storage")

_DEPTH_KEY = "hisab_unit_depth"


@contextmanager
def atomic(session: Session, operation: str) -> Iterator[Session]:
    """
    Run the block as one unit of work on ``session``.

    The outermost ``atomic`` commits once when the block finishes and rolls
    back on any exception. Nested ``atomic`` blocks (a service calling another
    service) join the outer unit instead of committing on their own, so a
    sale's balance update and stock decrements land together or not at all.

    SQLAlchemy errors are re-raised as ``StorageFailure``; ``changed`` is True
    only when the failure came from the final commit.
    Usage:
        with atomic(db, "complete sale"):
            ... DB work ...
    """
    depth = session.info.get(_DEPTH_KEY, 0)
    session.info[_DEPTH_KEY] = depth + 1
    try:
        if depth:
            yield session
            return

        committing = False
        try:
            yield session
            committing = True
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            log.error(f"{operation} failed (committing={committing}): {e}")
            raise StorageFailure(f"{operation} failed: {e}", changed=committing) from e
        except Exception:
            session.rollback()
            raise
    finally:
        session.info[_DEPTH_KEY] = depth


@contextmanager
def reading(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy errors raised by a read into ``StorageFailure``."""
    try:
        yield
    except SQLAlchemyError as e:
        log.error(f"{operation} failed: {e}")
        raise StorageFailure(f"{operation} failed: {e}") from e
