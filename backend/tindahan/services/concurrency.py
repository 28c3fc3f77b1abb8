# Overview: Service-layer operations for concurrency; one atomic read-validate-write unit per operation.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import TransactionAbortedError
from ..extensions import db

RETRYABLE_ERRORS = (OperationalError, StaleDataError, IntegrityError)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write() serializes
    writers there instead.
    """
    return query.with_for_update()


def begin_write() -> None:
    """
    Take the database write lock up front on SQLite.

    Every read inside the unit then sees a state no other writer can change
    before commit. Other dialects rely on lock_for_update and version_id.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks), StaleDataError
    (optimistic locking conflicts) and IntegrityError (two writers creating
    the same keyed row). The whole operation is re-run, reads included.
    Raises TransactionAbortedError once attempts are exhausted.
    """
    if attempts is None:
        attempts = current_app.config.get("TRANSACTION_RETRY_ATTEMPTS", 3)

    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise TransactionAbortedError(
                    "The transaction could not be completed. Please try again.",
                    details={"attempts": attempts, "cause": type(exc).__name__},
                ) from exc
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise


def atomic(func, *, attempts: int | None = None):
    """
    Run func() as one atomic unit: write lock, reads, validation, writes, commit.

    Any exception rolls the whole unit back. func must do all of its reads
    before its writes and must not commit itself.
    """
    def _op():
        begin_write()
        result = func()
        db.session.commit()
        return result

    return run_with_retry(_op, attempts=attempts)
