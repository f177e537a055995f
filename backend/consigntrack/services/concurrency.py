# Overview: Transaction boundary for every mutating service operation.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class ConcurrencyError(Exception):
    """Raised when a unit of work keeps conflicting after the retry budget."""
    pass


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the version_id
    columns on the locked rows still reject a stale writer on flush.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute one read-modify-write unit of work and commit it.

    `func` must read everything it depends on, validate, mutate, and
    return; it must not commit. Retries the whole unit on OperationalError
    (deadlocks, locks) and StaleDataError (optimistic locking conflicts).
    Any other exception rolls the session back and propagates unchanged,
    so a failed operation leaves no partial writes.
    """
    if attempts is None:
        attempts = current_app.config.get("TX_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("TX_RETRY_BACKOFF_SECONDS", 0.1)

    for attempt in range(attempts):
        try:
            result = func()
            db.session.commit()
            return result
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            current_app.logger.warning(
                "Transaction conflict (attempt %d/%d): %s", attempt + 1, attempts, exc
            )
            if attempt >= attempts - 1:
                raise ConcurrencyError(
                    f"Concurrent update conflict persisted after {attempts} attempts; please retry"
                ) from exc
            if backoff_base:
                time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
    raise ConcurrencyError("Transaction was not attempted")
