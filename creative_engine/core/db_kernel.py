"""Run store operations in short-lived sessions with typed failures.

Every repository call goes through `db_read` or `db_write`. SQLAlchemy
errors come back as one of the `DbKernelError` subclasses so the lifecycle
manager and worker never import driver exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from time import monotonic
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from creative_engine.core.database import open_session

logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

_DROPPED_CONNECTION_MARKERS = (
    "connection is closed",
    "connection was closed",
    "server closed the connection unexpectedly",
    "connection refused",
)


class DbKernelError(RuntimeError):
    """A store operation failed."""


class TransientDbError(DbKernelError):
    """The connection dropped; the operation may succeed on another attempt."""


class ConflictError(DbKernelError):
    """A constraint rejected the write, e.g. an action for an unknown creative."""


class PermanentDbError(DbKernelError):
    pass


def is_dropped_connection(exc: Exception) -> bool:
    if isinstance(exc, (InterfaceError, OperationalError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _DROPPED_CONNECTION_MARKERS)


def classify_failure(exc: Exception) -> DbKernelError:
    if isinstance(exc, IntegrityError):
        return ConflictError(str(exc))
    if is_dropped_connection(exc):
        return TransientDbError(str(exc))
    return PermanentDbError(str(exc))


async def _run(
    fn: Callable[[AsyncSession], Awaitable[_ResultT]],
    *,
    operation_name: str,
    commit: bool,
    attempts: int,
    base_delay_seconds: float,
) -> _ResultT:
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    kind = "write" if commit else "read"
    started = monotonic()
    attempt = 0
    while True:
        attempt += 1
        try:
            async with open_session() as session:
                result = await fn(session)
                if commit:
                    await session.commit()
        except Exception as exc:
            failure = classify_failure(exc)
            will_retry = isinstance(failure, TransientDbError) and attempt < attempts
            logger.warning(
                "Store operation failed",
                extra={
                    "operation": operation_name,
                    "kind": kind,
                    "failure_class": type(failure).__name__,
                    "attempt": attempt,
                    "will_retry": will_retry,
                    "duration_ms": round((monotonic() - started) * 1000, 2),
                },
            )
            if not will_retry:
                raise failure from exc
            await asyncio.sleep(base_delay_seconds * attempt)
            continue

        logger.debug(
            "Store operation completed",
            extra={
                "operation": operation_name,
                "kind": kind,
                "attempt": attempt,
                "duration_ms": round((monotonic() - started) * 1000, 2),
            },
        )
        return result


async def db_read(
    fn: Callable[[AsyncSession], Awaitable[_ResultT]],
    *,
    operation_name: str,
) -> _ResultT:
    """Run a read once without committing."""
    return await _run(fn, operation_name=operation_name, commit=False, attempts=1, base_delay_seconds=0.0)


async def db_write(
    fn: Callable[[AsyncSession], Awaitable[_ResultT]],
    *,
    operation_name: str,
    attempts: int = 3,
    base_delay_seconds: float = 0.2,
) -> _ResultT:
    """Run a write in its own transaction, retrying dropped connections with linear backoff."""
    return await _run(
        fn,
        operation_name=operation_name,
        commit=True,
        attempts=attempts,
        base_delay_seconds=base_delay_seconds,
    )
