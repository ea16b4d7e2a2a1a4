"""
Translation of driver failures into the domain error taxonomy.

Connection loss, statement timeouts and pool exhaustion all surface as
DatastoreError, which callers treat as retryable. Integrity violations are
left alone; the service that issued the write decides what they mean.
"""

import asyncio
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.errors import DatastoreError
from worldkernel.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def datastore_call(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Decorate an async service method so I/O failures raise DatastoreError."""

    @wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except IntegrityError:
            raise
        except (DBAPIError, PoolTimeoutError, TimeoutError, asyncio.TimeoutError) as exc:
            logger.exception(
                "Datastore call failed",
                extra={"operation": func.__qualname__},
            )
            raise DatastoreError("The datastore is unavailable, please retry") from exc

    return wrapper


@datastore_call
async def commit(session: AsyncSession) -> None:
    """Commit the request's unit of work before the response is built."""
    await session.commit()
