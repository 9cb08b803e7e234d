"""Atomic, retried execution of compound mutations.

`transact` runs a unit of work inside one database transaction while holding
the per-event Redis lock, commits once, and retries the whole unit with
exponential backoff when it raises `ConflictError`.
"""

import random
import time
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

import redis
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core import config
from app.core.exceptions import BackendUnavailableError, ConflictError, DomainError

T = TypeVar("T")


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(config.get_redis_url(), decode_responses=True)


@contextmanager
def event_lock(event_id: int | None) -> Iterator[None]:
    """Serialize writers of one event across processes."""
    if event_id is None or not config.BOOKING_LOCK_ENABLED:
        yield
        return

    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=config.BOOKING_LOCK_TIMEOUT,
        blocking_timeout=config.BOOKING_LOCK_BLOCKING_TIMEOUT,
    )
    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.LockError as exc:
        raise ConflictError("Could not acquire lock, please try again.") from exc
    except redis.exceptions.RedisError as exc:
        logger.opt(exception=exc).error(f"Redis unavailable while locking event {event_id}")
        raise BackendUnavailableError() from exc
    if not acquired:
        raise ConflictError("Could not acquire lock, please try again.")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # lock expired while held; the version check already guarded the write
            logger.warning(f"Lock for event {event_id} expired before release")
        except redis.exceptions.RedisError as exc:
            # the work already committed; the lock times out on its own
            logger.warning(f"Could not release lock for event {event_id}: {exc}")


def transact(
    db: Session,
    work: Callable[[Session], T],
    *,
    lock_key: int | None = None,
    max_attempts: int | None = None,
    backoff: float | None = None,
    label: str = "transaction",
) -> T:
    attempts = max_attempts or config.BOOKING_MAX_ATTEMPTS
    delay = config.BOOKING_RETRY_BACKOFF if backoff is None else backoff

    for attempt in range(1, attempts + 1):
        try:
            with event_lock(lock_key):
                try:
                    result = work(db)
                    db.commit()
                except BaseException:
                    db.rollback()
                    raise
            return result
        except ConflictError:
            if attempt >= attempts:
                logger.warning(f"{label} gave up after {attempt} conflicting attempts")
                raise
            pause = delay * (2 ** (attempt - 1)) * (1 + random.random())
            logger.warning(f"{label} conflicted (attempt {attempt}/{attempts}), retrying in {pause:.3f}s")
            time.sleep(pause)
        except DomainError:
            raise
        except SQLAlchemyError as exc:
            logger.opt(exception=exc).error(f"{label} failed against the database")
            raise BackendUnavailableError() from exc

    raise ConflictError()
