"""
Sliding-window rate limiter for sensitive auth operations.

Keyed by (operation class, client address). Each operation class (login,
register, password_reset) has its own window and threshold. Checks happen
before any business persistence is touched.
"""
import logging
import threading
import time
import zlib
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import Request
from sqlalchemy import and_, func

from app.core import config
from app.core.errors import RateLimitError
from app.db.models.rate_limit_hit import RateLimitHit

logger = logging.getLogger(__name__)

LOGIN = "login"
REGISTER = "register"
PASSWORD_RESET = "password_reset"


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    The first X-Forwarded-For hop is used only when TRUST_FORWARDED_FOR is
    set; otherwise the socket peer.
    """
    if config.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


class InMemoryRateLimitStore:
    """
    Per-process store: hit timestamps per key, guarded by lock shards so
    concurrent requests on different keys do not serialize on one lock.

    Keys whose window has emptied are dropped; each shard is swept for idle
    keys every ``sweep_every`` hits.
    """

    def __init__(self, shards: int = 16, sweep_every: int = 256):
        self._locks = [threading.Lock() for _ in range(shards)]
        self._hits: List[Dict[Tuple[str, str], List[float]]] = [{} for _ in range(shards)]
        self._calls = [0] * shards
        self._windows: List[Dict[Tuple[str, str], int]] = [{} for _ in range(shards)]
        self.sweep_every = sweep_every

    def _shard(self, key: Tuple[str, str]) -> int:
        return zlib.crc32(f"{key[0]}:{key[1]}".encode("utf-8")) % len(self._locks)

    def _sweep(self, index: int, now: float) -> None:
        hits, windows = self._hits[index], self._windows[index]
        idle = [key for key, stamps in hits.items() if not stamps or stamps[-1] <= now - windows[key]]
        for key in idle:
            del hits[key]
            del windows[key]

    def hit(self, operation: str, client_key: str, max_attempts: int, window_seconds: int, now: float) -> Optional[int]:
        """
        Record an attempt if allowed.

        Returns:
            None when allowed, otherwise seconds until the oldest hit leaves the window.
        """
        key = (operation, client_key)
        index = self._shard(key)
        with self._locks[index]:
            hits, windows = self._hits[index], self._windows[index]
            self._calls[index] += 1
            if self._calls[index] % self.sweep_every == 0:
                self._sweep(index, now)

            cutoff = now - window_seconds
            recent = [ts for ts in hits.get(key, ()) if ts > cutoff]
            if len(recent) >= max_attempts:
                hits[key] = recent
                windows[key] = window_seconds
                return int(recent[0] + window_seconds - now) + 1
            recent.append(now)
            hits[key] = recent
            windows[key] = window_seconds
            return None

    def tracked_keys(self) -> int:
        count = 0
        for lock, hits in zip(self._locks, self._hits):
            with lock:
                count += len(hits)
        return count

    def clear(self) -> None:
        for lock, hits, windows in zip(self._locks, self._hits, self._windows):
            with lock:
                hits.clear()
                windows.clear()


class DatabaseRateLimitStore:
    """
    Shared store for multi-process deployments. Uses its own short-lived
    session, separate from the request's unit of work.
    """

    def __init__(self, session_factory: Callable):
        self._session_factory = session_factory

    def hit(self, operation: str, client_key: str, max_attempts: int, window_seconds: int, now: float) -> Optional[int]:
        cutoff = now - window_seconds
        db = self._session_factory()
        try:
            scope = and_(RateLimitHit.operation == operation, RateLimitHit.client_key == client_key)
            db.query(RateLimitHit).filter(scope, RateLimitHit.hit_at <= cutoff).delete(synchronize_session=False)
            count, oldest = db.query(func.count(RateLimitHit.id), func.min(RateLimitHit.hit_at)).filter(scope).one()
            if count >= max_attempts:
                db.commit()
                return int(oldest + window_seconds - now) + 1
            db.add(RateLimitHit(operation=operation, client_key=client_key, hit_at=now))
            db.commit()
            return None
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def clear(self) -> None:
        db = self._session_factory()
        try:
            db.query(RateLimitHit).delete(synchronize_session=False)
            db.commit()
        finally:
            db.close()


def _build_store():
    if config.RATE_LIMIT_BACKEND == "database":
        from app.db.session import SessionLocal
        return DatabaseRateLimitStore(SessionLocal)
    return InMemoryRateLimitStore()


rate_limit_store = _build_store()


def check_rate_limit(
    request: Request,
    operation: str,
    max_requests: Optional[int] = None,
    window_seconds: Optional[int] = None,
) -> None:
    """
    Check if client has exceeded the limit for an operation class.

    Raises:
        RateLimitError: 429 with a retry-after hint
    """
    max_requests = max_requests or config.AUTH_RATE_LIMIT_MAX_ATTEMPTS
    window_seconds = window_seconds or config.AUTH_RATE_LIMIT_WINDOW_SECONDS
    ip = get_client_ip(request)

    retry_after = rate_limit_store.hit(operation, ip, max_requests, window_seconds, time.time())
    if retry_after is not None:
        logger.warning(f"Rate limit exceeded: operation={operation}, ip={ip}, limit={max_requests}/{window_seconds}s")
        raise RateLimitError(retry_after=retry_after)

    logger.debug(f"Rate limit check passed: operation={operation}, ip={ip}")


def rate_limited(operation: str):
    """Dependency factory: ``Depends(rate_limited(LOGIN))``."""
    def dependency(request: Request) -> None:
        check_rate_limit(request, operation)
    return dependency


def reset_rate_limits() -> None:
    rate_limit_store.clear()
