import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .errors import MalformedCacheDataError, MissingFieldError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime


class TokenCache:
    """
    In-memory access tokens keyed by provider.

    A record is usable while ``expires_at`` is strictly in the future; an
    expired record is reported as absent and overwritten by the next refresh.
    """

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock
        self._records: Dict[str, AccessToken] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> Optional[str]:
        record = self._records.get(key)
        if record is None:
            return None
        if self._clock() >= record.expires_at:
            return None
        return record.token

    def set(self, key: str, token: str, ttl: Union[int, str]) -> str:
        seconds = self._parse_ttl(ttl)
        self._records[key] = AccessToken(token=token, expires_at=self._clock() + timedelta(seconds=seconds))
        logger.debug("cached access token for %s, expires in %ss", key, seconds)
        return token

    def store(self, key: str, data: Mapping[str, Any]) -> str:
        """Cache the token of an authentication response (BNI or SNAP field names)."""
        token = _first_string(data, "access_token", "accessToken")
        if token is None:
            raise MissingFieldError("access_token", "accessToken")

        ttl = data.get("expires_in", data.get("expiresIn"))
        if ttl is None:
            raise MissingFieldError("expires_in", "expiresIn")

        return self.set(key, token, ttl)

    def lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @staticmethod
    def _parse_ttl(ttl: Union[int, str]) -> int:
        if isinstance(ttl, bool):
            raise MalformedCacheDataError(f"invalid token lifetime: {ttl!r}")
        if isinstance(ttl, int):
            return ttl
        if isinstance(ttl, str):
            try:
                return int(ttl.strip())
            except ValueError as exc:
                raise MalformedCacheDataError(f"invalid token lifetime: {ttl!r}") from exc
        raise MalformedCacheDataError(f"invalid token lifetime: {ttl!r}")


def _first_string(data: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            return value
    return None
