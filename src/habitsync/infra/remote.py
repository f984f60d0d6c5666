"""HTTP implementation of the remote habit log store."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Optional

import aiohttp

from ..errors import RemoteError
from ..models.habit import HabitEntry, LogRequest

logger = logging.getLogger("habitsync.remote")


class HttpRemoteLogStore:
    """aiohttp client for the habits API.

    ``GET habits?date=YYYY-MM-DD`` lists a day's habits and
    ``POST habits/log`` records a value. Every failure surfaces as
    ``RemoteError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        if not base_url:
            raise ValueError("HttpRemoteLogStore requires a base URL")
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpRemoteLogStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch_day(self, day: date) -> list[HabitEntry]:
        url = self._url("habits")
        payload = await self._request("GET", url, params={"date": day.isoformat()})
        if not isinstance(payload, list):
            raise RemoteError(f"Expected a list of habits from {url}, got {type(payload).__name__}")
        entries = [HabitEntry.from_payload(item) for item in payload]
        logger.debug("Fetched %d habits for %s", len(entries), day)
        return entries

    async def append_log(self, habit_id: int, day: date, value: float) -> None:
        body = LogRequest(habit_id=habit_id, day=day, value=value).to_payload()
        await self._request("POST", self._url("habits/log"), json=body, expect_body=False)
        logger.debug("Logged habit %s on %s = %s", habit_id, day, value)

    async def _request(self, method: str, url: str, *, expect_body: bool = True, **kwargs) -> Any:
        session = self._get_session()
        try:
            async with session.request(method, url, **kwargs) as response:
                if not 200 <= response.status < 300:
                    reason = response.reason or ""
                    raise RemoteError(f"HTTP {response.status} {reason}".strip() + f" from {url}")
                if not expect_body:
                    return None
                return await response.json(content_type=None)
        except RemoteError:
            raise
        except asyncio.TimeoutError as exc:
            raise RemoteError(f"Request to {url} timed out") from exc
        except aiohttp.ClientError as exc:
            raise RemoteError(str(exc)) from exc
        except ValueError as exc:
            raise RemoteError(f"Malformed response from {url}: {exc}") from exc


__all__ = ["HttpRemoteLogStore"]
