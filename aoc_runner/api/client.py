from __future__ import annotations
import logging
import os

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..errors import MissingTokenError, TransportError
from ..utils import puzzle_url

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://adventofcode.com"
USER_AGENT = "aoc-runner (+https://pypi.org/project/aoc-runner/)"


def _is_transient(exc: BaseException) -> bool:
    """Network failures and server errors are worth retrying; 4xx are not."""
    if not isinstance(exc, TransportError):
        return False
    return exc.status_code is None or exc.status_code >= 500


class AocClient:
    """Client for the Advent of Code website using a session cookie."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            token: Session cookie value (defaults to AOC_SESSION env var)
            base_url: Site root (defaults to AOC_BASE_URL or adventofcode.com)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        token = token or os.getenv("AOC_SESSION")
        if not token:
            raise MissingTokenError("No session token set. Use `aoc token` to set your session token.")
        self.base_url = base_url or os.getenv("AOC_BASE_URL") or DEFAULT_BASE_URL
        self.client = httpx.AsyncClient(
            cookies={"session": token},
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            transport=transport,
        )

    async def _send(self, method: str, url: str, **kwargs) -> str:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method} {url} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return response.text

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def fetch_input(self, year: int, day: int) -> str:
        """Download the puzzle input for a day."""
        url = f"{puzzle_url(self.base_url, year, day)}/input"
        logger.debug("Fetching %s", url)
        return await self._send("GET", url)

    async def submit_answer(self, year: int, day: int, part: int, answer: str) -> str:
        """
        Post an answer. Never retried: a duplicate post would count as a
        second guess on the remote side.
        """
        url = f"{puzzle_url(self.base_url, year, day)}/answer"
        logger.debug("Submitting %r to %s (level %d)", answer, url, part)
        return await self._send("POST", url, data={"level": str(part), "answer": answer})

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AocClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
