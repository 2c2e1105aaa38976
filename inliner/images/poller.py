"""Drive an asynchronous image job until it completes.

The remote API has no push notification. A 2xx carrying
``mediaAsset.data`` means done, a 202 or a payload-less 2xx means not yet,
and an explicit ``FAILED`` status means the job will never finish.
"""

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from inliner.images.client import InlinerClient
from inliner.images.exceptions import (
    GenerationCancelledError,
    GenerationFailedError,
    GenerationTimeoutError,
)

logger = logging.getLogger(__name__)

FAILED_STATUS = "FAILED"


@dataclass(frozen=True)
class Ready:
    data: bytes


@dataclass(frozen=True)
class Pending:
    reason: str = ""


@dataclass(frozen=True)
class Failed:
    message: str


PollOutcome = Ready | Pending | Failed


@dataclass(frozen=True)
class PollResult:
    data: bytes
    attempts: int


def _failed_status(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    statuses = [body.get("status")]
    asset = body.get("mediaAsset")
    if isinstance(asset, dict):
        statuses.append(asset.get("status"))
    return any(
        isinstance(s, str) and s.upper() == FAILED_STATUS for s in statuses
    )


def decode_data_url(data_url: str) -> bytes:
    """Decode ``data:image/png;base64,<payload>``."""
    _, sep, payload = data_url.partition(",")
    if not sep:
        raise ValueError("data URL has no payload")
    return base64.b64decode(payload, validate=True)


class GenerationPoller:
    def __init__(
        self,
        client: InlinerClient,
        max_attempts: int = 60,
        interval: float = 3.0,
    ) -> None:
        self.client = client
        self.max_attempts = max_attempts
        self.interval = interval

    async def interpret(self, response: httpx.Response) -> PollOutcome:
        """Classify one status response."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if _failed_status(body):
            message = body.get("message") or body.get("error") or response.text
            return Failed(f"API error {response.status_code}: {message}")

        if response.status_code == 202:
            return Pending("accepted")
        if not response.is_success:
            return Pending(f"HTTP {response.status_code}")
        if not isinstance(body, dict):
            return Pending("malformed response")

        asset = body.get("mediaAsset")
        data = asset.get("data") if isinstance(asset, dict) else None
        if not data or not isinstance(data, str):
            return Pending("no payload")

        if data.startswith("data:"):
            try:
                return Ready(decode_data_url(data))
            except (ValueError, binascii.Error):
                return Pending("undecodable payload")
        try:
            return Ready(await self.client.fetch_bytes(data))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return Pending(f"payload fetch failed: {e}")

    async def poll(
        self,
        path: str,
        query: str = "",
        cancel: asyncio.Event | None = None,
    ) -> PollResult:
        """Poll the status endpoint for ``path`` until the image is ready.

        Args:
            path: Resource path, e.g. ``project/happy-duck_800x600.png``.
            query: Query string carried over from the source URL.
            cancel: Setting this event stops the loop before the next attempt.

        Raises:
            GenerationFailedError: The job reported a terminal failure.
            GenerationTimeoutError: All attempts were used up.
            GenerationCancelledError: ``cancel`` was set.
        """
        for attempt in range(1, self.max_attempts + 1):
            if cancel is not None and cancel.is_set():
                raise GenerationCancelledError(path, attempt - 1)

            try:
                response = await self.client.request_status(path, query)
                outcome = await self.interpret(response)
            except httpx.HTTPError as e:
                outcome = Pending(f"transport error: {e}")

            match outcome:
                case Ready(data=data):
                    logger.info(
                        "Image %s ready after %d attempt(s)", path, attempt
                    )
                    return PollResult(data=data, attempts=attempt)
                case Failed(message=message):
                    logger.warning("Image %s failed: %s", path, message)
                    raise GenerationFailedError(message, path)
                case Pending(reason=reason):
                    logger.debug(
                        "Image %s pending (attempt %d/%d): %s",
                        path,
                        attempt,
                        self.max_attempts,
                        reason,
                    )

            await self._wait(cancel)

        if cancel is not None and cancel.is_set():
            raise GenerationCancelledError(path, self.max_attempts)

        elapsed = self.max_attempts * self.interval
        logger.warning("Image %s timed out after %gs", path, elapsed)
        raise GenerationTimeoutError(path, elapsed)

    async def _wait(self, cancel: asyncio.Event | None) -> None:
        if cancel is None:
            await asyncio.sleep(self.interval)
            return
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self.interval)
        except TimeoutError:
            pass
