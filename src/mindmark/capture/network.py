"""Best-effort network reachability probe."""

from __future__ import annotations

import asyncio
import logging
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

logger = logging.getLogger(__name__)

DEFAULT_PROBE_URL = "https://www.gstatic.com/generate_204"


def _head(url: str, timeout: float) -> bool:
    request = Request(url, method="HEAD", headers={"Cache-Control": "no-cache"})  # noqa: S310
    try:
        with urlopen(request, timeout=timeout):  # noqa: S310
            return True
    except HTTPError as exc:
        # Any HTTP status means the host answered
        logger.debug("Reachability probe to %s answered %s", url, exc.code)
        return True
    except (URLError, TimeoutError, OSError) as exc:
        logger.debug("Reachability probe to %s failed: %s", url, exc)
        return False


async def is_online(timeout: float = 2.0, url: str = DEFAULT_PROBE_URL) -> bool:
    """Return True if ``url`` answers a HEAD request within ``timeout`` seconds.

    Never raises and never waits much past ``timeout``.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(_head, url, timeout), timeout)
    except TimeoutError:
        logger.debug("Reachability probe timed out after %.1fs", timeout)
        return False
