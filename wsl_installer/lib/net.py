from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

import httpx

from ..errors import DownloadError

logger = logging.getLogger(__name__)

RETRY_DELAY_S = 2.0
RETRY_BACKOFF = 2.0
RETRYABLE_HTTP_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
CHUNK_SIZE = 1024 * 256


def download_file(
    url: str,
    dest: Path,
    *,
    retries: int = 3,
    timeout_s: float = 60.0,
    client: Optional[httpx.Client] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """Stream url to dest, retrying transient failures with exponential backoff.

    Retries on connection errors, timeouts and 429/5xx. Any other HTTP error is
    final. A partially written dest is removed before each retry and on failure.
    Raises DownloadError once attempts are exhausted.
    """

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout_s, follow_redirects=True)

    delay = RETRY_DELAY_S
    last_error = "no attempt made"
    try:
        for attempt in range(retries + 1):
            try:
                with client.stream("GET", url) as response:
                    if response.status_code in RETRYABLE_HTTP_STATUS_CODES:
                        last_error = f"HTTP {response.status_code}"
                    elif response.status_code >= 400:
                        raise DownloadError(f"Download of {url} failed: HTTP {response.status_code}")
                    else:
                        dest.parent.mkdir(parents=True, exist_ok=True)
                        with dest.open("wb") as f:
                            for chunk in response.iter_bytes(CHUNK_SIZE):
                                f.write(chunk)
                        logger.info("Downloaded %s -> %s (%d bytes)", url, dest, dest.stat().st_size)
                        return dest
            except (httpx.TimeoutException, httpx.TransportError) as e:
                last_error = str(e) or type(e).__name__

            dest.unlink(missing_ok=True)
            if attempt < retries:
                logger.warning(
                    "Download of %s failed: %s, retrying in %.1fs (%d/%d)",
                    url,
                    last_error,
                    delay,
                    attempt + 1,
                    retries + 1,
                )
                sleep(delay)
                delay *= RETRY_BACKOFF
    finally:
        if owns_client:
            client.close()

    raise DownloadError(f"Download of {url} failed after {retries + 1} attempts: {last_error}")
