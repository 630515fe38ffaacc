"""Go module index client.

The index is a stream of newline-delimited JSON objects::

    {"Path": "golang.org/x/text", "Version": "v0.3.0", "Timestamp": "2019-04-10T19:08:52.997264Z"}

Transport problems fail the whole load; a bad line is logged and skipped.
"""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from .config import DEFAULT_INDEX_URL
from .exceptions import DecodeError, TransportError
from .models import Entry, IndexRecord

logger = logging.getLogger(__name__)


def decode_line(line: str) -> Entry:
    """Decode one index line into an Entry.

    Raises:
        DecodeError: The line is not JSON or lacks a usable ``Path``.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        raise DecodeError(f"invalid JSON: {e.msg}", line=line) from e
    if not isinstance(payload, dict):
        raise DecodeError("index line is not a JSON object", line=line)
    try:
        return IndexRecord.model_validate(payload).to_entry()
    except ValidationError as e:
        raise DecodeError(f"invalid index record: {e.error_count()} error(s)", line=line) from e


async def _read_entries(response: httpx.Response, url: str) -> list[Entry]:
    entries: list[Entry] = []
    skipped = 0
    try:
        async for line in response.aiter_lines():
            if not line.strip():
                continue
            try:
                entries.append(decode_line(line))
            except DecodeError as e:
                skipped += 1
                logger.warning("Error decoding index line: %s", e)
    except httpx.HTTPError as e:
        raise TransportError(f"error reading Go index response: {e}", url=url) from e

    if skipped:
        logger.info("Skipped %d malformed index line(s)", skipped)
    logger.info("Loaded %d index entries from %s", len(entries), url)
    return entries


async def fetch_index(
    url: str = DEFAULT_INDEX_URL,
    *,
    timeout: float = 30.0,
    params: dict[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[Entry]:
    """Fetch and decode the module index.

    If *client* is None, a temporary AsyncClient is created for this request.

    Raises:
        TransportError: Connection failure, non-200 status or a broken stream.
    """

    async def _fetch(http: httpx.AsyncClient) -> list[Entry]:
        async with http.stream(
            "GET", url, params=params or None, timeout=timeout, follow_redirects=True
        ) as response:
            if response.status_code != 200:
                raise TransportError(
                    "received non-OK status from Go index: "
                    f"{response.status_code} {response.reason_phrase}".rstrip(),
                    url=url,
                    status_code=response.status_code,
                )
            return await _read_entries(response, url)

    logger.debug("Fetching index from %s (params=%s)", url, params)
    try:
        if client is not None:
            return await _fetch(client)
        async with httpx.AsyncClient() as tmp_client:
            return await _fetch(tmp_client)
    except httpx.HTTPError as e:
        raise TransportError(f"failed to fetch Go index: {e}", url=url) from e
