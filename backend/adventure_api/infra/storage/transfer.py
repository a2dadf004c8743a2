"""Raw photo byte transfer to presigned upload URLs."""
import logging
from typing import Optional

import httpx

from adventure_api.domain.adventure.repositories import PhotoTransfer

logger = logging.getLogger(__name__)


class HttpPhotoTransfer(PhotoTransfer):
    """PUTs bytes with httpx; raises ``httpx.HTTPError`` on transport errors or non-2xx."""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    async def put(self, upload_url: str, data: bytes, content_type: Optional[str] = None) -> None:
        headers = {"Content-Type": content_type} if content_type else {}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.put(upload_url, content=data, headers=headers)
            response.raise_for_status()
        logger.debug("Uploaded %d bytes (%s)", len(data), response.status_code)
