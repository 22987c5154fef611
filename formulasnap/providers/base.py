"""Base class for recognition provider integrations."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from formulasnap.config import settings
from formulasnap.errors import NetworkError
from formulasnap.i18n import t

logger = logging.getLogger("formulasnap.providers")


class RecognitionProvider(ABC):
    """Shared infrastructure for both recognition providers."""

    provider_id: str         # "simpletex", "siliconflow"
    label_key: str           # i18n key of the display name
    api_base_setting: str    # "SIMPLETEX_API_BASE", etc.

    @property
    def label(self) -> str:
        return t(self.label_key)

    def url(self, path: str) -> str:
        return f"{settings.endpoint(self.api_base_setting)}/{path.lstrip('/')}"

    def make_client(self, timeout: float | None = None) -> httpx.AsyncClient:
        """Create an httpx async client with the configured timeout."""
        return httpx.AsyncClient(timeout=timeout or settings.http_timeout())

    @abstractmethod
    def auth_headers(self, credential: str) -> dict[str, str]:
        """Return the headers that authenticate ``credential``."""

    async def get(self, path: str, credential: str, **kwargs: Any) -> httpx.Response:
        return await self._send("GET", path, credential, **kwargs)

    async def post(self, path: str, credential: str, **kwargs: Any) -> httpx.Response:
        return await self._send("POST", path, credential, **kwargs)

    async def _send(self, method: str, path: str, credential: str, **kwargs: Any) -> httpx.Response:
        url = self.url(path)
        headers = {**self.auth_headers(credential), **kwargs.pop("headers", {})}
        logger.debug("%s %s %s", self.provider_id, method, url)
        try:
            async with self.make_client() as client:
                send = client.post if method == "POST" else client.get
                response = await send(url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s request to %s failed: %s", self.provider_id, url, exc)
            raise NetworkError("errors.request_failed", detail=str(exc) or type(exc).__name__) from exc
        logger.debug("%s %s -> %s", self.provider_id, url, response.status_code)
        return response
