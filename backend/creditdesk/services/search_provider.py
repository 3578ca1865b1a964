"""
Search Provider Client
Talks to the external webhook that performs the address/business lookup.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from creditdesk.config import settings
from creditdesk.exceptions import ProviderError

logger = logging.getLogger(__name__)

FINISHED_STATUSES = {"finalizado", "finished", "done", "completed"}


@dataclass
class ProviderSubmission:
    success: bool
    id: Optional[str] = None


class SearchProviderClient:
    def __init__(
        self,
        search_url: str,
        status_url: str,
        download_url: str,
        token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.search_url = search_url
        self.status_url = status_url
        self.download_url = download_url
        self.token = token
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "SearchProviderClient":
        return cls(
            search_url=settings.search_url,
            status_url=settings.status_url,
            download_url=settings.download_url,
            token=settings.search_provider_token,
            timeout=settings.search_provider_timeout,
            transport=transport,
        )

    def _client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(timeout=self.timeout, headers=headers, transport=self.transport)

    async def submit(self, address: str, query: str, cep: Optional[str] = None) -> ProviderSubmission:
        """Start a lookup. Returns the provider's reference when accepted."""
        payload = {"endereco": address, "query": query, "cep": cep or ""}
        logger.info(f"[PROVIDER] Submitting search for segment '{query}'")

        try:
            async with self._client() as client:
                resp = await client.post(self.search_url, json=payload)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PROVIDER] Search submission failed: {e}")
            raise ProviderError("Search provider request failed") from e

        submission = ProviderSubmission(success=bool(data.get("success")), id=data.get("id"))
        if submission.success and submission.id is not None:
            submission.id = str(submission.id)
        logger.info(f"[PROVIDER] Submission result: success={submission.success} id={submission.id}")
        return submission

    async def is_finished(self, external_id: str) -> bool:
        """Ask the provider whether the lookup's results are ready."""
        try:
            async with self._client() as client:
                resp = await client.get(self.status_url, params={"id": external_id})
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PROVIDER] Status check for {external_id} failed: {e}")
            raise ProviderError("Search provider status check failed") from e

        if not isinstance(data, dict):
            return False
        if data.get("finalizado") is True or data.get("finished") is True:
            return True
        return str(data.get("status", "")).lower() in FINISHED_STATUSES

    async def download(self, external_id: str) -> bytes:
        """Fetch the result spreadsheet."""
        try:
            async with self._client() as client:
                resp = await client.get(self.download_url, params={"id": external_id})
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"[PROVIDER] Download for {external_id} failed: {e}")
            raise ProviderError("Search results could not be downloaded") from e
        return resp.content


def get_search_provider() -> SearchProviderClient:
    """FastAPI dependency; overridden in tests."""
    return SearchProviderClient.from_settings()
