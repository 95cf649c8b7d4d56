"""
Async client for the Câmara dos Deputados open-data API (v2).

Root: https://dadosabertos.camara.leg.br/api/v2

Differences from the LEGIS client:
  - every body is an envelope: {"dados": ..., "links": [{"rel", "href"}, ...]}
  - list endpoints paginate through a rel="next" link
  - no URL suffix; JSON is the default representation
  - no published rate limit, so requests are spaced by 0.1 s

Usage example:
    async with CamaraApiClient(retry=RetryPolicy()) as camara:
        deputado = await camara.get_dados("/deputados/204554")
        deputados = await camara.get_all("/deputados", {"idLegislatura": 57})
"""

from typing import Any

from .api_client import ApiClient
from .config import CAMARA_BASE_URL, CAMARA_DELAY

PAGE_SIZE = 100


def _next_link(envelope: dict) -> str | None:
    for link in envelope.get("links") or []:
        if link.get("rel") == "next":
            return link.get("href")
    return None


class CamaraApiClient(ApiClient):
    """
    Chamber of Deputies client with envelope unwrapping and pagination.

    Parameters
    ----------
    base_url : str
        API root; defaults to the public v2 endpoint.
    delay : float
        Pause after each successful response, in seconds.
    **kwargs
        Passed through to ``ApiClient`` (timeout, retry, logger, transport).
    """

    def __init__(
        self,
        base_url: str = CAMARA_BASE_URL,
        *,
        delay: float = CAMARA_DELAY,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, delay=delay, **kwargs)

    async def get_dados(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET one resource and return the ``dados`` payload of the envelope."""
        envelope = await self.get(path, params)
        return (envelope or {}).get("dados")

    async def get_all(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        max_pages: int = 500,
        limit: int | None = None,
    ) -> list[dict]:
        """
        Collect ``dados`` across every page of a list endpoint.

        Parameters
        ----------
        path : str
            Endpoint path, e.g. "/deputados".
        params : dict, optional
            Query for the first page. ``itens`` defaults to 100 per page.
        max_pages : int
            Hard stop on the number of pages read.
        limit : int, optional
            Return as soon as this many records are collected.

        Returns
        -------
        list[dict]
            Records in page order; an empty page ends the walk.
        """
        query: dict | None = {"itens": PAGE_SIZE, **(params or {})}
        target: str | None = path
        collected: list[dict] = []
        pages = 0

        while target and pages < max_pages:
            envelope = await self.get(target, query) or {}
            page = envelope.get("dados") or []
            if not page:
                break
            collected += page
            pages += 1
            if limit is not None and len(collected) >= limit:
                return collected[:limit]

            # The next link is absolute and carries its own query string
            target = _next_link(envelope)
            query = None

        self._log.debug("%s: %d registros em %d página(s)", path, len(collected), pages)
        return collected
