"""
Async HTTP adapter for the Brazilian congressional open-data APIs.

  LEGIS  — https://legis.senado.leg.br/dadosabertos   (Federal Senate)
  Câmara — https://dadosabertos.camara.leg.br/api/v2  (see camara_client.py)

Every GET runs through the shared retry policy. Failures surface as:
  404                    → NotFoundError(path)
  other non-2xx          → ApiError(message, status_code, path, cause)
  no response (timeout,
  connection refused)    → ApiError(message, None, path, cause)

Rate limits:
  LEGIS: 10 req/s max → use 0.15s delay between requests.

Usage example:
    async with SenadoApiClient(retry=RetryPolicy()) as client:
        data = await client.get("/senador/lista/atual")
        votos = await client.get("/votacao", {"dataInicio": "2025-01-01"}, suffix="")
"""

import asyncio
import logging
import time
from typing import Any

import httpx

from .config import BASE_URL, REQUEST_TIMEOUT, SENADO_DELAY
from .errors import ApiError, NotFoundError
from .retry import RetryPolicy


def replace_path(path: str, **values: Any) -> str:
    """Substitute ``{name}`` placeholders in an API path.

    Example:
        replace_path("/comissao/{codigo}", codigo=38)  # → "/comissao/38"
    """
    for key, value in values.items():
        path = path.replace(f"{{{key}}}", str(value))
    return path


class ApiClient:
    """
    Thin async wrapper around httpx with retry and error classification.

    Parameters
    ----------
    base_url : str
        API root; request paths are appended to it.
    timeout : float
        Per-request timeout in seconds.
    retry : RetryPolicy
        Policy applied to every request.
    headers : dict, optional
        Extra headers merged over ``Accept: application/json``.
    suffix : str
        Default URL suffix appended after the path (LEGIS uses ``.json``).
    delay : float
        Seconds to sleep after each successful response.
    logger : logging.Logger, optional
        Run logger; a module logger is used when omitted.
    transport : httpx.AsyncBaseTransport, optional
        Injected transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        retry: RetryPolicy | None = None,
        headers: dict[str, str] | None = None,
        suffix: str = "",
        delay: float = 0.0,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry = retry or RetryPolicy()
        self.suffix = suffix
        self._delay = delay
        self._log = logger or logging.getLogger(__name__)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json", **(headers or {})},
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        suffix: str | None = None,
    ) -> Any:
        """
        GET ``base_url + path + suffix`` and return the parsed JSON body.

        Parameters
        ----------
        path : str
            Relative path, e.g. "/senador/lista/atual". May also be an
            absolute URL (pagination links), in which case it is used as-is.
        params : dict, optional
            Query string parameters.
        suffix : str, optional
            Overrides the client default suffix. Pass ``""`` for endpoints
            that don't use it (e.g. ``/votacao``).
        """
        url = self.build_url(path, self.suffix if suffix is None else suffix)
        return await self.retry.run(
            lambda: self._request(url, path, params),
            f"GET {path}",
            logger=self._log,
        )

    def build_url(self, path: str, suffix: str = "") -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}{suffix}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_):
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _request(
        self,
        url: str,
        path: str,
        params: dict[str, Any] | None,
    ) -> Any:
        self._log.debug("GET %s params=%s", url, params)
        started = time.perf_counter()
        try:
            resp = await self._client.get(url, params=params)
        except httpx.RequestError as exc:
            raise ApiError(f"Sem resposta da API: {exc!r}", None, path, exc) from exc

        elapsed = time.perf_counter() - started
        self._log.debug("%s %s (%.2fs)", resp.status_code, url, elapsed)

        if resp.status_code == 404:
            raise NotFoundError(path)
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(
                f"Erro HTTP {resp.status_code}", resp.status_code, path, exc
            ) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ApiError("Resposta não é JSON válido", resp.status_code, path, exc) from exc

        if self._delay:
            await asyncio.sleep(self._delay)
        return data


class SenadoApiClient(ApiClient):
    """Client for the Senate LEGIS API: ``.json`` suffix, 0.15 s delay."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        delay: float = SENADO_DELAY,
        suffix: str = ".json",
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, delay=delay, suffix=suffix, **kwargs)
