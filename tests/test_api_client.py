"""Tests for the async HTTP adapters, using httpx.MockTransport."""

import httpx
import pytest

from congresso_etl.api_client import ApiClient, SenadoApiClient, replace_path
from congresso_etl.camara_client import CamaraApiClient
from congresso_etl.errors import ApiError, NotFoundError
from congresso_etl.retry import RetryPolicy

NO_WAIT = RetryPolicy(max_attempts=3, delay=0.0)


def _senado(handler) -> SenadoApiClient:
    return SenadoApiClient(delay=0.0, retry=NO_WAIT, transport=httpx.MockTransport(handler))


def test_replace_path():
    assert replace_path("/comissao/{codigo}", codigo=38) == "/comissao/38"
    assert replace_path("/a/{x}/b/{y}", x="1", y=2) == "/a/1/b/2"
    assert replace_path("/sem/placeholder") == "/sem/placeholder"


@pytest.mark.asyncio
async def test_senado_get_appends_json_suffix_and_params():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async with _senado(handler) as client:
        data = await client.get("/senador/lista/atual", {"uf": "SP"})

    assert data == {"ok": True}
    assert seen[0].url.path == "/dadosabertos/senador/lista/atual.json"
    assert seen[0].url.params["uf"] == "SP"
    assert seen[0].headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_suffix_override():
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json=[])

    async with _senado(handler) as client:
        await client.get("/votacao", {"dataInicio": "2024-01-01"}, suffix="")

    assert paths == ["/dadosabertos/votacao"]


@pytest.mark.asyncio
async def test_404_raises_not_found_without_retry():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(404)

    async with _senado(handler) as client:
        with pytest.raises(NotFoundError) as exc_info:
            await client.get("/comissao/999")

    assert calls == 1
    assert exc_info.value.status_code == 404
    assert exc_info.value.path == "/comissao/999"


@pytest.mark.asyncio
async def test_server_error_is_retried_then_succeeds():
    responses = [httpx.Response(500), httpx.Response(200, json={"n": 1})]

    async with _senado(lambda request: responses.pop(0)) as client:
        assert await client.get("/x") == {"n": 1}

    assert responses == []


@pytest.mark.asyncio
async def test_persistent_server_error_raises_api_error_with_status():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    async with _senado(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get("/x")

    assert calls == 3
    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)


@pytest.mark.asyncio
async def test_connection_failure_raises_api_error_without_status():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _senado(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get("/x")

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_plain_client_uses_base_url_without_suffix():
    urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json={})

    client = ApiClient("https://example.org/api/", retry=NO_WAIT, transport=httpx.MockTransport(handler))
    await client.get("/recurso")
    await client.aclose()

    assert urls == ["https://example.org/api/recurso"]


# ---------------------------------------------------------------------------
# Chamber pagination
# ---------------------------------------------------------------------------

def _camara_pages(pages: list[list[dict]]):
    """Handler serving ``pages`` with rel=next links between them."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        pagina = int(request.url.params.get("pagina", "1"))
        links = []
        if pagina < len(pages):
            links.append({
                "rel": "next",
                "href": f"https://dadosabertos.camara.leg.br/api/v2/deputados?pagina={pagina + 1}&itens=100",
            })
        dados = pages[pagina - 1] if pagina <= len(pages) else []
        return httpx.Response(200, json={"dados": dados, "links": links})

    return handler, requests


def _camara(handler) -> CamaraApiClient:
    return CamaraApiClient(delay=0.0, retry=NO_WAIT, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_all_follows_next_links():
    handler, requests = _camara_pages([[{"id": 1}, {"id": 2}], [{"id": 3}], [{"id": 4}]])

    async with _camara(handler) as client:
        records = await client.get_all("/deputados", params={"idLegislatura": 57})

    assert [r["id"] for r in records] == [1, 2, 3, 4]
    assert len(requests) == 3
    first = requests[0].url.params
    assert first["itens"] == "100"
    assert first["idLegislatura"] == "57"


@pytest.mark.asyncio
async def test_get_all_respects_limit_and_page_cap():
    handler, requests = _camara_pages([[{"id": 1}, {"id": 2}], [{"id": 3}, {"id": 4}], [{"id": 5}]])

    async with _camara(handler) as client:
        limited = await client.get_all("/deputados", limit=3)
    assert [r["id"] for r in limited] == [1, 2, 3]
    assert len(requests) == 2

    handler, requests = _camara_pages([[{"id": 1}], [{"id": 2}], [{"id": 3}]])
    async with _camara(handler) as client:
        capped = await client.get_all("/deputados", max_pages=2)
    assert [r["id"] for r in capped] == [1, 2]


@pytest.mark.asyncio
async def test_get_all_stops_on_empty_page():
    handler, requests = _camara_pages([[]])

    async with _camara(handler) as client:
        assert await client.get_all("/deputados") == []

    assert len(requests) == 1


@pytest.mark.asyncio
async def test_get_dados_unwraps_envelope():
    async with _camara(lambda request: httpx.Response(200, json={"dados": {"id": 7}, "links": []})) as client:
        assert await client.get_dados("/deputados/7") == {"id": 7}
