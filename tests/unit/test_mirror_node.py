import httpx
import pytest

from agent_relay.agents.hedera.tools import build_account_tools, get_tools
from agent_relay.integrations.mirror_node import MIRROR_NODE_URLS, MirrorNodeClient, MirrorNodeError
from agent_relay.integrations.mirror_node.client import resolve_base_url


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return MirrorNodeClient("testnet", client=httpx.AsyncClient(base_url="https://mirror.test/api/v1", transport=transport))


def test_base_url_by_network(monkeypatch):
    monkeypatch.delenv("MIRROR_NODE_URL", raising=False)
    assert resolve_base_url("mainnet") == MIRROR_NODE_URLS["mainnet"]
    monkeypatch.setenv("MIRROR_NODE_URL", "http://localhost:5551/api/v1/")
    assert resolve_base_url("testnet") == "http://localhost:5551/api/v1"


def test_unknown_network(monkeypatch):
    monkeypatch.delenv("MIRROR_NODE_URL", raising=False)
    with pytest.raises(ValueError):
        resolve_base_url("previewnet")


@pytest.mark.asyncio
async def test_hbar_balance_converts_tinybars():
    def handler(request):
        assert request.url.path == "/api/v1/accounts/0.0.5"
        return httpx.Response(200, json={"account": "0.0.5", "balance": {"balance": 250_000_000}})

    balance = await make_client(handler).get_hbar_balance("0.0.5")

    assert balance["tinybars"] == 250_000_000
    assert balance["hbars"] == 2.5
    assert balance["network"] == "testnet"


@pytest.mark.asyncio
async def test_token_balances():
    def handler(request):
        return httpx.Response(200, json={"tokens": [{"token_id": "0.0.731861", "balance": 10, "decimals": 6}]})

    result = await make_client(handler).get_token_balances("0.0.5")

    assert result["tokens"] == [{"tokenId": "0.0.731861", "balance": 10, "decimals": 6}]


@pytest.mark.asyncio
async def test_missing_account_raises():
    client = make_client(lambda request: httpx.Response(404, json={}))
    with pytest.raises(MirrorNodeError) as excinfo:
        await client.get_account("0.0.404")
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_balance_tool_defaults_to_session_account():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"balance": {"balance": 100_000_000}})

    tools = {t.name: t for t in build_account_tools("0.0.8", make_client(handler))}

    result = await tools["get_hbar_balance"].ainvoke({})

    assert seen == ["/api/v1/accounts/0.0.8"]
    assert result["hbars"] == 1.0


@pytest.mark.asyncio
async def test_balance_tool_reports_errors_as_payload():
    tools = {t.name: t for t in build_account_tools("0.0.8", make_client(lambda r: httpx.Response(404)))}

    result = await tools["get_token_balances"].ainvoke({})

    assert result["operation"] == "get_token_balances"
    assert "Not found" in result["error"]


def test_get_tools_composes_families():
    mirror = make_client(lambda r: httpx.Response(200, json={}))

    def extra(account_id):
        return [build_account_tools(account_id, mirror)[0]]

    names = [t.name for t in get_tools("0.0.1", mirror_client=mirror, extra_factories=[extra])]

    assert names == ["get_hbar_balance", "get_token_balances", "get_hbar_balance"]
    assert get_tools("0.0.1") == []
