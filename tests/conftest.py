import random
import socket
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from aiohttp import web

RECIPIENT = "mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
OFF_CURVE_ADDRESS = "HqAi1JjEEVS6QRvNe7gC4z8pYTuKbWkdZqCuuDpZxxQW"
REFERENCE_X = "7owWEdgJRWpKsiDFNU4qT2kgMe2kitPXem5Yy8VdNatx"
REFERENCE_Y = "7owWEdgJRWpKsiDFNU4qT2kgMe2kitPXem5Yy8VdNaty"
REFERENCE_Z = "7owWEdgJRWpKsiDFNU4qT2kgMe2kitPXem5Yy8VdNatz"


def get_free_port(start_port=8000, end_port=9000, retries=10):
    """
    Finds a free port in the specified range.
    Tries random ports and attempts to bind to them.
    """
    for _ in range(retries):
        port = random.randint(start_port, end_port)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind(('127.0.0.1', port))
            sock.close()
            return port
        except OSError:
            continue
    raise RuntimeError(f"Could not find a free port in range {start_port}-{end_port} after {retries} attempts")


def mint_account(decimals: int, program: str = "spl-token") -> dict:
    """`getAccountInfo` value of a mint account in jsonParsed encoding."""
    return {
        "data": {
            "parsed": {
                "info": {
                    "decimals": decimals,
                    "freezeAuthority": None,
                    "isInitialized": True,
                    "mintAuthority": None,
                    "supply": "1000000000",
                },
                "type": "mint",
            },
            "program": program,
            "space": 82,
        },
        "executable": False,
        "lamports": 1461600,
        "owner": TOKEN_PROGRAM,
        "rentEpoch": 0,
    }


@pytest.fixture
def lookup_returning_6():
    return AsyncMock(return_value=6)


@pytest.fixture
def lookup_returning_9():
    return AsyncMock(return_value=9)


@pytest.fixture
def rpc_server_config():
    port = get_free_port()
    return {"host": "127.0.0.1", "port": port, "url": f"http://127.0.0.1:{port}/"}


class MockRpcState:
    def __init__(self, url: str):
        self.url = url
        self.accounts = {}
        self.errors = {}
        self.requests = []
        self.http_status = 200
        self.raw_body: Optional[str] = None


@pytest.fixture
async def mock_rpc(rpc_server_config):
    """Starts a local JSON-RPC server answering getAccountInfo."""
    state = MockRpcState(rpc_server_config["url"])
    routes = web.RouteTableDef()

    @routes.post("/")
    async def rpc(request):
        body = await request.json()
        state.requests.append({"body": body, "headers": dict(request.headers)})

        if state.http_status != 200:
            return web.Response(status=state.http_status, text="upstream failure")
        if state.raw_body is not None:
            return web.Response(text=state.raw_body, content_type="application/json")

        address = body["params"][0]
        if address in state.errors:
            return web.json_response({
                "jsonrpc": "2.0",
                "id": body["id"],
                "error": {"code": -32602, "message": state.errors[address]},
            })

        return web.json_response({
            "jsonrpc": "2.0",
            "id": body["id"],
            "result": {"context": {"slot": 1}, "value": state.accounts.get(address)},
        })

    app = web.Application()
    app.add_routes(routes)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, rpc_server_config["host"], rpc_server_config["port"])
    await site.start()

    yield state

    await runner.cleanup()
