"""
Shared fixtures: a stub nutrition endpoint served by aiohttp
"""

import asyncio
import socket
from dataclasses import dataclass, field
from typing import Any, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from athlete_fuzz.config import Config

from .helpers import SAMPLE_OUTPUT


@dataclass
class StubEndpoint:
    url: str = ""
    status: int = 200
    body: Any = field(default_factory=lambda: SAMPLE_OUTPUT)
    text: Optional[str] = None
    delay: float = 0.0
    requests: List[Any] = field(default_factory=list)


@pytest_asyncio.fixture
async def stub_endpoint():
    stub = StubEndpoint()

    async def handle(request: web.Request) -> web.StreamResponse:
        stub.requests.append(await request.json())
        if stub.delay:
            await asyncio.sleep(stub.delay)
        if stub.text is not None:
            return web.Response(text=stub.text, status=stub.status)
        return web.json_response(stub.body, status=stub.status)

    app = web.Application()
    app.router.add_post("/nutrition", handle)
    server = TestServer(app)
    await server.start_server()
    stub.url = str(server.make_url("/nutrition"))
    yield stub
    await server.close()


@pytest.fixture
def closed_port_url():
    """URL on a local port with nothing listening"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"http://127.0.0.1:{port}/nutrition"


@pytest.fixture
def config(monkeypatch, tmp_path):
    monkeypatch.delenv("BASE_URL", raising=False)
    cfg = Config()
    cfg.endpoint.timeout_seconds = 5
    cfg.run.log_file = str(tmp_path / "test-results.txt")
    cfg.run.output_dir = str(tmp_path / "results")
    return cfg
