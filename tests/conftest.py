import base64
import logging
from collections.abc import Callable

import httpx
import pytest

from inliner.images.client import InlinerClient
from inliner.images.config import InlinerConfig
from inliner.images.service import InlinerImages

logging.getLogger("httpx").setLevel(logging.WARNING)

PNG_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-png"

Handler = Callable[[httpx.Request], httpx.Response]


def data_url(data: bytes = PNG_BYTES, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode()}"


@pytest.fixture
def config() -> InlinerConfig:
    return InlinerConfig(api_key="test-key", poll_interval=0)


@pytest.fixture
def make_client(config: InlinerConfig):
    clients: list[InlinerClient] = []

    def _make(handler: Handler) -> InlinerClient:
        client = InlinerClient(config, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    return _make


@pytest.fixture
def make_images(config: InlinerConfig, make_client):
    def _make(handler: Handler) -> InlinerImages:
        return InlinerImages(config, client=make_client(handler))

    return _make
