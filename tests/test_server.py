import json

import httpx
import pytest
from conftest import data_url
from mcp.shared.memory import create_connected_server_and_client_session
from pydantic import AnyUrl

from inliner.images.config import InlinerConfig
from inliner.images.server import create_server
from inliner.images.service import InlinerImages

TOOLS = {
    "generate_image_url",
    "generate_image",
    "create_image",
    "edit_image",
    "get_projects",
    "create_project",
    "get_project_details",
    "get_usage",
    "get_current_plan",
    "list_images",
    "get_image_dimensions",
}


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.startswith("/content/request-json/"):
        return httpx.Response(200, json={"mediaAsset": {"data": data_url(b"img")}})
    if path == "/account/projects" and request.method == "GET":
        return httpx.Response(200, json={"projects": [{"project": "zoo"}]})
    if path == "/account/plan-usage":
        return httpx.Response(503, text="maintenance")
    return httpx.Response(200, json={"path": path})


@pytest.fixture
def server(config: InlinerConfig, make_client):
    images = InlinerImages(config, client=make_client(_handler))
    return create_server(config, images)


def _text(result) -> str:
    return result.content[0].text


async def test_lists_all_tools(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        tools = await session.list_tools()
    assert {t.name for t in tools.tools} == TOOLS


async def test_tool_schema_constraints(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        tools = {t.name: t for t in (await session.list_tools()).tools}
    width = tools["generate_image"].inputSchema["properties"]["width"]
    assert width["minimum"] == 100
    assert width["maximum"] == 4096
    assert set(tools["generate_image"].inputSchema["required"]) == {
        "project",
        "description",
        "width",
        "height",
    }


async def test_generate_image_url(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool(
            "generate_image_url",
            {"project": "zoo", "description": "Happy Duck!!", "width": 800, "height": 600},
        )
    assert not result.isError
    data = json.loads(_text(result))
    assert data["url"] == "https://img.inliner.ai/zoo/happy-duck_800x600.png"
    assert data["html"].startswith("<img ")


async def test_create_image(server, tmp_path):
    output = tmp_path / "duck.png"
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool(
            "create_image", {"description": "duck", "output_path": str(output)}
        )
    assert not result.isError
    data = json.loads(_text(result))
    assert data["project"] == "zoo"
    assert data["saved"] is True
    assert data["outputPath"] == str(output)
    assert output.read_bytes() == b"img"


async def test_invalid_dimensions_rejected(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool(
            "generate_image",
            {"project": "zoo", "description": "duck", "width": 50, "height": 600},
        )
    assert result.isError


async def test_empty_description_is_tool_error(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool(
            "generate_image_url",
            {"project": "zoo", "description": "!!!", "width": 800, "height": 600},
        )
    assert result.isError
    assert "Error building image URL" in _text(result)


async def test_listing_errors_use_same_contract(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool("get_usage", {})
    assert result.isError
    assert "Error fetching usage" in _text(result)
    assert "503" in _text(result)


async def test_get_projects(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool("get_projects", {})
    assert json.loads(_text(result)) == {"projects": [{"project": "zoo"}]}


async def test_get_image_dimensions(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        result = await session.call_tool("get_image_dimensions", {"use_case": "youtube"})
    data = json.loads(_text(result))
    assert data["useCase"] == "youtube"
    assert data["recommended"] == [
        {"width": 1280, "height": 720, "notes": "YouTube thumbnail, 16:9"}
    ]


async def test_guide_resource(server):
    async with create_connected_server_and_client_session(server._mcp_server) as session:
        resources = await session.list_resources()
        assert [str(r.uri) for r in resources.resources] == ["inliner://guide"]
        assert resources.resources[0].mimeType == "text/markdown"
        content = await session.read_resource(AnyUrl("inliner://guide"))
    assert "# Inliner.ai Quick Reference" in content.contents[0].text
