"""Tests for the Figma REST client against a mocked transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from figma_assets.exceptions import AccessDenied, JobFailed, NotFound, RemoteError
from figma_assets.figma_client import FigmaClient
from tests.conftest import HERO_NODE, sample_file


def _run(handler, call):
    """Run call(client) against a client whose requests go to handler"""
    async def go():
        async with FigmaClient("secret-token", transport=httpx.MockTransport(handler)) as client:
            return await call(client)
    return asyncio.run(go())


def test_fetch_subtree_scopes_request_to_node():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['path'] = request.url.path
        seen['ids'] = request.url.params['ids']
        seen['token'] = request.headers['X-Figma-Token']
        return httpx.Response(200, json={"nodes": {"7905:291614": {"document": HERO_NODE}}})

    node = _run(handler, lambda c: c.fetch_subtree("FILE", "7905:291614"))
    assert seen == {'path': '/v1/files/FILE/nodes', 'ids': '7905:291614', 'token': 'secret-token'}
    assert node.name == "Hero"
    assert [child.type for child in node.children] == ["RECTANGLE", "TEXT"]
    assert node.children[0].fills[0].image_ref == "img1"


def test_fetch_subtree_missing_node_returns_none():
    handler = lambda request: httpx.Response(200, json={"nodes": {"1:2": None}})
    assert _run(handler, lambda c: c.fetch_subtree("FILE", "1:2")) is None


@pytest.mark.parametrize("status, error", [(403, AccessDenied), (404, NotFound)])
def test_status_mapping(status, error):
    handler = lambda request: httpx.Response(status, json={"status": status, "err": "nope"})
    with pytest.raises(error):
        _run(handler, lambda c: c.fetch_whole_file("FILE"))


def test_other_status_is_remote_error_with_message():
    handler = lambda request: httpx.Response(500, json={"status": 500, "message": "Internal error"})
    with pytest.raises(RemoteError) as info:
        _run(handler, lambda c: c.fetch_whole_file("FILE"))
    assert info.value.status == 500
    assert info.value.message == "Internal error"
    assert info.value.is_transient


def test_connection_failure_is_remote_error_without_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteError) as info:
        _run(handler, lambda c: c.fetch_image_reference_table("FILE"))
    assert info.value.status is None
    assert not info.value.is_transient


def test_fetch_whole_file():
    handler = lambda request: httpx.Response(200, json=sample_file())
    file_doc = _run(handler, lambda c: c.fetch_whole_file("FILE"))
    assert file_doc.name == "Design System"
    assert file_doc.last_modified == "2024-05-01T10:00:00Z"
    assert file_doc.version == "123"
    assert len(file_doc.components) == 1
    assert file_doc.document.children[0].type == "CANVAS"


@pytest.mark.parametrize("body", [
    {"error": False, "status": 200, "meta": {"images": {"img1": "https://cdn/x.png", "img2": None}}},
    {"images": {"img1": "https://cdn/x.png"}},
])
def test_image_reference_table_shapes(body):
    handler = lambda request: httpx.Response(200, json=body)
    assert _run(handler, lambda c: c.fetch_image_reference_table("FILE")) == {"img1": "https://cdn/x.png"}


def test_submit_export_job_params_and_null_urls():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        seen['path'] = request.url.path
        return httpx.Response(200, json={"err": None, "images": {"1:1": "https://cdn/1.png", "1:2": None}})

    images = _run(handler, lambda c: c.submit_export_job("FILE", ["1:1", "1:2"], format="jpg", scale=2, version="7"))
    assert images == {"1:1": "https://cdn/1.png"}
    assert seen == {'path': '/v1/images/FILE', 'ids': '1:1,1:2', 'format': 'jpg', 'scale': '2', 'version': '7'}


def test_submit_export_job_omits_missing_version():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"images": {}})

    _run(handler, lambda c: c.submit_export_job("FILE", ["1:1"]))
    assert 'version' not in seen


def test_in_band_export_failure():
    handler = lambda request: httpx.Response(200, json={"err": "Render timeout", "images": {}})
    with pytest.raises(JobFailed) as info:
        _run(handler, lambda c: c.submit_export_job("FILE", ["1:1"]))
    assert info.value.is_expired


def test_submit_export_job_requires_ids():
    handler = lambda request: httpx.Response(200, json={})
    with pytest.raises(ValueError):
        _run(handler, lambda c: c.submit_export_job("FILE", []))


def test_download_text_does_not_send_token():
    seen = {}

    def handler(request):
        seen['token'] = request.headers.get('X-Figma-Token')
        return httpx.Response(200, text="<svg/>")

    assert _run(handler, lambda c: c.download_text("https://s3.example/render.svg")) == "<svg/>"
    assert seen['token'] is None


def test_validate_token():
    handler = lambda request: httpx.Response(200, json={"id": "1", "email": "a@b.c"})
    assert _run(handler, lambda c: c.validate_token()) is True

    handler = lambda request: httpx.Response(403, json={"status": 403, "err": "Invalid token"})
    assert _run(handler, lambda c: c.validate_token()) is False


def test_stats_count_calls_and_errors():
    handler = lambda request: httpx.Response(500, text="oops")

    async def call(client):
        with pytest.raises(RemoteError):
            await client.fetch_whole_file("FILE")
        return client.get_stats()

    assert _run(handler, call) == {'api_calls': 1, 'errors': 1}


def test_fetch_file_styles():
    handler = lambda request: httpx.Response(200, json=sample_file())
    styles = _run(handler, lambda c: c.fetch_file_styles("FILE"))
    assert styles == {"S:1": {"key": "def", "name": "Primary", "styleType": "FILL"}}


def test_fetch_subtree_deeper_than_validator_recursion_limit():
    payload = {"id": "leaf", "type": "VECTOR"}
    for level in range(300):
        payload = {"id": f"1:{level}", "type": "GROUP", "children": [payload]}
    handler = lambda request: httpx.Response(200, json={"nodes": {"1:299": {"document": payload}}})

    node = _run(handler, lambda c: c.fetch_subtree("FILE", "1:299"))
    depth = 0
    while node.children:
        node = node.children[0]
        depth += 1
    assert depth == 300
    assert node.id == "leaf"


def test_non_json_success_body_is_remote_error():
    handler = lambda request: httpx.Response(200, text="<html>proxy login</html>")
    with pytest.raises(RemoteError) as info:
        _run(handler, lambda c: c.fetch_whole_file("FILE"))
    assert info.value.status == 200
    assert not info.value.is_transient


def test_malformed_node_payload_is_remote_error():
    handler = lambda request: httpx.Response(200, json={"nodes": {"1:2": {"document": {"name": "no id"}}}})
    with pytest.raises(RemoteError):
        _run(handler, lambda c: c.fetch_subtree("FILE", "1:2"))
