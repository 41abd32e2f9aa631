import json

import httpx
import pytest

from storefront.services.content_cache import ContentCache
from storefront.services.wordpress import (
    GET_POSTS,
    WordPressAPIError,
    WordPressClient,
    WordPressResponseShapeError,
)

ENDPOINT = "https://cms.example.test/graphql"

POST_NODE = {
    "id": "cG9zdDox",
    "databaseId": 1,
    "title": "Xin chào",
    "slug": "xin-chao",
    "excerpt": "<p>Mở đầu</p>",
    "date": "2025-01-02T03:04:05",
    "featuredImage": None,
    "categories": {"nodes": []},
    "tags": {"nodes": []},
    "author": {"node": {"id": "u1", "name": "Minh", "slug": "minh"}},
    "seo": {"title": "Xin chào | Shop", "metaDesc": "Mô tả"},
}


def make_client(handler, cache=None):
    transport = httpx.MockTransport(handler)
    return WordPressClient(ENDPOINT, cache=cache, client=httpx.AsyncClient(transport=transport))


class TestFetchGraphql:
    async def test_returns_data_and_sends_query(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"posts": {"nodes": []}}})

        client = make_client(handler)

        data = await client.fetch_graphql(GET_POSTS, {"first": 5})

        assert data == {"posts": {"nodes": []}}
        assert seen["body"]["variables"] == {"first": 5}
        assert "GetPosts" in seen["body"]["query"]
        await client.close_client()

    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.fetch_graphql("{ posts { nodes { id } } }")

        assert exc_info.value.is_network_error()
        assert not exc_info.value.is_http_error()
        await client.close_client()

    async def test_http_error(self):
        client = make_client(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.fetch_graphql("{ posts { nodes { id } } }")

        assert exc_info.value.status_code == 500
        assert exc_info.value.is_http_error()
        assert str(exc_info.value).startswith("HTTP error: 500")
        await client.close_client()

    async def test_graphql_errors(self):
        errors = [{"message": "Cannot query field \"foo\""}]
        client = make_client(lambda request: httpx.Response(200, json={"errors": errors}))

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.fetch_graphql("{ foo }")

        assert exc_info.value.is_graphql_error()
        assert exc_info.value.graphql_errors == errors
        assert str(exc_info.value) == "Cannot query field \"foo\""
        await client.close_client()

    async def test_missing_data(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": None}))

        with pytest.raises(WordPressAPIError, match="No data returned from GraphQL query"):
            await client.fetch_graphql("{ posts { nodes { id } } }")
        await client.close_client()

    async def test_empty_data_is_returned(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {}}))

        assert await client.fetch_graphql("{ posts { nodes { id } } }") == {}
        assert await client.get_pages() == []
        await client.close_client()

    async def test_body_not_utf8(self):
        client = make_client(
            lambda request: httpx.Response(200, content=b'{"data": "\xff"}', headers={"Content-Type": "application/json"})
        )

        with pytest.raises(WordPressAPIError, match="Invalid JSON"):
            await client.fetch_graphql("{ posts { nodes { id } } }")
        await client.close_client()

    async def test_invalid_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(WordPressAPIError, match="Invalid JSON"):
            await client.fetch_graphql("{ posts { nodes { id } } }")
        await client.close_client()


class TestCaching:
    async def test_cached_until_tag_invalidated(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"data": {"post": POST_NODE}})

        cache = ContentCache(default_ttl=60)
        client = make_client(handler, cache=cache)

        first = await client.get_post_by_slug("xin-chao")
        second = await client.get_post_by_slug("xin-chao")

        assert first == second
        assert len(calls) == 1

        assert cache.invalidate_tags(["post-xin-chao"]) == 1
        await client.get_post_by_slug("xin-chao")
        assert len(calls) == 2
        await client.close_client()

    async def test_errors_are_not_cached(self):
        responses = [
            httpx.Response(503),
            httpx.Response(200, json={"data": {"menuItems": {"nodes": []}}}),
        ]
        client = make_client(lambda request: responses.pop(0), cache=ContentCache())

        with pytest.raises(WordPressAPIError):
            await client.get_menu_items()
        assert await client.get_menu_items() == []
        await client.close_client()


class TestTypedQueries:
    async def test_post_parsed_from_camel_case(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {"post": POST_NODE}}))

        post = await client.get_post_by_slug("xin-chao")

        assert post.database_id == 1
        assert post.author.node.name == "Minh"
        assert post.seo.meta_desc == "Mô tả"
        await client.close_client()

    async def test_missing_post_is_none(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {"post": None}}))

        assert await client.get_post_by_slug("missing") is None
        await client.close_client()

    async def test_menu_items(self):
        nodes = [
            {"id": "m1", "label": "Trang chủ", "url": "https://shop.example.test/", "path": "/", "parentId": None},
            {"id": "m2", "label": "Blog", "url": "https://shop.example.test/blog", "path": "/blog", "parentId": "m1"},
        ]
        client = make_client(lambda request: httpx.Response(200, json={"data": {"menuItems": {"nodes": nodes}}}))

        items = await client.get_menu_items("FOOTER")

        assert [item.id for item in items] == ["m1", "m2"]
        assert items[1].parent_id == "m1"
        await client.close_client()

    async def test_unexpected_shape_is_upstream_error(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {"post": {"id": "x"}}}))

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.get_post_by_slug("x")

        assert isinstance(exc_info.value, WordPressResponseShapeError)
        assert exc_info.value.status_code is None
        assert not exc_info.value.is_http_error()
        assert not exc_info.value.is_network_error()
        await client.close_client()

    async def test_pages_tagged_for_invalidation(self):
        nodes = [{"id": "p1", "title": "Giới thiệu", "slug": "gioi-thieu", "uri": "/gioi-thieu/"}]
        cache = ContentCache()
        client = make_client(lambda request: httpx.Response(200, json={"data": {"pages": {"nodes": nodes}}}), cache=cache)

        pages = await client.get_pages()

        assert [page.slug for page in pages] == ["gioi-thieu"]
        assert cache.invalidate_tags(["pages"]) == 1
        await client.close_client()
