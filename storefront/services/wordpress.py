# storefront/services/wordpress.py
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from storefront.models.content import WPMenuItem, WPPage, WPPost, WPPostList
from storefront.services.content_cache import ContentCache

logger = logging.getLogger(__name__)

GRAPHQL_TIMEOUT_SECONDS = 30.0

# --- Запросы WPGraphQL (поля SEO - из WPGraphQL Yoast SEO Addon) ---

_FEATURED_IMAGE = """
      featuredImage {
        node {
          sourceUrl
          altText
        }
      }
"""

_SEO = """
      seo {
        title
        metaDesc
        opengraphTitle
        opengraphDescription
        opengraphImage {
          sourceUrl
        }
        twitterTitle
        twitterDescription
        canonical
        metaRobotsNoindex
        metaRobotsNofollow
      }
"""

GET_POSTS = """
  query GetPosts($first: Int!, $after: String) {
    posts(first: $first, after: $after) {
      pageInfo {
        hasNextPage
        hasPreviousPage
        startCursor
        endCursor
      }
      nodes {
        id
        databaseId
        title
        slug
        excerpt
        date
""" + _FEATURED_IMAGE + """
        categories {
          nodes {
            id
            name
            slug
          }
        }
        author {
          node {
            id
            name
            slug
          }
        }
      }
    }
  }
"""

GET_POST_BY_SLUG = """
  query GetPostBySlug($slug: ID!) {
    post(id: $slug, idType: SLUG) {
      id
      databaseId
      title
      slug
      content
      excerpt
      date
      modified
""" + _FEATURED_IMAGE + """
      categories {
        nodes {
          id
          name
          slug
        }
      }
      tags {
        nodes {
          id
          name
          slug
        }
      }
      author {
        node {
          id
          name
          slug
        }
      }
""" + _SEO + """
    }
  }
"""

GET_PAGES = """
  query GetPages($first: Int!, $after: String) {
    pages(first: $first, after: $after) {
      nodes {
        id
        databaseId
        title
        slug
        uri
""" + _FEATURED_IMAGE + """
      }
    }
  }
"""

GET_PAGE_BY_SLUG = """
  query GetPageBySlug($slug: ID!) {
    page(id: $slug, idType: URI) {
      id
      databaseId
      title
      slug
      uri
      content
""" + _FEATURED_IMAGE + _SEO + """
    }
  }
"""

GET_MENU = """
  query GetMenu($location: MenuLocationEnum!) {
    menuItems(where: { location: $location }, first: 50) {
      nodes {
        id
        label
        url
        path
        parentId
        cssClasses
        target
        order
      }
    }
  }
"""


class WordPressAPIError(Exception):
    """
    Ошибка обращения к WPGraphQL.

    status_code задан для HTTP-ошибок, graphql_errors - для ошибок в теле ответа;
    если нет ни того, ни другого, это сетевая ошибка (или некорректный ответ).
    """
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        graphql_errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.graphql_errors = graphql_errors
        super().__init__(message)

    def is_network_error(self) -> bool:
        return self.status_code is None and self.graphql_errors is None

    def is_http_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 400

    def is_graphql_error(self) -> bool:
        return bool(self.graphql_errors)


class WordPressResponseShapeError(WordPressAPIError):
    """Ответ получен, но данные не соответствуют ожидаемой модели."""

    def is_network_error(self) -> bool:
        return False


class WordPressClient:
    """Асинхронный клиент WPGraphQL с кэшем ответов по тегам."""

    def __init__(
        self,
        endpoint: str,
        cache: Optional[ContentCache] = None,
        default_revalidate: int = 60,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.cache = cache
        self.default_revalidate = default_revalidate
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(GRAPHQL_TIMEOUT_SECONDS))
        logger.info(f"WordPressClient initialized for endpoint: {self.endpoint}")

    async def close_client(self):
        await self._client.aclose()
        logger.info("WordPress HTTP client closed.")

    async def fetch_graphql(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        revalidate: Optional[int] = None,
        tags: Sequence[str] = (),
    ) -> Dict[str, Any]:
        """
        Выполняет GraphQL-запрос и возвращает поле data.
        revalidate - время жизни ответа в кэше (сек.), tags - теги для сброса вебхуком.
        Любая ошибка приводится к WordPressAPIError.
        """
        ttl = self.default_revalidate if revalidate is None else revalidate
        cache_key = ContentCache.make_key(query, variables)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"GraphQL cache hit for tags {list(tags)}")
                return cached

        try:
            response = await self._client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.error(f"Network error calling WPGraphQL at {self.endpoint}: {e}")
            raise WordPressAPIError(str(e) or "Network error while fetching data") from e

        if response.status_code >= 400:
            logger.error(f"WPGraphQL HTTP error: {response.status_code} {response.reason_phrase}")
            raise WordPressAPIError(
                f"HTTP error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Failed to decode WPGraphQL response: {response.text[:500]}")
            raise WordPressAPIError(f"Invalid JSON in GraphQL response: {e}") from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            logger.error(f"WPGraphQL returned errors: {errors}")
            raise WordPressAPIError(errors[0].get("message", "GraphQL error"), graphql_errors=errors)

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            raise WordPressAPIError("No data returned from GraphQL query")

        if self.cache is not None:
            self.cache.set(cache_key, data, ttl=ttl, tags=tags)
        return data

    # --- Типизированные запросы ---

    async def get_posts(self, first: int = 10, after: Optional[str] = None) -> WPPostList:
        data = await self.fetch_graphql(GET_POSTS, {"first": first, "after": after}, tags=["posts"])
        return self._parse(WPPostList, data.get("posts") or {})

    async def get_post_by_slug(self, slug: str) -> Optional[WPPost]:
        data = await self.fetch_graphql(GET_POST_BY_SLUG, {"slug": slug}, tags=["posts", f"post-{slug}"])
        post = data.get("post")
        return self._parse(WPPost, post) if post else None

    async def get_pages(self, first: int = 100, after: Optional[str] = None) -> List[WPPage]:
        data = await self.fetch_graphql(GET_PAGES, {"first": first, "after": after}, tags=["pages"])
        nodes = (data.get("pages") or {}).get("nodes") or []
        return [self._parse(WPPage, node) for node in nodes]

    async def get_page_by_slug(self, slug: str) -> Optional[WPPage]:
        data = await self.fetch_graphql(GET_PAGE_BY_SLUG, {"slug": slug}, tags=["pages", f"page-{slug}"])
        page = data.get("page")
        return self._parse(WPPage, page) if page else None

    async def get_menu_items(self, location: str = "PRIMARY") -> List[WPMenuItem]:
        data = await self.fetch_graphql(GET_MENU, {"location": location}, tags=["menu"])
        nodes = (data.get("menuItems") or {}).get("nodes") or []
        return [self._parse(WPMenuItem, node) for node in nodes]

    @staticmethod
    def _parse(model, raw: Dict[str, Any]):
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Unexpected {model.__name__} shape from WPGraphQL: {e}")
            raise WordPressResponseShapeError(f"Unexpected {model.__name__} data from GraphQL") from e
