"""
Tests pour TMDBClient - client du catalogue TMDB.

Utilise respx pour simuler les appels httpx et verifie:
- La recherche retourne une SearchPage de SearchResult
- Les details retournent un Movie pret a etre mis en cache (genres, realisateur)
- Le cache est consulte AVANT l'appel API (cache-first)
- Les URL d'images sont construites sans appel reseau
- L'absence de cle API est signalee par CatalogError
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from lounge.adapters.api.cache import APICache
from lounge.adapters.api.tmdb_client import TMDBClient
from lounge.core.entities.media import Movie
from lounge.core.exceptions import CatalogError
from lounge.core.ports.api_clients import IImageUrlResolver, IMovieCatalog, SearchPage
from tests.fixtures.tmdb_responses import (
    TMDB_CONFIGURATION_RESPONSE,
    TMDB_MOVIE_DETAILS_MINIMAL_RESPONSE,
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_SEARCH_EMPTY_RESPONSE,
    TMDB_SEARCH_RESPONSE,
)

SEARCH_URL = "https://api.themoviedb.org/3/search/movie"
DETAILS_URL = "https://api.themoviedb.org/3/movie/550"


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Mock APICache (cache vide par defaut)."""
    cache = AsyncMock(spec=APICache)
    cache.get_search.return_value = None
    cache.get_details.return_value = None
    return cache


@pytest.fixture
def tmdb_client(mock_cache: AsyncMock) -> TMDBClient:
    return TMDBClient(api_key="test_api_key", cache=mock_cache)


class TestTMDBClientInterface:
    """TMDBClient implemente IMovieCatalog."""

    def test_implements_interfaces(self, tmdb_client: TMDBClient) -> None:
        assert isinstance(tmdb_client, IMovieCatalog)
        assert isinstance(tmdb_client, IImageUrlResolver)

    def test_source_is_tmdb(self, tmdb_client: TMDBClient) -> None:
        assert tmdb_client.source == "tmdb"


class TestTMDBSearch:
    """Tests pour search()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_returns_page(self, tmdb_client: TMDBClient) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE))

        page = await tmdb_client.search("Fight Club")

        assert isinstance(page, SearchPage)
        assert page.total_results == 2
        first, second = page.results
        assert first.id == 550
        assert first.title == "Fight Club"
        assert first.year == 1999
        assert first.poster_path == "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg"
        assert first.catalog_rating == 8.4
        assert second.year is None
        assert second.poster_path is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_sends_query_page_and_language(self, mock_cache: AsyncMock) -> None:
        client = TMDBClient(api_key="test_api_key", cache=mock_cache, language="fr-FR")
        route = respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE))

        await client.search("Fight Club", page=2)

        params = route.calls.last.request.url.params
        assert params["query"] == "Fight Club"
        assert params["page"] == "2"
        assert params["language"] == "fr-FR"
        assert params["api_key"] == "test_api_key"

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_empty(self, tmdb_client: TMDBClient) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE))

        page = await tmdb_client.search("NonExistentMovie12345")

        assert page.results == []
        assert page.total_pages == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_stores_page_in_cache(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock
    ) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE))

        page = await tmdb_client.search("Fight Club")

        mock_cache.set_search.assert_awaited_once_with("tmdb", "Fight Club", 1, page)

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_checks_cache_before_api_call(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock
    ) -> None:
        """Sur succes de cache, aucun appel HTTP."""
        cached = SearchPage(results=[], page=1, total_pages=0, total_results=0)
        mock_cache.get_search.return_value = cached
        route = respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE))

        page = await tmdb_client.search("Fight Club")

        assert page is cached
        assert route.call_count == 0


class TestTMDBGetDetails:
    """Tests pour get_details()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_movie_ready_for_cache(self, tmdb_client: TMDBClient) -> None:
        respx.get(DETAILS_URL).mock(return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE))

        movie = await tmdb_client.get_details(550)

        assert isinstance(movie, Movie)
        assert movie.id == 550
        assert movie.title == "Fight Club"
        assert movie.year == 1999
        assert movie.runtime == 139
        assert movie.genres == "Drama, Thriller"
        assert movie.director == "David Fincher"
        assert movie.catalog_rating == 8.4

    @pytest.mark.asyncio
    @respx.mock
    async def test_requests_credits(self, tmdb_client: TMDBClient) -> None:
        route = respx.get(DETAILS_URL).mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        await tmdb_client.get_details(550)

        assert route.calls.last.request.url.params["append_to_response"] == "credits"

    @pytest.mark.asyncio
    @respx.mock
    async def test_minimal_details(self, tmdb_client: TMDBClient) -> None:
        """Sans titre localise, genres ni equipe : valeurs de repli et None."""
        respx.get("https://api.themoviedb.org/3/movie/424242").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_MINIMAL_RESPONSE)
        )

        movie = await tmdb_client.get_details(424242)

        assert movie.title == "Untitled Project"
        assert movie.year is None
        assert movie.genres is None
        assert movie.director is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_none_on_404(self, tmdb_client: TMDBClient) -> None:
        respx.get("https://api.themoviedb.org/3/movie/99999999").mock(
            return_value=httpx.Response(404, json={"status_code": 34})
        )

        assert await tmdb_client.get_details(99999999) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_propagates(self, tmdb_client: TMDBClient) -> None:
        respx.get(DETAILS_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(httpx.HTTPStatusError):
            await tmdb_client.get_details(550)

    @pytest.mark.asyncio
    @respx.mock
    async def test_details_are_cached(self, tmdb_client: TMDBClient, mock_cache: AsyncMock) -> None:
        respx.get(DETAILS_URL).mock(return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE))

        movie = await tmdb_client.get_details(550)

        mock_cache.set_details.assert_awaited_once_with("tmdb", 550, movie)

    @pytest.mark.asyncio
    @respx.mock
    async def test_details_checks_cache_first(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock
    ) -> None:
        cached = Movie(id=550, title="Fight Club")
        mock_cache.get_details.return_value = cached
        route = respx.get(DETAILS_URL).mock(return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE))

        assert await tmdb_client.get_details(550) is cached
        assert route.call_count == 0


class TestTMDBAuthentication:
    """Cle API v3, token v4 et absence de cle."""

    @pytest.mark.asyncio
    async def test_missing_key_raises_catalog_error(self, mock_cache: AsyncMock) -> None:
        client = TMDBClient(api_key=None, cache=mock_cache)

        with pytest.raises(CatalogError):
            await client.search("Fight Club")

    @pytest.mark.asyncio
    @respx.mock
    async def test_v4_token_sent_as_bearer(self, mock_cache: AsyncMock) -> None:
        token = "eyJhbGciOiJIUzI1NiJ9." + "x" * 60
        client = TMDBClient(api_key=token, cache=mock_cache)
        route = respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE))

        await client.search("Fight Club")

        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {token}"
        assert "api_key" not in request.url.params
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_set_api_key_enables_client(self, mock_cache: AsyncMock) -> None:
        client = TMDBClient(api_key=None, cache=mock_cache)
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE))

        client.set_api_key("new_key")
        page = await client.search("Fight Club")

        assert page.results == []
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_ok(self, tmdb_client: TMDBClient) -> None:
        respx.get("https://api.themoviedb.org/3/configuration").mock(
            return_value=httpx.Response(200, json=TMDB_CONFIGURATION_RESPONSE)
        )

        assert await tmdb_client.test_connection() is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_rejected_key(self, tmdb_client: TMDBClient) -> None:
        respx.get("https://api.themoviedb.org/3/configuration").mock(
            return_value=httpx.Response(401, json={"status_code": 7})
        )

        with pytest.raises(CatalogError):
            await tmdb_client.test_connection()


class TestTMDBImageUrls:
    """Construction des URL d'images (aucun appel reseau, cle non requise)."""

    @pytest.fixture
    def keyless_client(self, mock_cache: AsyncMock) -> TMDBClient:
        return TMDBClient(api_key=None, cache=mock_cache)

    def test_resolve_image_url(self, keyless_client: TMDBClient) -> None:
        url = keyless_client.resolve_image_url("/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg", "w500")

        assert url == "https://image.tmdb.org/t/p/w500/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg"

    @pytest.mark.parametrize("path", [None, ""])
    def test_resolve_without_path(self, keyless_client: TMDBClient, path) -> None:
        assert keyless_client.resolve_image_url(path, "w342") is None

    def test_default_sizes(self, keyless_client: TMDBClient) -> None:
        assert keyless_client.get_poster_url("/p.jpg") == "https://image.tmdb.org/t/p/w342/p.jpg"
        assert keyless_client.get_backdrop_url("/b.jpg") == "https://image.tmdb.org/t/p/w780/b.jpg"
        assert keyless_client.get_original_poster_url("/p.jpg") == "https://image.tmdb.org/t/p/original/p.jpg"
        assert keyless_client.get_original_backdrop_url("/b.jpg") == "https://image.tmdb.org/t/p/original/b.jpg"


class TestTMDBClientLifecycle:
    """Cycle de vie du client HTTP."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_close_releases_http_client(self, tmdb_client: TMDBClient) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE))
        await tmdb_client.search("Fight Club")

        await tmdb_client.close()

        assert tmdb_client._client is None
