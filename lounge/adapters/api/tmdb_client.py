"""
Client TMDB pour la recherche, les details de films et les URL d'images.

Implemente l'interface IMovieCatalog pour TMDB (The Movie Database).
Utilise le cache persistant et le mecanisme de retry pour gerer
le rate limiting.

Usage:
    cache = APICache(settings.api_cache_dir)
    client = TMDBClient(api_key="your_key", cache=cache)
    page = await client.search("Fight Club")
    movie = await client.get_details(550)
    url = client.get_poster_url(movie.poster_path)
    await client.close()
"""

from typing import Optional

import httpx
from loguru import logger

from lounge.adapters.api.cache import APICache
from lounge.adapters.api.retry import request_with_retry
from lounge.core.entities.media import Movie
from lounge.core.exceptions import CatalogError
from lounge.core.ports.api_clients import IMovieCatalog, SearchPage, SearchResult
from lounge.utils.constants import TMDB_BACKDROP_SIZE, TMDB_ORIGINAL_SIZE, TMDB_POSTER_SIZE


def _year_from(release_date: Optional[str]) -> Optional[int]:
    """Extrait l'annee d'une date TMDB (format: YYYY-MM-DD)."""
    if release_date and len(release_date) >= 4 and release_date[:4].isdigit():
        return int(release_date[:4])
    return None


class TMDBClient(IMovieCatalog):
    """
    Client API TMDB pour les metadonnees de films.

    Implemente IMovieCatalog avec:
    - Recherche de films par titre (paginee)
    - Recuperation des details complets d'un film (avec realisateur)
    - Construction des URL d'images (posters, images de fond)
    - Cache persistant (24h recherches, 7j details)
    - Retry automatique sur rate limiting (429)

    La cle API est optionnelle : sans elle, seules les URL d'images
    sont disponibles.

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base des images, suivie de la taille
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/"

    def __init__(
        self,
        api_key: Optional[str],
        cache: APICache,
        language: str = "en-US",
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4), None si non configuree
            cache: Instance APICache pour le caching des resultats
            language: Langue des titres et resumes (ex: "fr-FR")
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer

        Raises:
            CatalogError: Si aucune cle API n'est configuree
        """
        if not self._api_key:
            raise CatalogError("Cle API TMDB non configuree")

        if self._client is None or self._client.is_closed:
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    def set_api_key(self, api_key: Optional[str]) -> None:
        """Remplace la cle API (le client HTTP est recree au prochain appel)."""
        self._api_key = api_key
        self._client = None

    async def search(self, query: str, page: int = 1) -> SearchPage:
        """
        Recherche des films par titre.

        Utilise le pattern cache-first: verifie le cache AVANT de faire
        un appel API. Les resultats sont caches pour 24 heures.

        Args:
            query: Titre du film a rechercher
            page: Numero de page (1-indexe)

        Returns:
            SearchPage (liste vide si aucun resultat)
        """
        cached = await self._cache.get_search(self.source, query, page)
        if cached is not None:
            return cached

        client = self._get_client()
        response = await request_with_retry(
            client,
            "GET",
            "/search/movie",
            params={
                "query": query,
                "page": page,
                "language": self._language,
                "include_adult": "false",
            },
        )
        data = response.json()

        results = [
            SearchResult(
                id=item["id"],
                title=item.get("title") or item.get("original_title", ""),
                original_title=item.get("original_title"),
                year=_year_from(item.get("release_date")),
                poster_path=item.get("poster_path"),
                backdrop_path=item.get("backdrop_path"),
                overview=item.get("overview"),
                catalog_rating=item.get("vote_average"),
            )
            for item in data.get("results", [])
        ]
        search_page = SearchPage(
            results=results,
            page=data.get("page", page),
            total_pages=data.get("total_pages", 0),
            total_results=data.get("total_results", 0),
        )

        await self._cache.set_search(self.source, query, page, search_page)
        logger.debug("Recherche TMDB", query=query, page=page, results=len(results))
        return search_page

    async def get_details(self, movie_id: int) -> Optional[Movie]:
        """
        Recupere les details complets d'un film.

        Le Movie retourne est pret a etre mis en cache : genres joints par
        des virgules, realisateur extrait des credits, duree en minutes.
        Les details sont caches pour 7 jours.

        Args:
            movie_id: ID TMDB du film

        Returns:
            Movie, ou None si le film n'existe pas (404)
        """
        cached = await self._cache.get_details(self.source, movie_id)
        if cached is not None:
            return cached

        client = self._get_client()
        try:
            response = await request_with_retry(
                client,
                "GET",
                f"/movie/{movie_id}",
                params={"language": self._language, "append_to_response": "credits"},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()

        director = None
        for crew_member in data.get("credits", {}).get("crew", []):
            if crew_member.get("job") == "Director":
                director = crew_member.get("name")
                break

        genres = ", ".join(
            genre["name"] for genre in data.get("genres", []) if genre.get("name")
        )

        movie = Movie(
            id=data["id"],
            title=data.get("title") or data.get("original_title", ""),
            original_title=data.get("original_title"),
            year=_year_from(data.get("release_date")),
            poster_path=data.get("poster_path"),
            backdrop_path=data.get("backdrop_path"),
            overview=data.get("overview"),
            runtime=data.get("runtime"),
            genres=genres or None,
            director=director,
            catalog_rating=data.get("vote_average"),
        )

        await self._cache.set_details(self.source, movie_id, movie)
        return movie

    async def test_connection(self) -> bool:
        """
        Verifie la cle API sur un endpoint leger (/configuration).

        Raises:
            CatalogError: Cle absente ou rejetee (401)
        """
        client = self._get_client()
        try:
            await request_with_retry(client, "GET", "/configuration")
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise CatalogError("Cle API TMDB invalide") from e
            raise
        return True

    def resolve_image_url(self, path: Optional[str], size: str) -> Optional[str]:
        """Construit l'URL d'une image TMDB, None si aucun chemin."""
        if not path:
            return None
        return f"{self.TMDB_IMAGE_BASE_URL}{size}{path}"

    def get_poster_url(self, poster_path: Optional[str], size: str = TMDB_POSTER_SIZE) -> Optional[str]:
        return self.resolve_image_url(poster_path, size)

    def get_backdrop_url(self, backdrop_path: Optional[str], size: str = TMDB_BACKDROP_SIZE) -> Optional[str]:
        return self.resolve_image_url(backdrop_path, size)

    def get_original_poster_url(self, poster_path: Optional[str]) -> Optional[str]:
        return self.resolve_image_url(poster_path, TMDB_ORIGINAL_SIZE)

    def get_original_backdrop_url(self, backdrop_path: Optional[str]) -> Optional[str]:
        return self.resolve_image_url(backdrop_path, TMDB_ORIGINAL_SIZE)

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
