"""
Cache disque des reponses du catalogue (diskcache).

Conserve les pages de recherche 24 heures et les details de films 7 jours,
entre deux lancements de l'application. Les images ne passent pas par ici :
elles ont leur propre cache, sans expiration (adapters/images/).

Les valeurs sont les objets du domaine (SearchPage, Movie), serialises par
pickle ; les appels diskcache bloquants sont deportes dans l'executeur par
defaut de la boucle.
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache

from lounge.core.entities.media import Movie
from lounge.core.ports.api_clients import SearchPage


class APICache:
    """
    Cache asynchrone a TTL pour le client catalogue.

    Les cles sont construites a partir de la source ("tmdb") et des
    parametres de la requete ; la requete de recherche est normalisee
    (espaces de bord, casse).

    Example:
        cache = APICache(settings.api_cache_dir)
        page = await cache.get_search("tmdb", "Fight Club", page=1)
        if page is None:
            page = ...  # appel API
            await cache.set_search("tmdb", "Fight Club", 1, page)
    """

    SEARCH_TTL = 24 * 60 * 60  # 86400 s
    DETAILS_TTL = 7 * 24 * 60 * 60  # 604800 s

    def __init__(self, cache_dir: Union[str, Path]) -> None:
        self._directory = Path(cache_dir)
        self._cache = Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    @staticmethod
    def search_key(source: str, query: str, page: int = 1) -> str:
        return f"{source}:search:{query.strip().lower()}:{page}"

    @staticmethod
    def details_key(source: str, movie_id: int) -> str:
        return f"{source}:details:{movie_id}"

    async def get(self, key: str) -> Optional[Any]:
        """Valeur stockee sous key, None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Stocke value sous key pour ttl secondes."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self._cache.set, key, value, expire=ttl))

    async def get_search(self, source: str, query: str, page: int = 1) -> Optional[SearchPage]:
        return await self.get(self.search_key(source, query, page))

    async def set_search(self, source: str, query: str, page: int, value: SearchPage) -> None:
        await self.set(self.search_key(source, query, page), value, self.SEARCH_TTL)

    async def get_details(self, source: str, movie_id: int) -> Optional[Movie]:
        return await self.get(self.details_key(source, movie_id))

    async def set_details(self, source: str, movie_id: int, value: Movie) -> None:
        await self.set(self.details_key(source, movie_id), value, self.DETAILS_TTL)

    async def clear(self) -> None:
        """Vide le cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        self._cache.close()
