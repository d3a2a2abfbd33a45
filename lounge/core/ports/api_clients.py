"""
Interfaces ports pour le catalogue distant.

Le cœur ne dépend du catalogue (TMDB) que pour deux besoins : résoudre l'URL
d'une image, et fournir les métadonnées que le cache de films stocke telles quelles.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from lounge.core.entities.media import Movie


@dataclass
class SearchResult:
    """
    Résultat de recherche depuis le catalogue.

    Attributs :
        id : ID TMDB
        title : Titre localisé
        original_title : Titre en langue originale
        year : Année de sortie
        poster_path : Chemin du poster sur le CDN
        backdrop_path : Chemin de l'image de fond sur le CDN
        overview : Résumé
        catalog_rating : Note moyenne TMDB (0-10)
    """

    id: int
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    catalog_rating: Optional[float] = None


@dataclass
class SearchPage:
    """Page de résultats de recherche avec ses compteurs."""

    results: list[SearchResult] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total_results: int = 0


class IImageUrlResolver(ABC):
    """Résout un chemin d'image du catalogue en URL téléchargeable."""

    @abstractmethod
    def resolve_image_url(self, path: Optional[str], size: str) -> Optional[str]:
        """
        Construit l'URL d'une image.

        Args :
            path : Chemin de l'image dans le catalogue (ex: "/abc.jpg")
            size : Variante de taille (ex: "w342", "original")

        Retourne :
            L'URL complète, ou None si aucun chemin n'est fourni
        """
        ...


class IMovieCatalog(IImageUrlResolver):
    """
    Interface du catalogue de films distant.

    Les détails retournés sont des Movie prêts à être mis en cache.
    """

    @abstractmethod
    async def search(self, query: str, page: int = 1) -> SearchPage:
        """Recherche des films par titre."""
        ...

    @abstractmethod
    async def get_details(self, movie_id: int) -> Optional[Movie]:
        """Récupère les détails complets d'un film, ou None si inconnu."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source API (ex: 'tmdb')."""
        ...
