"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance des données
- IMovieRepository : Cache local des métadonnées de films
- ILogRepository : Journal des films vus (note, date, notes)
- LogFilters, SortField, SortOrder : Filtrage et tri du journal

Ports client API : Contrats pour le catalogue distant
- IImageUrlResolver : Résolution chemin d'image + taille -> URL
- IMovieCatalog : Recherche et détails de films
- SearchResult, SearchPage : Résultats de recherche
"""

from lounge.core.ports.api_clients import (
    IImageUrlResolver,
    IMovieCatalog,
    SearchPage,
    SearchResult,
)
from lounge.core.ports.repositories import (
    ILogRepository,
    IMovieRepository,
    LogFilters,
    SortField,
    SortOrder,
)

__all__ = [
    # Repositories
    "IMovieRepository",
    "ILogRepository",
    "LogFilters",
    "SortField",
    "SortOrder",
    # Catalogue
    "IImageUrlResolver",
    "IMovieCatalog",
    "SearchResult",
    "SearchPage",
]
