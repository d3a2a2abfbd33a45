"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats pour la persistance des données.
Toutes les opérations sont asynchrones : l'implémentation SQLite exécute les
requêtes hors de la boucle d'événements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union

from lounge.core.entities.media import LogEntry, Movie
from lounge.core.exceptions import ValidationError


class SortField(str, Enum):
    """Champs autorisés pour le tri du journal."""

    WATCHED_DATE = "watched_date"
    RATING = "rating"
    TITLE = "title"


class SortOrder(str, Enum):
    """Sens de tri du journal."""

    ASC = "ASC"
    DESC = "DESC"


@dataclass
class LogFilters:
    """
    Filtres et tri pour la liste du journal.

    Les valeurs fournies sous forme de chaînes sont validées contre les
    énumérations SortField et SortOrder : aucune chaîne de l'appelant
    n'atteint la clause ORDER BY.

    Attributs :
        year : Année de visionnage (correspondance exacte sur 4 chiffres)
        sort_by : Champ de tri (défaut: date de visionnage)
        sort_order : Sens du tri (défaut: décroissant)
    """

    year: Optional[int] = None
    sort_by: Union[SortField, str] = SortField.WATCHED_DATE
    sort_order: Union[SortOrder, str] = SortOrder.DESC

    def __post_init__(self) -> None:
        try:
            self.sort_by = SortField(self.sort_by)
        except ValueError:
            allowed = ", ".join(field.value for field in SortField)
            raise ValidationError(
                f"Champ de tri inconnu: {self.sort_by!r} (attendu: {allowed})"
            ) from None

        order = self.sort_order.upper() if isinstance(self.sort_order, str) else self.sort_order
        try:
            self.sort_order = SortOrder(order)
        except ValueError:
            raise ValidationError(
                f"Sens de tri inconnu: {self.sort_order!r} (attendu: ASC ou DESC)"
            ) from None

        if self.year is not None and not 0 < self.year <= 9999:
            raise ValidationError(f"Annee invalide: {self.year}")


class IMovieRepository(ABC):
    """
    Interface de stockage des métadonnées de films.

    Définit les opérations pour mettre en cache et relire les films du catalogue.
    """

    @abstractmethod
    async def cache_movie(self, movie: Movie) -> Movie:
        """Met en cache un film (remplace intégralement une version existante)."""
        ...

    @abstractmethod
    async def get_movie(self, movie_id: int) -> Optional[Movie]:
        """Récupère un film par son ID TMDB, ou None si absent."""
        ...


class ILogRepository(ABC):
    """
    Interface de stockage du journal de films.

    Un film possède au plus une entrée de journal, qui ne peut exister
    sans le film en cache.
    """

    @abstractmethod
    async def log_movie(
        self,
        movie_id: int,
        rating: float,
        watched_date: Union[date, str],
        notes: Optional[str] = None,
    ) -> LogEntry:
        """Crée ou met à jour l'entrée de journal d'un film en cache."""
        ...

    @abstractmethod
    async def get_log_entry(self, movie_id: int) -> Optional[LogEntry]:
        """Récupère l'entrée d'un film (jointe au film), ou None."""
        ...

    @abstractmethod
    async def get_movie_logs(self, filters: Optional[LogFilters] = None) -> list[LogEntry]:
        """Liste les entrées jointes aux films, filtrées et triées."""
        ...

    @abstractmethod
    async def update_log_entry(
        self,
        log_id: int,
        rating: float,
        watched_date: Union[date, str],
        notes: Optional[str] = None,
    ) -> bool:
        """Modifie une entrée par son ID. Retourne True si modifiée."""
        ...

    @abstractmethod
    async def delete_log_entry(self, log_id: int) -> bool:
        """Supprime une entrée par son ID. Retourne True si supprimée."""
        ...

    @abstractmethod
    async def is_movie_logged(self, movie_id: int) -> bool:
        """Vérifie si un film possède une entrée de journal."""
        ...
