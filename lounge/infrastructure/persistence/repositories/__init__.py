"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans lounge/core/ports/repositories.py, utilisant SQLModel pour
la persistance SQLite.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit le handle Database via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from lounge.infrastructure.persistence.repositories.movie_repository import (
    SQLModelMovieRepository,
)
from lounge.infrastructure.persistence.repositories.log_repository import (
    SQLModelLogRepository,
)

__all__ = [
    "SQLModelMovieRepository",
    "SQLModelLogRepository",
]
