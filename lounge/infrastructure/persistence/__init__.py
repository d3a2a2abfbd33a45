"""
Module de persistance SQLite pour Lounge.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy).
Il contient :

- database.py : Handle Database (engine, executeur, creation et migrations du schema)
- models.py : Modeles SQLModel representant les tables de la base de donnees

Les modeles ici sont des adapters de persistance, distincts des entites de domaine
(dataclass dans core/entities/). La conversion entre les deux se fait dans les
repositories.

Usage:
    from lounge.infrastructure.persistence import Database
    from lounge.infrastructure.persistence.repositories import SQLModelMovieRepository

    database = Database(settings.database_path)
    movies = SQLModelMovieRepository(database)
    await movies.cache_movie(Movie(id=550, title="Fight Club"))
"""

from lounge.infrastructure.persistence.database import (
    LATEST_SCHEMA_VERSION,
    Database,
)
from lounge.infrastructure.persistence.models import (
    AppMetadataModel,
    MovieLogModel,
    MovieModel,
)

__all__ = [
    "Database",
    "LATEST_SCHEMA_VERSION",
    "MovieModel",
    "MovieLogModel",
    "AppMetadataModel",
]
