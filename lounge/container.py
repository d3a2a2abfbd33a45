"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la couche de presentation :
handle de base, repositories, client catalogue et cache d'images.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_client import TMDBClient
from .adapters.images.image_cache import ImageCache
from .config import Settings
from .infrastructure.persistence.database import Database
from .infrastructure.persistence.repositories import (
    SQLModelLogRepository,
    SQLModelMovieRepository,
)


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Tous les fournisseurs sont des singletons : un seul handle de base
    (donc un seul engine et un seul executeur) est partage par les deux
    repositories.

    Utilisation :
        container = Container()
        movies = container.movie_repository()
        await movies.cache_movie(movie)  # initialise la base au premier appel
        poster = await container.image_cache().get_poster(movie.id, movie.poster_path)
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Base de donnees - handle explicite, initialise paresseusement
    database = providers.Singleton(
        Database,
        db_path=config.provided.database_path,
    )

    # Repositories
    movie_repository = providers.Singleton(
        SQLModelMovieRepository,
        database=database,
    )

    log_repository = providers.Singleton(
        SQLModelLogRepository,
        database=database,
        movie_repository=movie_repository,
    )

    # Catalogue
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )

    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
    )

    # Cache d'images - le client catalogue sert uniquement a resoudre les URL
    image_cache = providers.Singleton(
        ImageCache,
        cache_dir=config.provided.image_cache_dir,
        resolver=tmdb_client,
        poster_size=config.provided.poster_size,
        backdrop_size=config.provided.backdrop_size,
    )
