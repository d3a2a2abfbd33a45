"""
Implementation SQLModel du repository Movie.

Implemente l'interface IMovieRepository pour le cache local des films
du catalogue dans la base de donnees SQLite via SQLModel.
"""

from dataclasses import asdict
from typing import Optional

from loguru import logger
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from lounge.core.entities.media import Movie
from lounge.core.ports.repositories import IMovieRepository
from lounge.infrastructure.persistence.database import Database
from lounge.infrastructure.persistence.models import MovieModel, utcnow

# Colonnes remplacees a chaque mise en cache (tout sauf la cle primaire)
_SNAPSHOT_COLUMNS = (
    "title",
    "original_title",
    "year",
    "poster_path",
    "backdrop_path",
    "overview",
    "runtime",
    "genres",
    "director",
    "catalog_rating",
    "created_at",
)


class SQLModelMovieRepository(IMovieRepository):
    """
    Repository SQLModel pour les films en cache.

    Implemente IMovieRepository avec conversion bidirectionnelle
    entre l'entite Movie (domaine) et MovieModel (persistance).
    La base est initialisee au premier appel via Database.run().
    """

    def __init__(self, database: Database) -> None:
        """
        Initialise le repository avec le handle de base.

        Args :
            database : Handle Database partage par les repositories
        """
        self._database = database

    @staticmethod
    def _to_entity(model: MovieModel) -> Movie:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele MovieModel depuis la DB

        Retourne :
            L'entite Movie correspondante
        """
        return Movie(
            id=model.id,
            title=model.title,
            original_title=model.original_title,
            year=model.year,
            poster_path=model.poster_path,
            backdrop_path=model.backdrop_path,
            overview=model.overview,
            runtime=model.runtime,
            genres=model.genres,
            director=model.director,
            catalog_rating=model.catalog_rating,
            created_at=model.created_at,
        )

    async def cache_movie(self, movie: Movie) -> Movie:
        """
        Met en cache un film, en remplacant integralement une version existante.

        Les champs absents sont stockes a NULL : aucune valeur de l'ancienne
        version n'est conservee. L'upsert passe par ON CONFLICT DO UPDATE et
        non INSERT OR REPLACE, qui supprimerait la ligne et declencherait la
        suppression en cascade de l'entree de journal.
        """
        stored = await self._database.run(self._cache_movie_sync, movie)
        logger.debug("Film mis en cache", movie_id=movie.id, title=movie.title)
        return stored

    def _cache_movie_sync(self, movie: Movie) -> Movie:
        values = asdict(movie)
        values["created_at"] = utcnow()
        statement = sqlite_insert(MovieModel.__table__).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=["id"],
            set_={column: statement.excluded[column] for column in _SNAPSHOT_COLUMNS},
        )
        with self._database.engine.begin() as conn:
            conn.execute(statement)
        return Movie(**values)

    async def get_movie(self, movie_id: int) -> Optional[Movie]:
        """Recupere un film par son ID TMDB, ou None s'il n'est pas en cache."""
        return await self._database.run(self._get_movie_sync, movie_id)

    def _get_movie_sync(self, movie_id: int) -> Optional[Movie]:
        with self._database.session() as session:
            model = session.get(MovieModel, int(movie_id))
            if model:
                return self._to_entity(model)
        return None
