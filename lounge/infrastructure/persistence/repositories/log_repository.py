"""
Implementation SQLModel du repository du journal.

Implemente l'interface ILogRepository : chaque entree de journal est liee
a un film en cache (une entree au plus par film) et relue jointe au film
pour que l'interface n'ait pas besoin d'une seconde requete.
"""

from datetime import date, datetime
from typing import Optional, Union

from loguru import logger
from sqlalchemy import delete, func, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import select

from lounge.core.entities.media import LogEntry
from lounge.core.exceptions import ValidationError
from lounge.core.ports.repositories import (
    ILogRepository,
    IMovieRepository,
    LogFilters,
    SortField,
    SortOrder,
)
from lounge.infrastructure.persistence.database import Database
from lounge.infrastructure.persistence.models import MovieLogModel, MovieModel, utcnow
from lounge.infrastructure.persistence.repositories.movie_repository import (
    SQLModelMovieRepository,
)

# Liste blanche des expressions de tri : aucune chaine de l'appelant
# n'est injectee dans ORDER BY.
_SORT_COLUMNS = {
    SortField.WATCHED_DATE: MovieLogModel.watched_date,
    SortField.RATING: MovieLogModel.user_rating,
    SortField.TITLE: MovieModel.title,
}


def _coerce_date(value: Union[date, str]) -> date:
    """Accepte une date ou une chaine ISO (AAAA-MM-JJ)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Date de visionnage invalide: {value!r} (attendu: AAAA-MM-JJ)") from None


class SQLModelLogRepository(ILogRepository):
    """
    Repository SQLModel pour le journal de films.

    Depend du repository de films pour verifier qu'un film est en cache
    avant de le journaliser.
    """

    def __init__(self, database: Database, movie_repository: IMovieRepository) -> None:
        """
        Initialise le repository.

        Args :
            database : Handle Database partage par les repositories
            movie_repository : Repository utilise pour la verification cache-avant-journal
        """
        self._database = database
        self._movies = movie_repository

    @staticmethod
    def _to_entity(log: MovieLogModel, movie: Optional[MovieModel] = None) -> LogEntry:
        """Convertit une ligne de journal (et son film) en entite domaine."""
        return LogEntry(
            id=log.id,
            movie_id=log.movie_id,
            user_rating=log.user_rating,
            watched_date=log.watched_date,
            notes=log.notes or "",
            created_at=log.created_at,
            updated_at=log.updated_at,
            movie=SQLModelMovieRepository._to_entity(movie) if movie else None,
        )

    async def log_movie(
        self,
        movie_id: int,
        rating: float,
        watched_date: Union[date, str],
        notes: Optional[str] = None,
    ) -> LogEntry:
        """
        Cree ou met a jour l'entree de journal d'un film.

        Le film doit avoir ete mis en cache au prealable. Si une entree existe
        deja pour ce film, elle est modifiee en place et garde son ID.

        Raises :
            ValidationError : Film absent du cache ou date invalide
            QueryError : Note hors bornes ou autre rejet du moteur
        """
        watched = _coerce_date(watched_date)
        if await self._movies.get_movie(movie_id) is None:
            raise ValidationError(
                f"Le film {movie_id} doit etre mis en cache avant d'etre journalise"
            )

        entry = await self._database.run(
            self._log_movie_sync, int(movie_id), rating, watched, notes or ""
        )
        logger.info(
            "Film journalise",
            movie_id=movie_id,
            log_id=entry.id,
            rating=rating,
            watched_date=watched.isoformat(),
        )
        return entry

    def _log_movie_sync(self, movie_id: int, rating: float, watched: date, notes: str) -> LogEntry:
        now = utcnow()
        statement = sqlite_insert(MovieLogModel.__table__).values(
            movie_id=movie_id,
            user_rating=rating,
            watched_date=watched,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=["movie_id"],
            set_={
                "user_rating": statement.excluded.user_rating,
                "watched_date": statement.excluded.watched_date,
                "notes": statement.excluded.notes,
                "updated_at": statement.excluded.updated_at,
            },
        )
        with self._database.engine.begin() as conn:
            conn.execute(statement)
        return self._get_log_entry_sync(movie_id)

    async def get_log_entry(self, movie_id: int) -> Optional[LogEntry]:
        """Recupere l'entree d'un film jointe au film, ou None s'il n'est pas journalise."""
        return await self._database.run(self._get_log_entry_sync, int(movie_id))

    def _get_log_entry_sync(self, movie_id: int) -> Optional[LogEntry]:
        statement = (
            select(MovieLogModel, MovieModel)
            .join(MovieModel, MovieLogModel.movie_id == MovieModel.id)
            .where(MovieLogModel.movie_id == movie_id)
        )
        with self._database.session() as session:
            row = session.exec(statement).first()
            if row:
                log, movie = row
                return self._to_entity(log, movie)
        return None

    async def get_movie_logs(self, filters: Optional[LogFilters] = None) -> list[LogEntry]:
        """
        Liste les entrees du journal jointes aux films.

        Par defaut triees par date de visionnage decroissante. Le filtre
        d'annee compare les 4 chiffres de l'annee de watched_date.
        """
        return await self._database.run(self._get_movie_logs_sync, filters or LogFilters())

    def _get_movie_logs_sync(self, filters: LogFilters) -> list[LogEntry]:
        column = _SORT_COLUMNS[SortField(filters.sort_by)]
        if SortOrder(filters.sort_order) is SortOrder.ASC:
            ordering = (column.asc(), MovieLogModel.id.asc())
        else:
            ordering = (column.desc(), MovieLogModel.id.desc())

        statement = select(MovieLogModel, MovieModel).join(
            MovieModel, MovieLogModel.movie_id == MovieModel.id
        )
        if filters.year is not None:
            statement = statement.where(
                func.strftime("%Y", MovieLogModel.watched_date) == f"{filters.year:04d}"
            )
        statement = statement.order_by(*ordering)

        with self._database.session() as session:
            rows = session.exec(statement).all()
            return [self._to_entity(log, movie) for log, movie in rows]

    async def update_log_entry(
        self,
        log_id: int,
        rating: float,
        watched_date: Union[date, str],
        notes: Optional[str] = None,
    ) -> bool:
        """Modifie note, date et notes d'une entree par son ID. Retourne True si modifiee."""
        watched = _coerce_date(watched_date)
        statement = (
            update(MovieLogModel.__table__)
            .where(MovieLogModel.__table__.c.id == int(log_id))
            .values(
                user_rating=rating,
                watched_date=watched,
                notes=notes or "",
                updated_at=utcnow(),
            )
        )
        updated = await self._database.run(self._execute_write, statement)
        logger.debug("Entree de journal modifiee", log_id=log_id, updated=updated)
        return updated

    async def delete_log_entry(self, log_id: int) -> bool:
        """Supprime une entree par son ID (le film reste en cache). Retourne True si supprimee."""
        statement = delete(MovieLogModel.__table__).where(
            MovieLogModel.__table__.c.id == int(log_id)
        )
        deleted = await self._database.run(self._execute_write, statement)
        logger.info("Entree de journal supprimee", log_id=log_id, deleted=deleted)
        return deleted

    def _execute_write(self, statement) -> bool:
        with self._database.engine.begin() as conn:
            result = conn.execute(statement)
            return result.rowcount > 0

    async def is_movie_logged(self, movie_id: int) -> bool:
        """Verifie si un film possede une entree de journal."""
        return await self._database.run(self._is_movie_logged_sync, int(movie_id))

    def _is_movie_logged_sync(self, movie_id: int) -> bool:
        statement = select(MovieLogModel.id).where(MovieLogModel.movie_id == movie_id)
        with self._database.session() as session:
            return session.exec(statement).first() is not None
