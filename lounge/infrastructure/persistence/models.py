"""
Modeles SQLModel pour la base de donnees Lounge.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- movies: Films mis en cache depuis TMDB (cle primaire = ID TMDB)
- app_metadata: Paires cle/valeur, utilisee pour schema_version
- movie_logs: Journal personnel, au plus une entree par film

Les colonnes doivent rester alignees avec les migrations SQL de database.py,
qui creent et font evoluer le schema ; ces modeles servent aux requetes.
Les horodatages sont en UTC, avec fuseau.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, text
from sqlmodel import Field, SQLModel

from lounge.utils.constants import MAX_RATING, MIN_RATING

_SERVER_NOW = {"server_default": text("CURRENT_TIMESTAMP")}


def utcnow() -> datetime:
    """Instant courant en UTC, avec tzinfo."""
    return datetime.now(timezone.utc)


class MovieModel(SQLModel, table=True):
    """
    Modele representant un film en cache dans la base de donnees.

    L'ID est celui du catalogue TMDB, jamais genere localement.
    Les genres sont denormalises en chaine separee par des virgules.
    """

    __tablename__ = "movies"

    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None  # minutes
    genres: Optional[str] = None  # "Drama, Thriller"
    director: Optional[str] = None
    catalog_rating: Optional[float] = None  # Note moyenne TMDB (0-10)
    created_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs=_SERVER_NOW)


class AppMetadataModel(SQLModel, table=True):
    """Table cle/valeur de l'application (schema_version)."""

    __tablename__ = "app_metadata"

    key: str = Field(primary_key=True)
    value: Optional[str] = None


class MovieLogModel(SQLModel, table=True):
    """
    Modele representant une entree du journal.

    movie_id est UNIQUE (une entree par film) et la suppression du film
    supprime son entree (ON DELETE CASCADE).
    """

    __tablename__ = "movie_logs"
    __table_args__ = (
        CheckConstraint(
            f"user_rating >= {MIN_RATING} AND user_rating <= {MAX_RATING}",
            name="ck_movie_logs_user_rating",
        ),
        Index("idx_movie_logs_movie_id", "movie_id"),
        Index("idx_movie_logs_watched_date", "watched_date"),
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    movie_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("movies.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )
    user_rating: float
    watched_date: date
    notes: Optional[str] = ""
    created_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs=_SERVER_NOW)
    updated_at: Optional[datetime] = Field(default_factory=utcnow, sa_column_kwargs=_SERVER_NOW)
