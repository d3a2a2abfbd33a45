"""
Media metadata and diary entities.

Entities representing movies cached from the remote catalog (TMDB) and the
user's diary entries about them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional


@dataclass
class Movie:
    """
    Movie metadata from TMDB.

    A cached movie is a full snapshot of the last catalog lookup: caching the
    same id again replaces every field.

    Attributes:
        id: The Movie Database ID (primary key, never generated locally)
        title: Localized title
        original_title: Original language title
        year: Release year
        poster_path: Path to poster image on TMDB CDN
        backdrop_path: Path to backdrop image on TMDB CDN
        overview: Plot summary
        runtime: Runtime in minutes
        genres: Comma-joined genre names ("Drama, Thriller")
        director: Main director
        catalog_rating: TMDB average rating (0-10)
        created_at: When this snapshot was stored
    """

    id: int
    title: str = ""
    original_title: Optional[str] = None
    year: Optional[int] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: Optional[str] = None
    runtime: Optional[int] = None
    genres: Optional[str] = None
    director: Optional[str] = None
    catalog_rating: Optional[float] = None
    created_at: Optional[datetime] = None

    @property
    def genre_list(self) -> list[str]:
        """Genres as a list."""
        if not self.genres:
            return []
        return [genre.strip() for genre in self.genres.split(",") if genre.strip()]


@dataclass
class LogEntry:
    """
    Diary entry for a cached movie.

    A movie has at most one entry: logging it again updates the entry in
    place and keeps the same id. Entries read from the repository carry the
    owning movie so the UI can display title, year and poster directly.

    Attributes:
        id: Local surrogate ID
        movie_id: TMDB ID of the logged movie
        user_rating: Personal rating (1-5, half points allowed)
        watched_date: Date the movie was watched
        notes: Free text, empty string when omitted
        created_at: First time the movie was logged
        updated_at: Last modification
        movie: The owning Movie row
    """

    id: Optional[int]
    movie_id: int
    user_rating: float
    watched_date: date
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    movie: Optional[Movie] = None

    @property
    def log_id(self) -> Optional[int]:
        """Alias of id, distinct from the movie id in flat mappings."""
        return self.id

    @property
    def title(self) -> Optional[str]:
        return self.movie.title if self.movie else None

    @property
    def year(self) -> Optional[int]:
        return self.movie.year if self.movie else None

    @property
    def poster_path(self) -> Optional[str]:
        return self.movie.poster_path if self.movie else None

    @property
    def director(self) -> Optional[str]:
        return self.movie.director if self.movie else None

    def to_dict(self) -> dict[str, Any]:
        """
        Flat mapping of the entry joined with its movie.

        Dates are ISO formatted. Movie fields are merged at the top level,
        the movie's own id being exposed only as movie_id.
        """
        data: dict[str, Any] = {}
        if self.movie is not None:
            data.update(
                title=self.movie.title,
                original_title=self.movie.original_title,
                year=self.movie.year,
                poster_path=self.movie.poster_path,
                backdrop_path=self.movie.backdrop_path,
                overview=self.movie.overview,
                runtime=self.movie.runtime,
                genres=self.movie.genres,
                director=self.movie.director,
                catalog_rating=self.movie.catalog_rating,
            )
        data.update(
            log_id=self.id,
            movie_id=self.movie_id,
            user_rating=self.user_rating,
            watched_date=self.watched_date.isoformat(),
            notes=self.notes,
            created_at=self.created_at.isoformat() if self.created_at else None,
            updated_at=self.updated_at.isoformat() if self.updated_at else None,
        )
        return data
