"""
Fixtures pytest partagees pour les tests Lounge.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec repertoires temporaires
- Handle Database isole par test et repositories associes
- Film type (Fight Club) et octets JPEG valides
- Mock du resolveur d'URL d'images
"""

import io
from pathlib import Path
from typing import Callable, Iterator
from unittest.mock import MagicMock

import pytest
from PIL import Image

from lounge.config import Settings
from lounge.core.entities.media import Movie
from lounge.core.ports.api_clients import IImageUrlResolver
from lounge.infrastructure.persistence.database import Database
from lounge.infrastructure.persistence.repositories import (
    SQLModelLogRepository,
    SQLModelMovieRepository,
)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler base, cache et logs de chaque test.
    """
    return Settings(
        data_dir=tmp_path / "data",
        cache_dir=tmp_path / "cache",
        tmdb_api_key="test_api_key",
        log_file=tmp_path / "test.log",
    )


@pytest.fixture
def database(tmp_path: Path) -> Iterator[Database]:
    """Handle Database sur un fichier SQLite temporaire (non initialise)."""
    db = Database(tmp_path / "data" / "test.db")
    yield db
    db.close()


@pytest.fixture
def movie_repository(database: Database) -> SQLModelMovieRepository:
    """Repository de films sur la base de test."""
    return SQLModelMovieRepository(database)


@pytest.fixture
def log_repository(
    database: Database, movie_repository: SQLModelMovieRepository
) -> SQLModelLogRepository:
    """Repository du journal sur la base de test."""
    return SQLModelLogRepository(database, movie_repository)


@pytest.fixture
def make_movie() -> Callable[..., Movie]:
    """
    Fabrique de films type.

    Retourne Fight Club par defaut ; les arguments nommes remplacent les champs.
    """

    def _make(**overrides) -> Movie:
        values = dict(
            id=550,
            title="Fight Club",
            original_title="Fight Club",
            year=1999,
            poster_path="/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
            backdrop_path="/hZkgoQYus5dXo3H8T7Uef6DNknx.jpg",
            overview="A ticking-time-bomb insomniac and a slippery soap salesman...",
            runtime=139,
            genres="Drama, Thriller",
            director="David Fincher",
            catalog_rating=8.4,
        )
        values.update(overrides)
        return Movie(**values)

    return _make


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Petite image JPEG valide."""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 6), color=(200, 30, 30)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def mock_resolver() -> MagicMock:
    """
    Mock de IImageUrlResolver.

    Construit des URL TMDB comme le vrai client, None si aucun chemin.
    """
    mock = MagicMock(spec=IImageUrlResolver)

    def resolve(path, size):
        if not path:
            return None
        return f"https://image.tmdb.org/t/p/{size}{path}"

    mock.resolve_image_url.side_effect = resolve
    return mock
