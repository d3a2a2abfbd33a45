"""
Tests pour les modeles SQLModel de persistance.

Verifie les valeurs par defaut et la declaration des contraintes
(cle etrangere en cascade, unicite par film, bornes de la note).
"""

from datetime import date, timedelta, timezone

from lounge.infrastructure.persistence.models import (
    AppMetadataModel,
    MovieLogModel,
    MovieModel,
    utcnow,
)


class TestMovieModel:
    """Tests pour MovieModel."""

    def test_optional_fields_default_to_none(self):
        model = MovieModel(id=550, title="Fight Club")
        assert model.year is None
        assert model.genres is None
        assert model.catalog_rating is None
        assert model.created_at is not None

    def test_id_is_not_autoincremented(self):
        """L'ID vient du catalogue TMDB."""
        column = MovieModel.__table__.c.id
        assert column.primary_key
        assert column.autoincrement is False


class TestMovieLogModel:
    """Tests pour MovieLogModel."""

    def test_defaults(self):
        model = MovieLogModel(movie_id=550, user_rating=4.0, watched_date=date(2025, 1, 15))
        assert model.id is None
        assert model.notes == ""
        assert model.created_at is not None
        assert model.updated_at is not None

    def test_movie_id_is_unique_foreign_key_with_cascade(self):
        column = MovieLogModel.__table__.c.movie_id
        (foreign_key,) = column.foreign_keys
        assert column.unique
        assert not column.nullable
        assert foreign_key.target_fullname == "movies.id"
        assert foreign_key.ondelete == "CASCADE"

    def test_rating_check_constraint(self):
        names = {constraint.name for constraint in MovieLogModel.__table__.constraints}
        assert "ck_movie_logs_user_rating" in names

    def test_indexes(self):
        names = {index.name for index in MovieLogModel.__table__.indexes}
        assert {"idx_movie_logs_movie_id", "idx_movie_logs_watched_date"} <= names

    def test_log_ids_are_never_reused(self):
        """AUTOINCREMENT, comme dans la migration qui cree movie_logs."""
        assert MovieLogModel.__table__.kwargs.get("sqlite_autoincrement") is True


class TestAppMetadataModel:
    def test_key_is_primary_key(self):
        assert AppMetadataModel.__table__.c.key.primary_key


class TestTimestamps:
    """Horodatages UTC avec fuseau, acceptes par les colonnes DateTime de SQLModel."""

    def test_utcnow_is_timezone_aware(self):
        now = utcnow()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_model_defaults_are_timezone_aware(self):
        movie = MovieModel(id=550, title="Fight Club")
        log = MovieLogModel(movie_id=550, user_rating=4.0, watched_date=date(2025, 1, 15))
        assert movie.created_at.tzinfo == timezone.utc
        assert log.created_at.tzinfo == timezone.utc
        assert log.updated_at.tzinfo == timezone.utc

    def test_timestamp_columns_default_to_current_timestamp(self):
        """Meme valeur par defaut que le DDL des migrations."""
        columns = [
            MovieModel.__table__.c.created_at,
            MovieLogModel.__table__.c.created_at,
            MovieLogModel.__table__.c.updated_at,
        ]
        for column in columns:
            assert str(column.server_default.arg) == "CURRENT_TIMESTAMP"
