"""
Handle de base de donnees SQLite pour Lounge.

Ce module fournit :
- Database : handle explicite possedant un engine SQLite unique et un
  executeur a un seul thread qui serialise tous les acces
- Creation du schema complet sur une base neuve
- Migrations incrementales sur une base existante (table app_metadata,
  cle schema_version)

Chaque handle porte son propre etat d'initialisation : plusieurs handles
(ex: un par test) ne partagent rien.

Usage:
    database = Database(settings.database_path)
    await database.initialize()  # optionnel, fait au premier appel
    movie = await database.run(fonction_synchrone, argument)
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from loguru import logger
from sqlalchemy import Connection, Engine, event, inspect, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from lounge.core.exceptions import InitializationError, QueryError
from lounge.infrastructure.persistence.models import AppMetadataModel
from lounge.utils.constants import MAX_RATING, MIN_RATING

T = TypeVar("T")

SCHEMA_VERSION_KEY = "schema_version"

# Migrations indexees par numero de version. Chaque instruction est idempotente
# pour qu'une migration interrompue puisse etre rejouee depuis la derniere
# version enregistree.
MIGRATIONS: dict[int, tuple[str, ...]] = {
    1: (
        """
        CREATE TABLE IF NOT EXISTS movies (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            original_title TEXT,
            year INTEGER,
            poster_path TEXT,
            backdrop_path TEXT,
            overview TEXT,
            runtime INTEGER,
            genres TEXT,
            director TEXT,
            catalog_rating REAL,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS app_metadata (
            key TEXT PRIMARY KEY,
            value TEXT
        )
        """,
    ),
    2: (
        f"""
        CREATE TABLE IF NOT EXISTS movie_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            movie_id INTEGER NOT NULL UNIQUE,
            user_rating REAL NOT NULL,
            watched_date DATE NOT NULL,
            notes TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT ck_movie_logs_user_rating CHECK (user_rating >= {MIN_RATING} AND user_rating <= {MAX_RATING}),
            FOREIGN KEY (movie_id) REFERENCES movies (id) ON DELETE CASCADE
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_movie_logs_movie_id ON movie_logs (movie_id)",
        "CREATE INDEX IF NOT EXISTS idx_movie_logs_watched_date ON movie_logs (watched_date)",
    ),
}

LATEST_SCHEMA_VERSION = max(MIGRATIONS)


def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Active les cles etrangeres (desactivees par defaut dans SQLite)."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _read_version(conn: Connection) -> int:
    """Lit schema_version, 0 si la table ou la cle n'existe pas encore."""
    if not inspect(conn).has_table(AppMetadataModel.__tablename__):
        return 0
    row = conn.execute(
        select(AppMetadataModel.value).where(AppMetadataModel.key == SCHEMA_VERSION_KEY)
    ).first()
    if row is None or row[0] is None:
        return 0
    return int(row[0])


def _write_version(conn: Connection, version: int) -> None:
    statement = sqlite_insert(AppMetadataModel.__table__).values(
        key=SCHEMA_VERSION_KEY, value=str(version)
    )
    conn.execute(
        statement.on_conflict_do_update(
            index_elements=["key"], set_={"value": statement.excluded.value}
        )
    )


class Database:
    """
    Handle de la base SQLite locale.

    Possede l'engine (cree paresseusement) et un executeur a un seul thread :
    toutes les operations passent par run(), ce qui les serialise et evite
    de bloquer la boucle d'evenements.

    Attributes:
        LATEST_SCHEMA_VERSION: Version de schema attendue apres initialize()
    """

    LATEST_SCHEMA_VERSION = LATEST_SCHEMA_VERSION

    def __init__(self, db_path: Path) -> None:
        """
        Initialise le handle sans toucher au disque.

        Args:
            db_path: Chemin du fichier SQLite (repertoire parent cree si besoin)
        """
        self._db_path = Path(db_path)
        self._engine: Optional[Engine] = None
        self._ready = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lounge-db")

    @property
    def path(self) -> Path:
        """Chemin du fichier SQLite."""
        return self._db_path

    @property
    def is_ready(self) -> bool:
        """True une fois le schema cree ou migre."""
        return self._ready

    @property
    def engine(self) -> Engine:
        """Retourne l'engine SQLite, en le creant si necessaire."""
        if self._engine is None:
            self._engine = create_engine(
                f"sqlite:///{self._db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
            event.listen(self._engine, "connect", _enable_foreign_keys)
        return self._engine

    def session(self) -> Session:
        """Nouvelle session SQLModel sur l'engine du handle."""
        return Session(self.engine, expire_on_commit=False)

    async def initialize(self) -> None:
        """
        Garantit que le schema courant existe.

        Idempotent : les appels suivants ne font rien. Une base neuve recoit
        directement le schema complet ; une base existante recoit les
        migrations manquantes dans l'ordre croissant.

        Raises:
            InitializationError: Creation ou migration impossible
        """
        if self._ready:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._initialize_sync)

    def _initialize_sync(self) -> None:
        if self._ready:
            return
        fresh = not self._db_path.exists()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            if fresh:
                self._create_schema()
            else:
                self._migrate()
        except (SQLAlchemyError, OSError, ValueError) as e:
            logger.error("Initialisation de la base impossible", path=str(self._db_path), error=str(e))
            raise InitializationError(
                f"Initialisation de la base {self._db_path} impossible: {e}"
            ) from e
        self._ready = True
        logger.debug("Base de donnees prete", path=str(self._db_path))

    def _create_schema(self) -> None:
        """
        Cree le schema complet en une etape sur une base neuve.

        Rejoue toutes les migrations dans une seule transaction : une base
        neuve et une base migree ont exactement le meme DDL (AUTOINCREMENT,
        valeurs par defaut).
        """
        logger.info("Creation de la base", path=str(self._db_path))
        with self.engine.begin() as conn:
            for version in sorted(MIGRATIONS):
                for statement in MIGRATIONS[version]:
                    conn.execute(text(statement))
            _write_version(conn, LATEST_SCHEMA_VERSION)

    def _migrate(self) -> None:
        """Applique les migrations manquantes, chacune dans sa transaction."""
        with self.engine.connect() as conn:
            current = _read_version(conn)

        for version in sorted(MIGRATIONS):
            if version <= current:
                continue
            with self.engine.begin() as conn:
                for statement in MIGRATIONS[version]:
                    conn.execute(text(statement))
                _write_version(conn, version)
            logger.info("Migration de schema appliquee", version=version, path=str(self._db_path))

    async def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Execute une fonction synchrone dans l'executeur de la base.

        Initialise la base au besoin. Les erreurs du moteur sont converties
        en QueryError.

        Raises:
            InitializationError: Si la base ne peut pas etre initialisee
            QueryError: Si le moteur rejette une requete
        """
        await self.initialize()
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))
        except SQLAlchemyError as e:
            detail = str(getattr(e, "orig", None) or e)
            logger.warning("Requete rejetee par SQLite", error=detail)
            raise QueryError(detail) from e

    async def get_schema_version(self) -> Optional[int]:
        """Retourne la version de schema stockee (None si absente)."""

        def _read() -> Optional[int]:
            with self.engine.connect() as conn:
                return _read_version(conn) or None

        return await self.run(_read)

    def close(self) -> None:
        """Libere l'engine et l'executeur (a appeler a la fin)."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._executor.shutdown(wait=True)
        self._ready = False
