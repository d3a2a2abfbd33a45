"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe LOUNGE_,
et peut optionnellement être fournie via un fichier .env.

La clé API TMDB est optionnelle : la recherche et les détails sont désactivés si
elle n'est pas fournie, la résolution des URL d'images reste disponible.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lounge.utils.constants import (
    APP_NAME,
    TMDB_BACKDROP_SIZE,
    TMDB_BACKDROP_SIZES,
    TMDB_POSTER_SIZE,
    TMDB_POSTER_SIZES,
)

# Trouver le fichier .env à la racine du projet (parent de lounge/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe LOUNGE_.
    Exemple : LOUNGE_LOG_LEVEL=DEBUG

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="LOUNGE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Répertoires de données et de cache (convention XDG)
    data_dir: Path = Field(default=Path(f"~/.local/share/{APP_NAME}"))
    cache_dir: Path = Field(default=Path(f"~/.cache/{APP_NAME}"))

    # Catalogue (OPTIONNEL - recherche désactivée si non défini)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="en-US")

    # Tailles d'images par défaut
    poster_size: str = Field(default=TMDB_POSTER_SIZE)
    backdrop_size: str = Field(default=TMDB_BACKDROP_SIZE)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path(f"~/.local/state/{APP_NAME}/{APP_NAME}.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("data_dir", "cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("poster_size")
    @classmethod
    def check_poster_size(cls, v: str) -> str:
        """Vérifie que la taille de poster est une variante TMDB."""
        if v not in TMDB_POSTER_SIZES:
            raise ValueError(f"taille de poster inconnue: {v}")
        return v

    @field_validator("backdrop_size")
    @classmethod
    def check_backdrop_size(cls, v: str) -> str:
        """Vérifie que la taille d'image de fond est une variante TMDB."""
        if v not in TMDB_BACKDROP_SIZES:
            raise ValueError(f"taille d'image de fond inconnue: {v}")
        return v

    @property
    def database_path(self) -> Path:
        """Fichier SQLite : {data_dir}/lounge.db."""
        return self.data_dir / f"{APP_NAME}.db"

    @property
    def image_cache_dir(self) -> Path:
        """Racine du cache d'images (sous-répertoires posters/ et backdrops/)."""
        return self.cache_dir

    @property
    def api_cache_dir(self) -> Path:
        """Cache disque des réponses du catalogue."""
        return self.cache_dir / "api"

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return self.tmdb_api_key is not None
