"""
Configuration du logging via loguru.

Deux sorties :
- console (stderr) coloree, avec le contexte structure des messages
- fichier JSON avec rotation, qui capture aussi le niveau DEBUG
  (hits/miss du cache d'images, telechargements, requetes SQL rejetees)

La couche de presentation appelle configure_from_settings() au demarrage.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from lounge.config import Settings

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> <dim>{extra}</dim>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Remplace les handlers loguru par ceux de Lounge.

    Args :
        log_level : Niveau minimum de la console
        log_file : Fichier JSON ; None desactive la sortie fichier
        rotation_size : Taille declenchant la rotation (ex: "10 MB")
        retention_count : Nombre de fichiers archives conserves
    """
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper(), format=_CONSOLE_FORMAT, colorize=True)

    if log_file is None:
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,  # les repositories loggent depuis le thread de la base
    )
    logger.debug("Logging configure", log_file=str(log_file), rotation=rotation_size)


def configure_from_settings(settings: Settings) -> None:
    """Configure le logging depuis les parametres LOUNGE_LOG_*."""
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )
