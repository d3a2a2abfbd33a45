"""
Taxonomie des erreurs de Lounge.

Les repositories et le cache d'images levent ces exceptions plutot que de
laisser fuir les erreurs du moteur SQL ou du client HTTP. La couche de
presentation les intercepte a chaque appel et degrade l'affichage
(icone de remplacement, message en ligne, diagnostic dans les logs).
"""

from pathlib import Path
from typing import Optional


class LoungeError(Exception):
    """Classe de base de toutes les erreurs de Lounge."""


class InitializationError(LoungeError):
    """
    Creation ou migration du schema impossible.

    Erreur fatale pour le handle de base : il ne doit pas etre utilise
    tant que l'initialisation n'a pas reussi.
    """


class QueryError(LoungeError):
    """
    Le moteur SQL a rejete une requete.

    Le message contient le detail fourni par le moteur. L'appelant peut
    relancer l'operation a sa discretion.
    """


class ValidationError(LoungeError):
    """
    Regle metier violee (ex: journaliser un film non mis en cache).

    Corrigible par l'appelant : relancer l'operation a l'identique
    echouera de nouveau.
    """


class NetworkError(LoungeError):
    """
    Echec du telechargement d'une image.

    Attributes:
        status_code: Code HTTP recu, ou None si la requete n'a pas abouti
        url: URL demandee
    """

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP {status_code} pour {url}"
        else:
            message = f"Requete echouee pour {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodeError(LoungeError):
    """
    Fichier image illisible.

    Traitee en interne par le cache d'images (nouveau telechargement),
    jamais remontee a l'appelant.
    """

    def __init__(self, path: Optional[Path] = None, reason: str = "") -> None:
        self.path = path
        super().__init__(f"Image illisible ({path or 'memoire'}): {reason}")


class CatalogError(LoungeError):
    """Client catalogue mal configure ou identifiants rejetes."""
