"""
Cache d'images sur disque pour les posters et images de fond.

Chaque image est identifiee par (type, ID du film, taille) et stockee a un
chemin deterministe qui sert aussi de cle de cache :

    {cache_dir}/posters/{movie_id}_{size}.jpg
    {cache_dir}/backdrops/{movie_id}_{size}.jpg

L'existence du fichier vaut validite : pas d'expiration, pas de checksum.
Un fichier illisible est retelecharge. Les ecritures passent par un fichier
temporaire renomme, un fichier en cache est donc absent ou complet.

Les demandes concurrentes pour une meme cle partagent un seul
telechargement. Un demandeur peut abandonner sa demande (annulation de sa
tache) ; le telechargement n'est annule que si plus personne ne l'attend.
"""

import asyncio
import io
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import httpx
from loguru import logger
from PIL import Image, UnidentifiedImageError

from lounge.adapters.api.retry import RateLimitError, request_with_retry
from lounge.core.exceptions import DecodeError, NetworkError
from lounge.core.ports.api_clients import IImageUrlResolver
from lounge.utils.constants import TMDB_BACKDROP_SIZE, TMDB_POSTER_SIZE


class ImageKind(str, Enum):
    """Type d'image, qui determine le sous-repertoire du cache."""

    POSTER = "poster"
    BACKDROP = "backdrop"

    @property
    def directory(self) -> str:
        return f"{self.value}s"


def decode_image(data: bytes, path: Optional[Path] = None) -> Image.Image:
    """
    Decode des octets en image Pillow entierement chargee.

    Raises:
        DecodeError: Octets illisibles comme image
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(path, str(e)) from e
    return image


def _write_atomic(path: Path, data: bytes) -> None:
    """Ecrit dans un fichier temporaire du meme repertoire puis le renomme."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


@dataclass
class _Flight:
    """Telechargement en cours et nombre de demandeurs qui l'attendent."""

    task: "asyncio.Task[bytes]"
    waiters: int = 0


class ImageCache:
    """
    Cache d'images local devant le CDN du catalogue.

    Consulte le disque avant le reseau, et ne sollicite le catalogue que pour
    resoudre l'URL d'une image.

    Example:
        cache = ImageCache(settings.image_cache_dir, resolver=tmdb_client)
        poster = await cache.get_poster(550, "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg")
        if poster is None:
            ...  # afficher l'icone de remplacement
    """

    def __init__(
        self,
        cache_dir: Path,
        resolver: IImageUrlResolver,
        poster_size: str = TMDB_POSTER_SIZE,
        backdrop_size: str = TMDB_BACKDROP_SIZE,
    ) -> None:
        """
        Initialise le cache et cree ses sous-repertoires.

        Args:
            cache_dir: Racine du cache (contient posters/ et backdrops/)
            resolver: Resolution chemin + taille -> URL (client catalogue)
            poster_size: Taille par defaut des posters
            backdrop_size: Taille par defaut des images de fond
        """
        self._cache_dir = Path(cache_dir)
        self._resolver = resolver
        self._poster_size = poster_size
        self._backdrop_size = backdrop_size
        self._client: Optional[httpx.AsyncClient] = None
        self._in_flight: dict[Path, _Flight] = {}

        for kind in ImageKind:
            directory = self._cache_dir / kind.directory
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                logger.debug("Repertoire de cache cree", path=str(directory))

    @property
    def cache_dir(self) -> Path:
        """Racine du cache d'images."""
        return self._cache_dir

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
        return self._client

    def path_for(self, kind: ImageKind, movie_id: int, size: str) -> Path:
        """Chemin deterministe d'une image : {kind}s/{movie_id}_{size}.jpg."""
        return self._cache_dir / ImageKind(kind).directory / f"{movie_id}_{size}.jpg"

    async def get_image(
        self,
        kind: ImageKind,
        movie_id: int,
        remote_path: Optional[str],
        size: str,
    ) -> Optional[Image.Image]:
        """
        Retourne l'image decodee, depuis le disque ou a defaut depuis le CDN.

        Args:
            kind: Poster ou image de fond
            movie_id: ID TMDB du film proprietaire
            remote_path: Chemin de l'image dans le catalogue
            size: Variante de taille (ex: "w342")

        Returns:
            Image Pillow, ou None si le film n'a pas d'image

        Raises:
            NetworkError: Reponse non 200 ou serveur injoignable
        """
        kind = ImageKind(kind)
        path = self.path_for(kind, movie_id, size)
        loop = asyncio.get_running_loop()

        if path.exists():
            try:
                data = await loop.run_in_executor(None, path.read_bytes)
                image = await loop.run_in_executor(None, decode_image, data, path)
                logger.debug("Image servie depuis le cache", kind=kind.value, movie_id=movie_id, size=size)
                return image
            except (DecodeError, OSError) as e:
                logger.warning("Image en cache illisible, nouveau telechargement", path=str(path), error=str(e))

        url = self._resolver.resolve_image_url(remote_path, size)
        if not url:
            return None

        data = await self._fetch_shared(path, url)
        try:
            return await loop.run_in_executor(None, decode_image, data, path)
        except DecodeError as e:
            logger.warning("Image telechargee illisible", url=url, error=str(e))
            path.unlink(missing_ok=True)
            return None

    async def _fetch_shared(self, path: Path, url: str) -> bytes:
        """
        Telecharge une image en partageant le transfert entre demandeurs.

        Le premier demandeur lance la tache ; les suivants attendent la meme.
        L'annulation d'un demandeur ne touche pas les autres.
        """
        flight = self._in_flight.get(path)
        if flight is None:
            flight = _Flight(task=asyncio.ensure_future(self._download(url, path)))
            self._in_flight[path] = flight
            flight.task.add_done_callback(lambda _task, key=path, f=flight: self._forget(key, f))
        else:
            logger.debug("Telechargement deja en cours, attente partagee", path=str(path))

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            if flight.waiters == 1 and not flight.task.done():
                logger.debug("Plus aucun demandeur, telechargement annule", url=url)
                flight.task.cancel()
                self._forget(path, flight)
            raise
        finally:
            flight.waiters -= 1

    def _forget(self, path: Path, flight: _Flight) -> None:
        if self._in_flight.get(path) is flight:
            del self._in_flight[path]

    async def _download(self, url: str, path: Path) -> bytes:
        """
        Telecharge une image et l'ecrit atomiquement a son chemin de cache.

        Raises:
            NetworkError: Reponse non 200 ou requete echouee
        """
        client = self._get_client()
        try:
            response = await request_with_retry(client, "GET", url)
        except httpx.HTTPStatusError as e:
            raise NetworkError(url, e.response.status_code, e.response.reason_phrase) from e
        except RateLimitError as e:
            raise NetworkError(url, 429, str(e)) from e
        except httpx.HTTPError as e:
            raise NetworkError(url, reason=str(e)) from e

        if response.status_code != 200:
            raise NetworkError(url, response.status_code, response.reason_phrase)

        data = response.content
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _write_atomic, path, data)
        logger.debug("Image telechargee et mise en cache", url=url, path=str(path), size=len(data))
        return data

    async def get_poster(
        self,
        movie_id: int,
        poster_path: Optional[str],
        size: Optional[str] = None,
    ) -> Optional[Image.Image]:
        """
        Poster d'un film pour l'affichage.

        Les erreurs reseau sont journalisees et converties en None : l'appelant
        affiche alors l'icone de remplacement.
        """
        return await self._get_or_placeholder(
            ImageKind.POSTER, movie_id, poster_path, size or self._poster_size
        )

    async def get_backdrop(
        self,
        movie_id: int,
        backdrop_path: Optional[str],
        size: Optional[str] = None,
    ) -> Optional[Image.Image]:
        """Image de fond d'un film, None en cas d'erreur reseau."""
        return await self._get_or_placeholder(
            ImageKind.BACKDROP, movie_id, backdrop_path, size or self._backdrop_size
        )

    async def _get_or_placeholder(
        self, kind: ImageKind, movie_id: int, remote_path: Optional[str], size: str
    ) -> Optional[Image.Image]:
        try:
            return await self.get_image(kind, movie_id, remote_path, size)
        except NetworkError as e:
            logger.warning("Telechargement d'image echoue", kind=kind.value, movie_id=movie_id, error=str(e))
            return None

    async def clear_cache(self) -> int:
        """
        Supprime tous les fichiers des sous-repertoires du cache.

        Un fichier impossible a supprimer n'interrompt pas le nettoyage.

        Returns:
            Nombre de fichiers supprimes
        """
        loop = asyncio.get_running_loop()
        removed = await loop.run_in_executor(None, self._clear_sync)
        logger.info("Cache d'images vide", removed=removed, path=str(self._cache_dir))
        return removed

    def _clear_sync(self) -> int:
        removed = 0
        for kind in ImageKind:
            directory = self._cache_dir / kind.directory
            if not directory.is_dir():
                continue
            for child in directory.iterdir():
                try:
                    child.unlink()
                    removed += 1
                except OSError as e:
                    logger.debug("Suppression impossible", path=str(child), error=str(e))
        return removed

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
