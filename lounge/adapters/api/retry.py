"""
Relance des requetes HTTP limitees par le serveur (429 Too Many Requests).

Partage par le client catalogue et le telechargement des images du CDN.
L'attente entre deux tentatives suit le header Retry-After quand le serveur
le fournit (plafonne a max_wait), sinon un backoff exponentiel avec jitter.

Usage:
    response = await request_with_retry(client, "GET", url)
"""

from typing import Callable, Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)


class RateLimitError(Exception):
    """
    Le serveur a repondu 429.

    Attributes:
        retry_after: Secondes demandees par le header Retry-After, ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Retry-After en secondes ; la forme date HTTP est ignoree (None)."""
    if value and value.strip().isdigit():
        return int(value.strip())
    return None


def wait_retry_after(max_wait: float) -> Callable[[RetryCallState], float]:
    """
    Strategie d'attente tenacity : Retry-After si connu, backoff sinon.

    Args:
        max_wait: Plafond en secondes, y compris pour Retry-After
    """
    backoff = wait_random_exponential(multiplier=1, min=1, max=max_wait)

    def _wait(retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return float(min(error.retry_after, max_wait))
        return backoff(retry_state)

    return _wait


def _log_retry(retry_state: RetryCallState) -> None:
    logger.debug(
        "Requete limitee (429), nouvelle tentative",
        attempt=retry_state.attempt_number,
        wait=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
    )


def with_retry(max_attempts: int = 5, max_wait: float = 60):
    """
    Decorateur de relance sur RateLimitError.

    Apres max_attempts, la derniere RateLimitError est relevee telle quelle.
    Les autres exceptions ne sont jamais relancees.
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=wait_retry_after(max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    max_wait: float = 60,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP en relancant les 429.

    Args:
        client: Client httpx async
        method: Methode HTTP
        url: URL absolue, ou relative a la base_url du client
        max_attempts: Nombre maximum de tentatives
        max_wait: Attente maximale entre deux tentatives (secondes)
        **kwargs: Transmis a client.request() (params, headers...)

    Raises:
        RateLimitError: Toujours 429 apres la derniere tentative
        httpx.HTTPStatusError: Autre reponse 4xx/5xx, sans relance
        httpx.TransportError: Serveur injoignable
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _send() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            raise RateLimitError(parse_retry_after(response.headers.get("Retry-After")))
        response.raise_for_status()
        return response

    return await _send()
