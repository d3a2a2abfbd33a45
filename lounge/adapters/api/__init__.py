"""
Client du catalogue distant (TMDB).

Infrastructure partagee:
- APICache: Cache persistant avec TTL differencies (recherche 24h, details 7j)
- RateLimitError: Exception pour les erreurs 429
- with_retry / request_with_retry: Backoff exponentiel pour gerer le rate limiting

TMDBClient implemente IMovieCatalog defini dans core/ports/api_clients.py.
"""

from lounge.adapters.api.cache import APICache
from lounge.adapters.api.retry import RateLimitError, request_with_retry, with_retry
from lounge.adapters.api.tmdb_client import TMDBClient

__all__ = [
    "APICache",
    "RateLimitError",
    "TMDBClient",
    "request_with_retry",
    "with_retry",
]
