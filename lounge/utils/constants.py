"""
Constantes globales pour Lounge.

Ce module contient les constantes partagees par la configuration,
le client catalogue et le cache d'images:
- Nom de l'application (repertoires de donnees et de cache)
- Variantes de taille des images TMDB
- Bornes de la note personnelle
"""

APP_NAME = "lounge"

# Variantes de taille des images TMDB
TMDB_POSTER_SIZE = "w342"
TMDB_BACKDROP_SIZE = "w780"
TMDB_ORIGINAL_SIZE = "original"

TMDB_POSTER_SIZES = frozenset({"w92", "w154", "w185", "w342", "w500", "w780", "original"})
TMDB_BACKDROP_SIZES = frozenset({"w300", "w780", "w1280", "original"})

# Note personnelle (demi-points acceptes)
MIN_RATING = 1
MAX_RATING = 5
