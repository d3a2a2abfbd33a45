"""
Couche adaptateurs (infrastructure).

Les adaptateurs implémentent les ports définis dans core/ports/ et fournissent
des implémentations concrètes pour les systèmes externes.

Sous-packages :
- api/ : Client du catalogue TMDB (httpx, cache disque, retry)
- images/ : Cache d'images sur disque (posters et images de fond)

Chaque adaptateur dépend de core/ mais core/ ne dépend jamais des adaptateurs.
"""
