"""
Lounge - Journal de films personnel.

Ce package fournit la couche de persistance locale et le cache d'images
d'une application de journal de films : les films choisis dans le catalogue
distant (TMDB) sont mis en cache localement, et l'utilisateur enregistre
une note, une date de visionnage et des notes personnelles par film.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, exceptions)
- infrastructure/ : Persistance SQLite (SQLModel)
- adapters/ : Client catalogue TMDB et cache d'images sur disque
"""
