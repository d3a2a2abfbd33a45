"""
Couche domaine (core).

Contient les entités métier, les ports (interfaces abstraites) et la
taxonomie d'erreurs. Cette couche n'a AUCUNE dépendance vers
l'infrastructure (SQLModel, httpx, Pillow).

Sous-packages :
- entities/ : Entités métier (Movie, LogEntry)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- exceptions.py : Erreurs remontées par les repositories et le cache d'images
"""
