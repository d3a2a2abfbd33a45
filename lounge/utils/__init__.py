"""Utilitaires partages : constantes de l'application."""
