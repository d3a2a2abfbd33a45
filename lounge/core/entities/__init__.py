"""
Business entities representing core domain concepts.

Exports:
- Movie: Movie metadata cached from the catalog
- LogEntry: A diary entry (rating, watch date, notes) for a cached movie
"""

from lounge.core.entities.media import LogEntry, Movie

__all__ = [
    "Movie",
    "LogEntry",
]
