"""
Cache d'images sur disque (posters et images de fond).

- ImageCache: Disque d'abord, CDN du catalogue ensuite, telechargements partages
- ImageKind: Type d'image (poster, backdrop)
"""

from lounge.adapters.images.image_cache import ImageCache, ImageKind, decode_image

__all__ = [
    "ImageCache",
    "ImageKind",
    "decode_image",
]
