"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

visual/phash.py
Perceptual hashing of preview images.

Hashes are carried as unsigned 64-bit integers so they can be stored in the
content cache as plain numbers and compared with a popcount.
"""

import io

import imagehash
from PIL import Image, UnidentifiedImageError

from arcdupe.errors import HashError

HASH_SIZE = 8  # 8x8 DCT bits -> 64-bit hash
MAX_DIMENSION = 1024


def hash_image(data: bytes) -> int:
    """
    Compute the perceptual hash of an encoded image.

    Args:
        data: Encoded image bytes (jpg, png, webp, ...).

    Returns:
        int: 64-bit pHash.

    Raises:
        HashError: if the bytes cannot be decoded as an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            # Resize large images for faster processing
            if img.size[0] > MAX_DIMENSION or img.size[1] > MAX_DIMENSION:
                img.thumbnail((MAX_DIMENSION, MAX_DIMENSION))
            phash = imagehash.phash(img, hash_size=HASH_SIZE)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise HashError(f"Failed to decode image: {e}") from e
    return int(str(phash), 16)


def hamming_distance(hash_a: int, hash_b: int) -> int:
    """Number of differing bits between two hashes."""
    return bin(hash_a ^ hash_b).count("1")
