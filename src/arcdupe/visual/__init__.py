"""Perceptual hashing (Pillow + imagehash) and greedy Hamming clustering."""

from .phash import hash_image, hamming_distance
from .clustering import cluster_visual

__all__ = ["hash_image", "hamming_distance", "cluster_visual"]
