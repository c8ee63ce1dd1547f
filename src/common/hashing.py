"""Hashing utilities."""

import hashlib


def generate_record_id(collection: str, url: str) -> str:
    """Generate a stable record ID from its collection and canonical URL."""
    return hashlib.sha256(f"{collection}:{url}".encode()).hexdigest()[:16]
