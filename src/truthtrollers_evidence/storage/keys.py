import hashlib


def cache_key(namespace: str, text: str) -> str:
    """Stable cache key for ``text`` within ``namespace``."""
    digest = hashlib.sha256(text.strip().encode("utf-8")).hexdigest()[:32]
    return f"{namespace}:{digest}"
