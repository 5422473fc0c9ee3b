from functools import lru_cache

from app.services.llm import build_reflector


@lru_cache(maxsize=1)
def get_reflector():
    """Provide a singleton reflector for request handlers."""
    return build_reflector()
