from functools import lru_cache

from config import get_settings
from db import SessionLocal
from gateway import TextGenerationGateway
from store import ProblemSessionStore


def get_store() -> ProblemSessionStore:
    """Store bound to the app's DB. Tests swap it via app.dependency_overrides."""
    return ProblemSessionStore(SessionLocal)


@lru_cache(maxsize=1)
def get_gateway() -> TextGenerationGateway:
    # Built once from settings; holds no per-request state
    return TextGenerationGateway.from_settings(get_settings())
