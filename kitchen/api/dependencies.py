"""Shared FastAPI dependencies.

Routes take the repository through `Depends(get_repository)`; tests swap it
with `app.dependency_overrides[get_repository]`.
"""
from functools import lru_cache

from kitchen.infra.Json_Repository import JsonRepository
from kitchen.infra.Repository import KitchenRepository


@lru_cache(maxsize=1)
def _json_repository() -> JsonRepository:
    return JsonRepository()


def get_repository() -> KitchenRepository:
    return _json_repository()
