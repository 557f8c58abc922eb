"""Shared FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends

from core.config import Config, load_config, merge_env_config
from core.storage import ResultStore

DEFAULT_DB_PATH = "data/portal_a11y.db"


def get_config() -> Config:
    """Configuration file (if any) with A11Y_* environment overrides, built per request."""
    return merge_env_config(load_config())


@lru_cache(maxsize=None)
def _store_for(db_path: str) -> ResultStore:
    return ResultStore(db_path)


def get_store(config: Config = Depends(get_config)) -> ResultStore:
    """The result store for the configured database path (one instance per path)."""
    return _store_for(config.database.path or DEFAULT_DB_PATH)
