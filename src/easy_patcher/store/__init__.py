"""Persistent task configuration."""

from easy_patcher.store.exceptions import (
    ConfigStoreError,
    DuplicateTaskError,
    StoreError,
    TaskNotFoundError,
)
from easy_patcher.store.task_store import DEFAULT_CONFIG_PATH, TaskStore

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigStoreError",
    "DuplicateTaskError",
    "StoreError",
    "TaskNotFoundError",
    "TaskStore",
]
