"""Exceptions for the task store."""


class StoreError(Exception):
    """Base exception for task store operations."""


class ConfigStoreError(StoreError):
    """Raised when the store file cannot be read, parsed or written, or input is invalid."""


class DuplicateTaskError(StoreError):
    """Raised when adding a task whose name is already taken."""


class TaskNotFoundError(StoreError):
    """Raised when a task name does not exist in the store."""
