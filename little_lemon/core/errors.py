from __future__ import annotations


class MenuCacheError(RuntimeError):
    pass


class NetworkFailure(MenuCacheError):
    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class StorageFailure(MenuCacheError):
    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
