"""Storage helpers returning tagged StoreResult values."""

from app.repositories.result import StoreResult, StoreStatus

__all__ = ["StoreResult", "StoreStatus"]
