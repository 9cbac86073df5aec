"""
Error types for ingestion and store access.

Row-level problems are collected as RowFailure values on the batch outcome
rather than raised, so a caller can see exactly which rows went through.
"""

from dataclasses import dataclass


class MissingTenantError(ValueError):
    """Raised when an operation is invoked without a tenant identifier."""


class MappingIncompleteError(ValueError):
    """Raised when an upload is attempted with required fields unbound."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "Required fields are not mapped: " + ", ".join(self.missing)
        )


@dataclass
class StoreError(RuntimeError):
    """The record store rejected a request."""

    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


@dataclass(frozen=True)
class RowFailure:
    """One data row that could not be imported.

    stage is one of 'validation', 'coercion' or 'persistence'.
    """

    row_index: int
    stage: str
    message: str
    field: str | None = None
    raw_value: str | None = None

    def as_dict(self) -> dict:
        return {
            "row": self.row_index,
            "stage": self.stage,
            "field": self.field,
            "raw_value": self.raw_value,
            "message": self.message,
        }


def require_tenant(tenant_id: str | None) -> str:
    """Return the stripped tenant id, raising MissingTenantError if empty."""
    cleaned = str(tenant_id or "").strip()
    if not cleaned:
        raise MissingTenantError("A tenant identifier is required")
    return cleaned
