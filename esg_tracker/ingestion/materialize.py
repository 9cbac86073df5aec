"""
Turn mapped upload rows into typed entity records.

Each row is handled on its own: a row that fails validation or coercion is
reported as a RowFailure and the remaining rows carry on.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..config import NUMERIC_FIELDS, TENANT_FIELD
from ..errors import RowFailure, require_tenant
from ..models import RECORD_TYPES
from .mapping import FieldMapping
from .utils import parse_decimal

logger = logging.getLogger(__name__)


@dataclass
class MaterializedRow:
    """Outcome of mapping one data row: exactly one of record / failure is set."""

    row_index: int
    record: object | None = None
    failure: RowFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _coerce(entity_kind: str, db_field: str, raw: str):
    if db_field in NUMERIC_FIELDS.get(entity_kind, set()):
        return parse_decimal(raw)
    return raw


def materialize_row(
    mapping: FieldMapping,
    row: dict[str, str],
    row_index: int,
    tenant_id: str,
) -> MaterializedRow:
    """Map, coerce and validate a single row."""
    kind = mapping.entity_kind
    values: dict = {TENANT_FIELD: tenant_id}

    for b in mapping.bound():
        raw = row.get(b.csv_field, "")
        if not raw:
            continue
        value = _coerce(kind, b.db_field, raw)
        if value is None:
            return MaterializedRow(
                row_index=row_index,
                failure=RowFailure(
                    row_index=row_index,
                    stage="coercion",
                    field=b.db_field,
                    raw_value=raw,
                    message=f"{b.label} '{raw}' is not a number",
                ),
            )
        values[b.db_field] = value

    for b in mapping.bindings:
        if b.required and b.db_field not in values:
            return MaterializedRow(
                row_index=row_index,
                failure=RowFailure(
                    row_index=row_index,
                    stage="validation",
                    field=b.db_field,
                    raw_value=row.get(b.csv_field, "") if b.is_bound else None,
                    message=f"Missing required value for {b.label}",
                ),
            )

    record = RECORD_TYPES[kind](**values)
    return MaterializedRow(row_index=row_index, record=record)


def materialize(
    mapping: FieldMapping,
    rows: Iterable[dict[str, str]],
    tenant_id: str,
) -> Iterator[MaterializedRow]:
    """Lazily map every row, yielding one MaterializedRow per input row.

    Rows are produced in input order. A KPI row whose value cannot be parsed
    as a finite number is yielded as a coercion failure, never as a record
    with a zero or NaN value.
    """
    tenant_id = require_tenant(tenant_id)
    return _iter_rows(mapping, rows, tenant_id)


def _iter_rows(mapping, rows, tenant_id):
    for row_index, row in enumerate(rows):
        result = materialize_row(mapping, row, row_index, tenant_id)
        if result.failure is not None:
            logger.warning(
                "Row %d rejected (%s): %s",
                row_index, result.failure.stage, result.failure.message,
            )
        yield result
