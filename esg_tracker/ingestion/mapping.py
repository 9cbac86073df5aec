"""
Field mapping between upload columns and target record fields.

A FieldMapping is created when the user picks an entity kind, edited as
they bind columns, and thrown away after the upload. Updates return a new
mapping; nothing here mutates its input.
"""

import logging
from dataclasses import dataclass, replace

from ..config import FIELD_CATALOG
from .utils import to_snake_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldBinding:
    db_field: str
    label: str
    required: bool
    csv_field: str = ""

    @property
    def is_bound(self) -> bool:
        return bool(self.csv_field.strip())


@dataclass(frozen=True)
class FieldMapping:
    entity_kind: str
    bindings: tuple[FieldBinding, ...]

    def binding(self, db_field: str) -> FieldBinding:
        for b in self.bindings:
            if b.db_field == db_field:
                return b
        raise KeyError(f"{self.entity_kind} has no field '{db_field}'")

    def bound(self) -> list[FieldBinding]:
        return [b for b in self.bindings if b.is_bound]


def build_mapping(entity_kind: str) -> FieldMapping:
    """Return an unbound mapping seeded from the field catalog."""
    if entity_kind not in FIELD_CATALOG:
        raise ValueError(
            f"Unknown entity kind '{entity_kind}'; expected one of {sorted(FIELD_CATALOG)}"
        )
    bindings = tuple(
        FieldBinding(
            db_field=spec["db_field"],
            label=spec["label"],
            required=spec["required"],
        )
        for spec in FIELD_CATALOG[entity_kind]
    )
    return FieldMapping(entity_kind=entity_kind, bindings=bindings)


def set_binding(mapping: FieldMapping, db_field: str, csv_field: str | None) -> FieldMapping:
    """Bind ``db_field`` to ``csv_field`` (or unbind it with "" / None)."""
    mapping.binding(db_field)  # KeyError for unknown targets
    new_value = csv_field or ""
    bindings = tuple(
        replace(b, csv_field=new_value) if b.db_field == db_field else b
        for b in mapping.bindings
    )
    return replace(mapping, bindings=bindings)


def missing_required(mapping: FieldMapping) -> list[str]:
    """Labels of required fields that still have no source column."""
    return [b.label for b in mapping.bindings if b.required and not b.is_bound]


def is_submittable(mapping: FieldMapping) -> bool:
    """True iff every required field is bound to a non-empty column."""
    return not missing_required(mapping)


def suggest_bindings(mapping: FieldMapping, headers: list[str]) -> FieldMapping:
    """Pre-bind unbound fields whose name or label matches a header.

    Matching is on snake_case names, so ``Metric Name``, ``metric_name`` and
    ``MetricName`` all bind to ``metric_name``. Existing bindings are kept.
    """
    by_key: dict[str, str] = {}
    for header in headers:
        by_key.setdefault(to_snake_case(header), header)

    result = mapping
    for b in mapping.bindings:
        if b.is_bound:
            continue
        for key in (to_snake_case(b.db_field), to_snake_case(b.label)):
            if key in by_key:
                result = set_binding(result, b.db_field, by_key[key])
                break

    matched = len(result.bound()) - len(mapping.bound())
    if matched:
        logger.info("Suggested %d bindings for %s", matched, mapping.entity_kind)
    return result


def preview_bindings(mapping: FieldMapping, rows: list[dict[str, str]]) -> dict[str, str]:
    """First-row value for each bound field, skipping empty cells."""
    if not rows:
        return {}
    first = rows[0]
    preview = {}
    for b in mapping.bound():
        value = first.get(b.csv_field, "")
        if value:
            preview[b.db_field] = value
    return preview
