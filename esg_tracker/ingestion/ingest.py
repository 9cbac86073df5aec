"""
Batch ingestion: submit materialized records to the store one at a time.

Rows are created serially in their original order. There is no
all-or-nothing behaviour: a failed row is recorded and the batch moves on,
and rows created before a failure stay created.
"""

import logging
from collections.abc import Callable, Iterable, Sized
from dataclasses import dataclass, field

from ..errors import MappingIncompleteError, RowFailure, StoreError, require_tenant
from ..store import RecordStore
from .mapping import FieldMapping, is_submittable, missing_required
from .materialize import MaterializedRow, materialize
from .parser import parse

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    entity_kind: str
    total: int = 0
    succeeded: int = 0
    failures: list[RowFailure] = field(default_factory=list)
    created: list[dict] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled

    @property
    def message(self) -> str:
        """Single summary line shown once the batch is done."""
        if self.total == 0:
            return "Nothing to import"
        if self.cancelled:
            return (
                f"Upload cancelled after {self.succeeded + self.failed} of "
                f"{self.total} rows; {self.succeeded} {self.entity_kind} uploaded"
            )
        if not self.failures:
            return f"Successfully uploaded {self.succeeded} {self.entity_kind}"
        noun = "row" if self.failed == 1 else "rows"
        return (
            f"Uploaded {self.succeeded} of {self.total} {self.entity_kind}; "
            f"{self.failed} {noun} failed"
        )


def ingest(
    rows: Iterable[MaterializedRow],
    store: RecordStore,
    entity_kind: str,
    *,
    total: int | None = None,
    should_cancel: Callable[[], bool] | None = None,
    on_progress: Callable[[int, int], None] | None = None,
) -> BatchOutcome:
    """Create each record in order, collecting per-row failures.

    Parameters
    ----------
    rows : Output of materialize(); rows that already failed there are
           carried into the outcome without touching the store.
    store : Anything implementing RecordStore.create.
    entity_kind : "clients", "projects" or "kpis".
    total : Number of rows, when known up front. With it, ``rows`` is
            consumed one row at a time as records are created. Without it,
            a sized ``rows`` is measured with len() and any other iterable
            is read into a list first so progress can report a total.
    should_cancel : Checked before each row; returning True stops the batch.
    on_progress : Called with (rows_done, total) after each row.

    Returns
    -------
    BatchOutcome with counts, failures and the rows the store returned.
    A store error of any type becomes a 'persistence' failure for its row.
    """
    if total is None:
        if not isinstance(rows, Sized):
            rows = list(rows)
        total = len(rows)
    outcome = BatchOutcome(entity_kind=entity_kind, total=total)

    for done, item in enumerate(rows):
        if should_cancel is not None and should_cancel():
            logger.warning("Ingestion of %s cancelled at row %d", entity_kind, item.row_index)
            outcome.cancelled = True
            break

        if item.failure is not None:
            outcome.failures.append(item.failure)
        else:
            try:
                created = store.create(entity_kind, item.record.to_payload())
            except StoreError as exc:
                logger.warning("Row %d rejected by store: %s", item.row_index, exc)
                outcome.failures.append(
                    RowFailure(
                        row_index=item.row_index,
                        stage="persistence",
                        message=str(exc),
                    )
                )
            except Exception as exc:
                logger.exception("Row %d: unexpected store failure", item.row_index)
                outcome.failures.append(
                    RowFailure(
                        row_index=item.row_index,
                        stage="persistence",
                        message=f"{type(exc).__name__}: {exc}",
                    )
                )
            else:
                outcome.succeeded += 1
                outcome.created.append(created)

        if on_progress is not None:
            on_progress(done + 1, outcome.total)

    logger.info(
        "Ingested %d/%d %s (%d failed)",
        outcome.succeeded, outcome.total, entity_kind, outcome.failed,
    )
    return outcome


def upload(
    raw_text: str,
    mapping: FieldMapping,
    tenant_id: str,
    store: RecordStore,
    *,
    should_cancel: Callable[[], bool] | None = None,
    on_progress: Callable[[int, int], None] | None = None,
) -> BatchOutcome:
    """Full upload flow: parse, check the mapping, materialize and ingest."""
    tenant_id = require_tenant(tenant_id)
    if not is_submittable(mapping):
        raise MappingIncompleteError(missing_required(mapping))

    parsed = parse(raw_text)
    if parsed.is_empty:
        logger.warning("Nothing to import for %s", mapping.entity_kind)
        return BatchOutcome(entity_kind=mapping.entity_kind)

    return ingest(
        materialize(mapping, parsed.rows, tenant_id),
        store,
        mapping.entity_kind,
        total=len(parsed.rows),
        should_cancel=should_cancel,
        on_progress=on_progress,
    )
