"""CSV bulk ingestion: parsing, field mapping, coercion and serial inserts."""

from .ingest import BatchOutcome, ingest, upload
from .mapping import FieldBinding, FieldMapping, build_mapping, set_binding
from .mapping import is_submittable, missing_required, suggest_bindings, preview_bindings
from .materialize import MaterializedRow, materialize
from .parser import ParsedUpload, parse
from .utils import decode_upload

__all__ = [
    "BatchOutcome",
    "FieldBinding",
    "FieldMapping",
    "MaterializedRow",
    "ParsedUpload",
    "build_mapping",
    "decode_upload",
    "ingest",
    "is_submittable",
    "materialize",
    "missing_required",
    "parse",
    "preview_bindings",
    "set_binding",
    "suggest_bindings",
    "upload",
]
