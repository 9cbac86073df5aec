"""
Parser for uploaded comma-delimited text.

Grammar: lines split on newline, blank lines dropped, fields split on comma,
each field trimmed and stripped of one layer of surrounding double quotes.
The first line is the header.

Quoted commas and escaped delimiters are not supported: a comma inside a
quoted field always splits the field. Rows shorter than the header are
padded with empty strings; values beyond the last header column are ignored.
"""

import logging
from dataclasses import dataclass, field

from .utils import clean_field

logger = logging.getLogger(__name__)


@dataclass
class ParsedUpload:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to import (no data rows)."""
        return not self.rows


def parse(raw_text: str) -> ParsedUpload:
    """Split uploaded text into a header and row mappings.

    Parameters
    ----------
    raw_text : Decoded file contents.

    Returns
    -------
    ParsedUpload with ``headers`` in file order and one dict per data row,
    each holding every header column as a key.
    """
    lines = [line for line in raw_text.split("\n") if line.strip()]

    if not lines:
        logger.warning("Upload contains no lines")
        return ParsedUpload()

    headers = [clean_field(h) for h in lines[0].split(",")]

    rows = []
    for line in lines[1:]:
        values = [clean_field(v) for v in line.split(",")]
        row = {}
        for index, header in enumerate(headers):
            row[header] = values[index] if index < len(values) else ""
        rows.append(row)

    if not rows:
        logger.warning("Upload has a header but no data rows")

    logger.info("Parsed %d rows with %d columns", len(rows), len(headers))
    return ParsedUpload(headers=headers, rows=rows)
