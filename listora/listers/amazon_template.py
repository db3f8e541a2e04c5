"""
Amazon flat-file rendering.

Seller Central's "Add Products via Upload" accepts a tab-separated
``fptcustom`` flat file:

    row 1  TemplateType=fptcustom  Version=...  Category=...  TemplateSignature=...
    row 2  instruction text
    row 3  column names
    row 4  product data

``render_csv`` produces the plain two-row CSV offered as a simple download.
Values are cleaned of mojibake and non-ASCII characters and quoted only
when they contain the delimiter, a quote or a line break.
"""

import base64
import csv
import io
from collections.abc import Mapping

from listora.content.normalizer import repair_mojibake, to_ascii

TEMPLATE_TYPE = "fptcustom"
TEMPLATE_VERSION = "2021.0317"
INSTRUCTION_ROW = "Below this row, populate product data using the column titles in row 3"


def clean_field(value: object) -> str:
    """Template cell text: mojibake repaired, ASCII only, no stray whitespace."""
    if value is None:
        return ""
    text = to_ascii(repair_mojibake(str(value)))
    return text.replace("\r\n", "\n").strip()


def template_signature(category: str) -> str:
    return base64.b64encode(category.upper().encode()).decode()


def _write(rows: list[list[str]], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def _header_and_row(fields: Mapping[str, object]) -> list[list[str]]:
    header = [clean_field(name) for name in fields]
    row = [clean_field(value) for value in fields.values()]
    return [header, row]


def render_tsv(fields: Mapping[str, object]) -> str:
    """Header row and data row, tab-separated. Column counts always match."""
    return _write(_header_and_row(fields), "\t")


def render_csv(fields: Mapping[str, object]) -> str:
    """Header row and data row, comma-separated. Column counts always match."""
    return _write(_header_and_row(fields), ",")


def render_flat_file(fields: Mapping[str, object], category: str) -> str:
    """Full Seller Central upload file for ``category`` (e.g. ``ce_jewelry``)."""
    preamble = [
        [
            f"TemplateType={TEMPLATE_TYPE}",
            f"Version={TEMPLATE_VERSION}",
            f"Category={category}",
            f"TemplateSignature={template_signature(category)}",
        ],
        [INSTRUCTION_ROW],
    ]
    return _write(preamble, "\t") + render_tsv(fields)
