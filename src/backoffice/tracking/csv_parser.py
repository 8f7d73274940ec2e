"""Tracking CSV ingestion.

Turns operator-uploaded delimited text into ``TrackingRecord`` values. The
first non-blank line is the header; it must name an order-number and a
tracking-number column. Incomplete data rows are skipped rather than
rejected, since partial exports are common.
"""

from pydantic import BaseModel, ConfigDict

from backoffice.errors import FormatError
from backoffice.tracking.columns import resolve_tracking_columns

TEMPLATE_FILENAME = "tracking-import-template.csv"
TEMPLATE_HEADER = ("Order Number", "Tracking Number", "Tracking URL", "Carrier")
_TEMPLATE_EXAMPLES = (
    ("#1001", "1Z999AA10123456784", "https://www.ups.com/track?tracknum=1Z999AA10123456784", "UPS"),
    (
        "#1002",
        "9400111899223456789012",
        "https://tools.usps.com/go/TrackConfirmAction?tLabels=9400111899223456789012",
        "USPS",
    ),
)


class TrackingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_number: str
    tracking_number: str
    tracking_url: str | None = None
    carrier: str | None = None
    # 1-based position among non-blank lines; the header is row 1
    row: int | None = None


def split_line(line: str) -> list[str]:
    """Split one line on commas, honouring double-quoted fields.

    A quote toggles quoting; ``""`` inside quotes is a literal quote. Tokens
    are trimmed after unquoting.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            tokens.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    tokens.append("".join(current).strip())
    return tokens


def _cell(row: list[str], index: int | None) -> str | None:
    if index is None or index >= len(row):
        return None
    return row[index] or None


def parse_tracking_csv(text: str) -> list[TrackingRecord]:
    """Parse tracking CSV text into records, in file order.

    Raises:
        FormatError: "empty" when there is no data row, "missing order number
            column" / "missing tracking number column" when the header lacks a
            mandatory column, "no valid rows" when every data row was skipped.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise FormatError("empty")

    columns = resolve_tracking_columns(split_line(lines[0]))
    if columns.order_number is None:
        raise FormatError("missing order number column")
    if columns.tracking_number is None:
        raise FormatError("missing tracking number column")

    records = []
    for position, line in enumerate(lines[1:], start=2):
        row = split_line(line)
        if len(row) < columns.min_row_length:
            continue

        order_number = row[columns.order_number]
        tracking_number = row[columns.tracking_number]
        if not order_number or not tracking_number:
            continue

        records.append(
            TrackingRecord(
                order_number=order_number,
                tracking_number=tracking_number,
                tracking_url=_cell(row, columns.tracking_url),
                carrier=_cell(row, columns.carrier),
                row=position,
            )
        )

    if not records:
        raise FormatError("no valid rows")
    return records


def _quote(value: str) -> str:
    if any(c in value for c in ',"\n'):
        return '"' + value.replace('"', '""') + '"'
    return value


def tracking_template() -> str:
    """The downloadable four-column import template with example rows."""
    rows = [TEMPLATE_HEADER, *_TEMPLATE_EXAMPLES]
    return "\n".join(",".join(_quote(cell) for cell in row) for row in rows) + "\n"
