"""CSV export of the batch log, and the parser used to load it back."""

import csv
import io

from mycolog.utils import parse_date, parse_quantity

CSV_HEADERS = [
    "ID",
    "Display ID",
    "Date",
    "Species",
    "Operation",
    "Quantity",
    "End Date",
    "Outcome",
    "Notes",
]


def _quote(value) -> str:
    return '"' + str(value or "").replace('"', '""') + '"'


def _format_quantity(value) -> str:
    value = value or 0
    return str(int(value)) if float(value).is_integer() else str(value)


def batch_to_row(batch) -> str:
    """One CSV line; free-text columns are always quoted, notes kept on one line."""
    notes = (batch.notes or "").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return ",".join([
        batch.id or "",
        batch.display_id or "",
        batch.created_date.isoformat() if batch.created_date else "",
        _quote(batch.species),
        _quote(batch.operation_type),
        _format_quantity(batch.quantity),
        batch.end_date.isoformat() if batch.end_date else "",
        _quote(batch.outcome),
        _quote(notes),
    ])


def export_batches_csv(batches) -> str:
    lines = [",".join(CSV_HEADERS)]
    lines.extend(batch_to_row(b) for b in batches)
    return "\n".join(lines)


def parse_batches_csv(text: str) -> list[dict]:
    """Parse an exported CSV back into batch payload dicts (camelCase keys)."""
    reader = csv.DictReader(io.StringIO(text))
    missing = [h for h in CSV_HEADERS if h not in (reader.fieldnames or [])]
    if missing:
        raise ValueError(f"Missing CSV columns: {', '.join(missing)}")

    rows = []
    for line_number, row in enumerate(reader, start=2):
        try:
            rows.append({
                "id": row["ID"].strip() or None,
                "displayId": row["Display ID"].strip(),
                "createdDate": parse_date(row["Date"], "date"),
                "species": row["Species"],
                "operationType": row["Operation"],
                "quantity": parse_quantity(row["Quantity"] or 0),
                "endDate": parse_date(row["End Date"], "end date"),
                "outcome": row["Outcome"] or None,
                "notes": row["Notes"],
            })
        except ValueError as exc:
            raise ValueError(f"Line {line_number}: {exc}") from exc
    return rows
