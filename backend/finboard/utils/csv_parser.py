"""CSV parser for transaction import.

Turns a bank export into a list[ParsedTransaction], the uniform
intermediate representation consumed by ImportService.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation


@dataclass
class ParsedTransaction:
    """One CSV row mapped onto the transaction shape."""

    date: date
    amount: Decimal
    payee: str
    notes: str | None = None
    raw: dict = field(default_factory=dict)


@dataclass
class ColumnMapping:
    """Explicit header names chosen by the user; ``None`` means auto-detect."""

    date: str | None = None
    amount: str | None = None
    payee: str | None = None
    notes: str | None = None


DATE_ALIASES = ("date", "transaction date", "posting date", "booking date", "value date")
AMOUNT_ALIASES = ("amount", "value", "sum")
PAYEE_ALIASES = ("payee", "description", "merchant", "name", "label", "counterparty")
NOTES_ALIASES = ("notes", "memo", "note", "reference", "details")

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y", "%d.%m.%Y", "%Y/%m/%d", "%d/%m/%y")


class CSVParseError(ValueError):
    """Raised when the file or one of its rows does not fit the transaction shape."""


def parse_csv(content: bytes, mapping: ColumnMapping | None = None) -> list[ParsedTransaction]:
    """Parse CSV content. Auto-detects encoding and separator.

    Every row must yield a date and an amount; the first row that doesn't
    aborts the whole parse with a CSVParseError naming its line number.
    Blank lines are skipped.
    """
    mapping = mapping or ColumnMapping()
    text = _decode(content)
    if not text.strip():
        raise CSVParseError("The file is empty.")

    reader = csv.DictReader(io.StringIO(text), delimiter=_detect_separator(text))
    if not reader.fieldnames:
        raise CSVParseError("The file has no header row.")

    txns: list[ParsedTransaction] = []
    # line 1 is the header
    for line_no, row in enumerate(reader, start=2):
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        try:
            normalized = _normalize_row(row, mapping)
            txns.append(
                ParsedTransaction(
                    date=parse_date(normalized["date"]),
                    amount=parse_amount(normalized["amount"]),
                    payee=normalized["payee"] or "(no payee)",
                    notes=normalized["notes"] or None,
                    raw=normalized,
                )
            )
        except ValueError as e:
            raise CSVParseError(f"Line {line_no}: {e}") from e
    return txns


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _decode(content: bytes) -> str:
    for encoding in ("utf-8-sig", "cp1252", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise CSVParseError("Unable to decode the file: unsupported encoding.")


def _detect_separator(text: str) -> str:
    first_line = text.lstrip().split("\n")[0]
    separator = ","
    if first_line.count(";") > first_line.count(","):
        separator = ";"
    if first_line.count("\t") > first_line.count(separator):
        separator = "\t"
    return separator


def _pick(row: dict, explicit: str | None, aliases: tuple[str, ...]) -> str:
    if explicit:
        key = explicit.strip().lower()
        if key not in row:
            raise ValueError(f"column '{explicit}' not found")
        return row[key]
    for alias in aliases:
        if row.get(alias):
            return row[alias]
    return ""


def _normalize_row(row: dict, mapping: ColumnMapping) -> dict:
    """Map the row's columns onto: date, amount, payee, notes."""
    row = {
        k.strip().lower(): (v or "").strip()
        for k, v in row.items()
        if k is not None and not isinstance(v, list)
    }

    date_val = _pick(row, mapping.date, DATE_ALIASES)
    amount_val = _pick(row, mapping.amount, AMOUNT_ALIASES)

    # Handle separate debit/credit columns
    if not amount_val and not mapping.amount and ("debit" in row or "credit" in row):
        debit = row.get("debit", "")
        credit = row.get("credit", "")
        if debit:
            amount_val = debit if debit.startswith("-") else f"-{debit}"
        elif credit:
            amount_val = credit

    if not date_val:
        raise ValueError("missing date")
    if not amount_val:
        raise ValueError("missing amount")

    return {
        "date": date_val,
        "amount": amount_val,
        "payee": _pick(row, mapping.payee, PAYEE_ALIASES),
        "notes": _pick(row, mapping.notes, NOTES_ALIASES),
    }


def parse_date(value) -> date:
    """Parse date from various formats."""
    if not value:
        raise ValueError("missing date")

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    value = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date format: {value}")


def parse_amount(value) -> Decimal:
    """Parse amount, handling both 1,234.56 and 1.234,56 conventions."""
    if not value:
        raise ValueError("missing amount")

    if isinstance(value, (int, float)):
        return Decimal(str(value))

    cleaned = str(value).strip().replace(" ", "").replace("\u00a0", "")
    for symbol in ("$", "€", "£"):
        cleaned = cleaned.replace(symbol, "")

    # Accounting negatives: (12.50)
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = f"-{cleaned[1:-1]}"

    if "," in cleaned and "." in cleaned:
        if cleaned.rindex(",") > cleaned.rindex("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")

    try:
        amount = Decimal(cleaned)
        if not amount.is_finite():
            raise InvalidOperation
        rounded = amount.quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {value}") from e

    if rounded != amount:
        raise ValueError(f"invalid amount: {value} (more than 2 decimal places)")
    return rounded
