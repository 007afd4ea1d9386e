import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional, TextIO

from errors import ParseError
from models import Transaction, TransactionType, AccountSnapshot

INPUT_HEADER = ("type", "client", "tx", "amount")
OUTPUT_HEADER = ("client", "available", "held", "total", "locked")
REQUIRED_COLUMNS = ("type", "client", "tx")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


def format_decimal(value: Decimal) -> str:
    """Format decimal without trailing zeros or exponent."""
    normalized = value.normalize()
    return f"{normalized:f}"


def _parse_id(value: str, name: str, maximum: int, line_number: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise ParseError(line_number, f"invalid {name} {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise ParseError(line_number, f"{name} {parsed} out of range (max {maximum})")
    return parsed


def _parse_amount(value: Optional[str], line_number: int) -> Optional[Decimal]:
    if not value:
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ParseError(line_number, f"invalid amount {value!r}") from None
    if not amount.is_finite():
        raise ParseError(line_number, f"invalid amount {value!r}")
    return amount


def parse_csv_row(row: Dict[str, Optional[str]], line_number: int) -> Transaction:
    """Parse a header-keyed CSV row into a Transaction. Raises ParseError."""
    normalized = {k: v.strip() if v is not None else None for k, v in row.items()}

    for column in REQUIRED_COLUMNS:
        if not normalized.get(column):
            raise ParseError(line_number, f"missing value for {column!r}")

    transaction_type_str = normalized["type"].lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise ParseError(line_number, f"unknown transaction type {normalized['type']!r}") from None

    return Transaction(
        transaction_type=transaction_type,
        client_id=_parse_id(normalized["client"], "client", MAX_CLIENT_ID, line_number),
        transaction_id=_parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID, line_number),
        amount=_parse_amount(normalized.get("amount"), line_number),
    )


def _read_rows(reader) -> Iterator[List[str]]:
    """Yield raw rows, turning reader and decoding failures into ParseError."""
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise ParseError(reader.line_num, f"malformed CSV: {e}") from None
        except UnicodeDecodeError:
            raise ParseError(reader.line_num + 1, "input is not valid UTF-8") from None
        yield fields


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Lazily parse transactions from a CSV stream with a header row.
    The first malformed row raises ParseError; nothing after it is yielded.
    """
    reader = csv.reader(stream)
    header: Optional[List[str]] = None

    for fields in _read_rows(reader):
        if not fields or all(not f.strip() for f in fields):
            continue

        if header is None:
            header = [name.strip().lower() for name in fields]
            missing = [column for column in REQUIRED_COLUMNS if column not in header]
            if missing:
                raise ParseError(reader.line_num, f"header missing columns {missing}")
            continue

        if len(fields) > len(header):
            raise ParseError(reader.line_num, f"expected at most {len(header)} fields, got {len(fields)}")

        row = dict(zip(header, fields))
        yield parse_csv_row(row, reader.line_num)


def write_accounts(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    """Write account snapshots as CSV, in the order given."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in snapshots:
        writer.writerow([
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        ])
