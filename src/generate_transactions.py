"""Generate random transaction feeds for the payments engine."""
import argparse
import csv
import random
import sys
from decimal import Decimal
from typing import List, Optional, Sequence, TextIO

from csv_io import INPUT_HEADER, MAX_CLIENT_ID, format_decimal
from models import TransactionType

TRANSACTION_TYPES = list(TransactionType)
MIN_AMOUNT_CENTS = 1
MAX_AMOUNT_CENTS = 999_999


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Emit a random transaction CSV in the engine's input format.")
    parser.add_argument("--count", type=int, default=100, help="Number of transaction rows to emit.")
    parser.add_argument("--clients", type=int, default=50, help="Client ids are drawn from 0..clients-1.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible feeds.")
    parser.add_argument("--output", default="-", help="Where to write the CSV. Use '-' for stdout.")
    return parser.parse_args(argv)


def generate_rows(count: int, clients: int, rng: random.Random) -> List[List[str]]:
    """
    Build `count` rows. Row i uses tx id i for deposits and withdrawals;
    dispute-related rows reference a random earlier id and carry no amount.
    """
    rows = []
    for tx_id in range(1, count + 1):
        transaction_type = rng.choice(TRANSACTION_TYPES)
        client_id = rng.randrange(clients)

        if transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            cents = rng.randint(MIN_AMOUNT_CENTS, MAX_AMOUNT_CENTS)
            amount = format_decimal(Decimal(cents).scaleb(-2))
            rows.append([transaction_type.value, str(client_id), str(tx_id), amount])
        else:
            rows.append([transaction_type.value, str(client_id), str(rng.randrange(tx_id)), ""])
    return rows


def write_rows(rows: List[List[str]], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(INPUT_HEADER)
    writer.writerows(rows)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    if args.count < 0 or not 1 <= args.clients <= MAX_CLIENT_ID + 1:
        print(f"--count must be >= 0 and --clients in 1..{MAX_CLIENT_ID + 1}", file=sys.stderr)
        return 1

    rows = generate_rows(args.count, args.clients, random.Random(args.seed))

    if args.output == "-":
        write_rows(rows, sys.stdout)
    else:
        with open(args.output, "w", newline="") as f:
            write_rows(rows, f)
    return 0


if __name__ == "__main__":
    sys.exit(main())
