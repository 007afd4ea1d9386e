import sys
import logging

from csv_io import write_accounts
from errors import ParseError
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[1]
    engine = PaymentsEngine()
    try:
        snapshots = engine.process_file(filepath)
    except (ParseError, OSError) as e:
        logger.error(f"{filepath}: {e}")
        return 1

    write_accounts(snapshots, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
