import sys

from .config import get_settings
from .errors import LiteScanError
from .logging import get_logger, setup_logging
from .session import Session

logger = get_logger(__name__)


def _format_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def run(database_file_path: str, command: str) -> int:
    with Session.open(database_file_path) as session:
        if command.lower() == ".dbinfo":
            print(f"database page size: {session.page_size()}")
            print(f"number of tables: {session.table_count()}")
        elif command.lower() == ".tables":
            print(" ".join(session.list_tables()))
        elif command.lstrip().upper().startswith("SELECT"):
            # Join the column values of each row the way the sqlite3 shell does
            for row in session.execute(command):
                print("|".join(_format_value(value) for value in row))
        else:
            print(f"Invalid command: {command}", file=sys.stderr)
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    if len(argv) < 2:
        print("usage: litescan <database path> <.dbinfo|.tables|SELECT ...>", file=sys.stderr)
        return 2

    database_file_path, command = argv[0], argv[1]
    try:
        return run(database_file_path, command)
    except (LiteScanError, OSError) as e:
        logger.debug("command failed", path=database_file_path, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
