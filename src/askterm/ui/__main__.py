"""Entry point: python -m askterm.ui <session_id> <temp_dir>"""

import signal
import sys
from pathlib import Path

from askterm.ui.app import run_prompt


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print("usage: python -m askterm.ui <session_id> <temp_dir>", file=sys.stderr)
        return 2
    session_id, temp_dir = args
    # Terminals may start us with SIGINT ignored; the timeout relies on it
    signal.signal(signal.SIGINT, signal.default_int_handler)
    return run_prompt(session_id, Path(temp_dir))


if __name__ == "__main__":
    sys.exit(main())
