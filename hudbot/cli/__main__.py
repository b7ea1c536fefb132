"""Module execution entrypoint for `python -m hudbot.cli`."""

from __future__ import annotations

import sys

from hudbot.cli import main

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
