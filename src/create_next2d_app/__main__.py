from __future__ import annotations

import sys

from create_next2d_app.cli import main

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
