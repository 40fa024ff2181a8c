"""Allow ``python -m fmg_exporter``."""

import sys

from .cli.main import main

if __name__ == "__main__":
    sys.exit(main())
