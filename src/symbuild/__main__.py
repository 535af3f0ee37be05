"""
Entry point for module execution (``python -m symbuild``).

Delegates to the CLI handler in ``symbuild.cli.__main__``.
"""

import sys

from symbuild.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
