import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tests.helpers import drive, stable_rows

__all__ = [
    "drive",
    "stable_rows",
]
