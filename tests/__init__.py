"""
Error Reporting Test Suite.

Unit tests live in tests/unit/ and run against the working tree.
"""
import sys
from pathlib import Path

# Ensure project root is at the beginning of sys.path so the working-tree
# error_reporting package wins over an installed copy
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)
