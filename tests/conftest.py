# tests/conftest.py
import os
import sys

# Project root on sys.path for tests outside tests/unit
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
