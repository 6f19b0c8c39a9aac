"""Shared test setup."""

import os
import sys

# Add the project root to the Python path for the flat package layout
sys.path.append(os.path.dirname(os.path.abspath(__file__)))
