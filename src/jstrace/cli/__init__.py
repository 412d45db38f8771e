"""
jstrace CLI tools.

- instrument: write instrumented copies of JavaScript files
- map: print the instrumentation map of a file as JSON
"""

from .main import main

__all__ = ["main"]
