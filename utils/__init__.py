"""
Utility modules for Archon
"""

from .file_scanner import import_files, load_module
from .parsing import parse_duration

__all__ = [
    'import_files',
    'load_module',
    'parse_duration'
]
