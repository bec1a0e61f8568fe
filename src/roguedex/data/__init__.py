"""Data layer utilities for loading JSON content definitions."""

from .errors import DataError, DataLoadError, DataReferenceError, DataValidationError
from .paths import get_definition_file, get_definitions_path, get_repo_root

__all__ = [
    "DataError",
    "DataLoadError",
    "DataReferenceError",
    "DataValidationError",
    "get_definition_file",
    "get_definitions_path",
    "get_repo_root",
]
