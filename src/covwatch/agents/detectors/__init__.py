"""Detectors scanning the analyzed project."""

from covwatch.agents.detectors.files import EXTENSION_TO_LANGUAGE, FileSystem, language_for_path

__all__ = [
    "EXTENSION_TO_LANGUAGE",
    "FileSystem",
    "language_for_path",
]
