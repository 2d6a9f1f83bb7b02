"""File collection utilities for command-line uploads."""
from pathlib import Path
from typing import Iterable, List

from ..models import UploadCandidate


class FileCollector:
    """Collects upload candidates from files and folders."""

    @staticmethod
    def collect_files(paths: Iterable[Path]) -> List[Path]:
        """
        Expand paths into a flat file list.

        Files are kept in the order given; folders are scanned recursively
        and their files sorted. Hidden entries inside folders are skipped.

        Args:
            paths: Files and/or folders

        Returns:
            List of file paths
        """
        files = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                found = []
                for item in path.rglob("*"):
                    rel_parts = item.relative_to(path).parts
                    if item.is_file() and not any(part.startswith(".") for part in rel_parts):
                        found.append(item)
                files.extend(sorted(found))
            elif path.is_file():
                files.append(path)
            else:
                raise FileNotFoundError(f"No such file or folder: {path}")
        return files

    @classmethod
    def collect_candidates(cls, paths: Iterable[Path]) -> List[UploadCandidate]:
        """Read every collected file into an UploadCandidate."""
        return [UploadCandidate.from_path(path) for path in cls.collect_files(paths)]
