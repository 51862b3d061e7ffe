"""
Storage context: the two on-disk roots a process works with.

``temp_dir`` holds artifacts while they are being written; ``downloads_dir``
holds finished artifacts until retention deletes them. One context is created
at startup and handed to whoever needs it.
"""

import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

PART_SUFFIX = ".part"


def new_token() -> str:
    """Collision-free identifier for one generation request."""
    return uuid.uuid4().hex


@dataclass
class StorageContext:
    temp_dir: Path
    downloads_dir: Path

    def __post_init__(self):
        self.temp_dir = Path(self.temp_dir)
        self.downloads_dir = Path(self.downloads_dir)

    def ensure(self) -> "StorageContext":
        """Create both roots if missing."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        return self

    def artifact_filename(self, token: str, extension: str) -> str:
        """Timestamp for readability, token for uniqueness."""
        return f"slides_{int(time.time() * 1000)}_{token[:12]}.{extension}"

    def part_path(self, token: str, filename: str) -> Path:
        return self.temp_dir / f"{token}_{filename}{PART_SUFFIX}"

    def publish(self, part_path: Path, filename: str) -> Path:
        """Move a finished artifact into the downloads root."""
        final_path = self.downloads_dir / filename
        os.replace(part_path, final_path)
        return final_path

    def download_path(self, filename: str) -> Optional[Path]:
        """
        Resolve a client-supplied filename inside the downloads root.

        Anything that is not a bare filename resolves to None.
        """
        if not filename or filename in (".", "..") or Path(filename).name != filename:
            return None
        if "/" in filename or "\\" in filename:
            return None
        return self.downloads_dir / filename

    def temp_files(self, token: str) -> List[Path]:
        if not self.temp_dir.exists():
            return []
        return sorted(self.temp_dir.glob(f"{token}_*"))

    def purge_request(self, token: str) -> int:
        """Delete every temp file belonging to ``token``; returns how many went."""
        removed = 0
        for path in self.temp_files(token):
            if remove_file(path):
                removed += 1
        return removed


def remove_file(path: Union[str, Path]) -> bool:
    """
    Delete ``path``. A file that is already gone is not an error.

    Returns:
        True if a file was deleted
    """
    try:
        Path(path).unlink()
        return True
    except FileNotFoundError:
        return False
