"""
Local blob storage for uploaded PDFs.

Files live under Config.storage_path as <user_id>/<millis>_<filename>.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional

from ..config import Config

logger = logging.getLogger(__name__)


def _safe_filename(name: str) -> str:
    name = Path(name or "article.pdf").name
    name = re.sub(r"[^\w.\-]+", "_", name).strip("._")
    return name or "article.pdf"


class ArticleStorage:
    """Stores and removes uploaded article PDFs."""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path or Config.storage_path)

    def save(self, user_id: str, filename: str, data: bytes) -> str:
        """
        Write the blob and return its path relative to the storage root.
        """
        relative = Path(user_id) / f"{int(time.time() * 1000)}_{_safe_filename(filename)}"
        target = self.base_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)

        # never overwrite an existing upload
        with open(target, "xb") as f:
            f.write(data)

        logger.info(f"📥 Stored upload {relative} ({len(data)} bytes)")
        return relative.as_posix()

    def resolve(self, relative_path: str) -> Path:
        return self.base_path / relative_path

    def delete(self, relative_path: Optional[str]) -> bool:
        if not relative_path:
            return False
        path = self.resolve(relative_path)
        if not path.exists():
            return False
        path.unlink()
        return True
