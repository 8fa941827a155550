"""
Atomic file writing: write to a temporary file beside the target, then rename.
"""

import os
import shutil
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


def atomic_write_text(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Atomically replace ``target_path`` with ``content``.

    The temporary file is created in the target's directory so the final
    ``os.replace`` stays on one filesystem; ``shutil.move`` is the fallback
    when the rename is refused.

    Raises:
        OSError: If writing fails after the fallback
    """
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    temp_file_path = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=target_path.parent,
            prefix=f".{target_path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=encoding,
            newline="",
        ) as temp_file:
            temp_file_path = Path(temp_file.name)
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        try:
            os.replace(str(temp_file_path), str(target_path))
            logger.debug("Atomic write completed", target=str(target_path), method="os.replace")
        except OSError as rename_error:
            logger.warning(
                "Atomic rename failed, falling back to shutil.move", error=str(rename_error), target=str(target_path)
            )
            shutil.move(str(temp_file_path), str(target_path))

    except Exception:
        if temp_file_path and temp_file_path.exists():
            temp_file_path.unlink(missing_ok=True)
        raise
