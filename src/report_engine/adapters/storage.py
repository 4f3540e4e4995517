"""Local free-space check."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from report_engine.config import get_settings
from report_engine.observability import get_logger

logger = get_logger(__name__)


class DiskStorageChecker:
    """Checks free space on the filesystem holding the output directory."""

    def __init__(self, directory: Path | str | None = None):
        self.directory = Path(directory or get_settings().output_dir)

    def _free_bytes(self) -> int:
        # The output directory may not exist until the first render
        target = self.directory
        while not target.exists() and target != target.parent:
            target = target.parent
        return shutil.disk_usage(target).free

    async def has_free_space(self, required_bytes: int) -> bool:
        """Whether at least ``required_bytes`` are free.

        A failing check reports space as available and lets the render
        surface any real write error.
        """
        try:
            free = await asyncio.to_thread(self._free_bytes)
        except OSError as e:
            logger.warning(
                "Storage check failed, assuming space is available",
                directory=str(self.directory),
                error=str(e),
            )
            return True

        logger.debug(
            "Storage checked",
            directory=str(self.directory),
            free_bytes=free,
            required_bytes=required_bytes,
        )
        return free >= required_bytes
