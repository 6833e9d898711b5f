"""Process detection — is the guarded application running?"""

from __future__ import annotations

import psutil
from loguru import logger

from versionguard.core.layout import PROCESS_NAMES


class ProcessMonitor:
    def __init__(self, names: tuple[str, ...] = PROCESS_NAMES) -> None:
        self._names = {n.lower() for n in names}

    def is_target_running(self) -> bool:
        for proc in psutil.process_iter(["name"]):
            name = (proc.info.get("name") or "").lower()
            if name in self._names:
                logger.debug(f"Found running process: {name} (pid {proc.pid})")
                return True
        return False
