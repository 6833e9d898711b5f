"""Background worker for the version scan."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import QThread, Signal

if TYPE_CHECKING:
    from versionguard.core.scanner import VersionScanner


class ScanWorker(QThread):
    """Runs one scan off the event-loop thread; no cancel, no timeout."""

    finished_scan = Signal(object)
    error = Signal(str)

    def __init__(self, scanner: VersionScanner, parent=None) -> None:
        super().__init__(parent)
        self._scanner = scanner

    def run(self) -> None:
        try:
            versions = self._scanner.scan()
        except OSError as e:
            self.error.emit(str(e))
            versions = []
        self.finished_scan.emit(versions)
