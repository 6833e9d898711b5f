"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from versionguard.config import Config
    from versionguard.core.backup import BackupStore
    from versionguard.core.cleaner import CacheCleaner
    from versionguard.core.locator import LocationResolver
    from versionguard.core.orchestrator import ProtectionOrchestrator
    from versionguard.core.process import ProcessMonitor
    from versionguard.core.protector import ProtectionController
    from versionguard.core.scanner import VersionScanner


@dataclass
class AppContext:
    """Central service container, built once by ``main.create_context``."""

    config: Config
    resolver: LocationResolver
    backup_store: BackupStore
    protector: ProtectionController
    cleaner: CacheCleaner
    process_monitor: ProcessMonitor
    scanner: VersionScanner
    orchestrator: ProtectionOrchestrator
