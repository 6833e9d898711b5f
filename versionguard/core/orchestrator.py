"""Protection orchestrator — precheck, snapshot+delete, cache clean, lockdown."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from versionguard.core.protector import NOT_FOUND_ERROR
from versionguard.models.protection import PreCheckResult, ProtectionPlan, ProtectionResult
from versionguard.utils import force_remove

if TYPE_CHECKING:
    from versionguard.core.backup import BackupStore
    from versionguard.core.cleaner import CacheCleaner
    from versionguard.core.locator import LocationResolver
    from versionguard.core.process import ProcessMonitor
    from versionguard.core.protector import ProtectionController

PRE_DELETE_REASON = "pre-delete snapshot"


class ProtectionOrchestrator:
    """
    Runs a full protection pass and keeps a linear audit log.

    Hard failures (running app, missing install, failed delete, failed
    lockdown) stop the run and return the log collected so far.  Backup
    and cache failures are logged and the run continues.
    """

    def __init__(
        self,
        resolver: LocationResolver,
        backup_store: BackupStore,
        protector: ProtectionController,
        cleaner: CacheCleaner,
        process_monitor: ProcessMonitor,
    ) -> None:
        self._resolver = resolver
        self._backups = backup_store
        self._protector = protector
        self._cleaner = cleaner
        self._processes = process_monitor

    def precheck(self) -> PreCheckResult:
        location = self._resolver.resolve()
        return PreCheckResult(
            installed=location is not None and location.payload_path.exists(),
            running=self._processes.is_target_running(),
            payload_path=str(location.payload_path) if location else None,
        )

    def delete_versions(self, paths: list[str]) -> ProtectionResult:
        """Snapshot then delete each version directory."""
        result = ProtectionResult()

        for path_str in paths:
            path = Path(path_str)
            name = path.name

            result.logs.append(f"Backing up: {name}")
            backup = self._backups.create(path, PRE_DELETE_REASON)
            if backup.success:
                result.logs.append(f"[OK] Backup created: {backup.backup_id}")
            else:
                # Deletion was already confirmed by the user
                result.logs.append(f"[!] Backup failed: {backup.error or ''}")
                result.logs.append("[!] Proceeding with deletion (backup unavailable)")
                logger.warning(f"Backup failed for {path}, deleting anyway: {backup.error}")

            result.logs.append(f"Deleting: {name}")
            try:
                if not path.exists():
                    raise FileNotFoundError(f"No such directory: {path}")
                force_remove(path)
            except OSError as e:
                logger.error(f"Failed to delete {path}: {e}")
                result.success = False
                result.error = f"Failed to delete {name}: {e}"
                return result

        if not paths:
            result.logs.append("[OK] No versions to delete")
        else:
            result.logs.append(f"[OK] Deleted {len(paths)} version(s)")
            result.logs.append("[OK] Backups available for recovery")
        return result

    def run(self, plan: ProtectionPlan) -> ProtectionResult:
        result = ProtectionResult()

        result.logs.append("Checking system state...")
        if self._processes.is_target_running():
            result.success = False
            result.error = "CapCut is still running. Please close it."
            return result
        result.logs.append("[OK] No running instances")

        location = self._resolver.resolve()
        if location is None:
            logger.error("Protection run: installation not found")
            result.logs.append("[!] CapCut installation not found")
            result.success = False
            result.error = NOT_FOUND_ERROR
            return result
        result.logs.append(f"[OK] Found CapCut at {location.root_path}")

        deleted = self.delete_versions(plan.versions_to_delete)
        result.logs.extend(deleted.logs)
        if not deleted.success:
            result.success = False
            result.error = deleted.error
            return result

        if plan.clean_cache:
            result.logs.append("Cleaning cache directories...")
            result.logs.extend(self._cleaner.clean().logs)
        else:
            result.logs.append("Skipping cache cleaning (disabled)")

        if plan.lock_config or plan.create_blockers:
            applied = self._protector.apply(plan.lock_config, plan.create_blockers)
            result.logs.extend(applied.logs)
            if not applied.success:
                result.success = False
                result.error = applied.error
                return result
        else:
            result.logs.append("Skipping protection (all options disabled)")

        logger.info(f"Protection run finished ({len(plan.versions_to_delete)} version(s) removed)")
        return result
