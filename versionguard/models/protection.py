"""Protection status and result models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProtectionStatus:
    """Derived on every read; never stored."""

    is_protected: bool = False
    config_locked: bool = False
    blockers_exist: bool = False


@dataclass
class StepOutcome:
    """Outcome of one independent step of an unlock pass."""

    name: str
    ok: bool
    message: str = ""


@dataclass
class ProtectionResult:
    """Result of delete / apply / remove / full run, with its audit log."""

    success: bool = True
    logs: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass
class ProtectionPlan:
    """Caller-selected steps for a full protection run."""

    versions_to_delete: list[str] = field(default_factory=list)
    clean_cache: bool = True
    lock_config: bool = True
    create_blockers: bool = True


@dataclass
class PreCheckResult:
    installed: bool
    running: bool
    payload_path: str | None = None
