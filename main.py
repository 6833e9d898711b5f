"""Application entry point — wires services and runs the CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication
from rich.console import Console
from rich.table import Table

from versionguard.config import Config, get_config
from versionguard.context import AppContext
from versionguard.core.backup import BackupStore
from versionguard.core.cleaner import CacheCleaner
from versionguard.core.locator import LocationResolver
from versionguard.core.orchestrator import ProtectionOrchestrator
from versionguard.core.process import ProcessMonitor
from versionguard.core.protector import ProtectionController
from versionguard.core.scan_worker import ScanWorker
from versionguard.core.scanner import VersionScanner
from versionguard.logger import setup_logger
from versionguard.models.protection import ProtectionPlan, ProtectionResult
from versionguard.models.version_info import VersionInfo
from versionguard.utils import format_size

console = Console()


def create_context(config: Config | None = None) -> AppContext:
    """Wire all services and return an AppContext."""
    config = config or get_config()

    setup_logger(config.data_dir / "logs", level=config.log_level)

    resolver = LocationResolver(config.env, config.custom_install_path)
    backup_store = BackupStore(config)
    protector = ProtectionController(resolver)
    cleaner = CacheCleaner(resolver)
    process_monitor = ProcessMonitor()

    return AppContext(
        config=config,
        resolver=resolver,
        backup_store=backup_store,
        protector=protector,
        cleaner=cleaner,
        process_monitor=process_monitor,
        scanner=VersionScanner(resolver),
        orchestrator=ProtectionOrchestrator(
            resolver, backup_store, protector, cleaner, process_monitor
        ),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cc-version-guard",
        description="Lock the installed CapCut version and block auto-updates",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("status", help="Show protection status")

    locate_parser = subparsers.add_parser("locate", help="Show or validate the install location")
    locate_parser.add_argument("--path", default=None, help="Validate a custom install path")

    subparsers.add_parser("scan", help="List installed versions")

    protect_parser = subparsers.add_parser("protect", help="Run the full protection sequence")
    protect_parser.add_argument(
        "--delete",
        nargs="*",
        default=[],
        metavar="PATH",
        help="Version directories to back up and delete",
    )
    protect_parser.add_argument("--no-cache", action="store_true", help="Skip cache cleaning")
    protect_parser.add_argument("--no-lock", action="store_true", help="Skip config lock")
    protect_parser.add_argument("--no-blockers", action="store_true", help="Skip blocker files")

    subparsers.add_parser("unprotect", help="Remove all protection measures")

    backups_parser = subparsers.add_parser("backups", help="Manage version backups")
    backups_sub = backups_parser.add_subparsers(dest="backup_command")
    backups_sub.add_parser("list", help="List backups, newest first")
    restore_parser = backups_sub.add_parser("restore", help="Restore a backup")
    restore_parser.add_argument("backup_id")
    delete_parser = backups_sub.add_parser("delete", help="Delete a backup")
    delete_parser.add_argument("backup_id")
    backups_sub.add_parser("clear", help="Delete all backups")
    backups_sub.add_parser("size", help="Show total backup size")

    return parser.parse_args(argv)


def _print_result(result: ProtectionResult) -> int:
    for line in result.logs:
        style = "yellow" if line.startswith("[!]") else "green" if line.startswith("[OK]") else None
        console.print(line, style=style, markup=False, highlight=False)
    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        return 1
    return 0


def cmd_status(ctx: AppContext, args: argparse.Namespace) -> int:
    check = ctx.orchestrator.precheck()
    location = ctx.resolver.resolve()
    if location is None:
        console.print("[yellow]CapCut installation not found[/yellow]")
        return 1

    status = ctx.protector.status()
    table = Table(title="Protection Status")
    table.add_column("Signal", style="cyan")
    table.add_column("Value")
    table.add_row("Install root", str(location.root_path))
    table.add_row("Detected via", str(location.source))
    table.add_row("Running", "yes" if check.running else "no")
    table.add_row("Protected", "yes" if status.is_protected else "no")
    table.add_row("Config locked", "yes" if status.config_locked else "no")
    table.add_row("Blockers present", "yes" if status.blockers_exist else "no")
    console.print(table)
    return 0


def cmd_locate(ctx: AppContext, args: argparse.Namespace) -> int:
    if args.path:
        location = LocationResolver.validate_custom_path(args.path)
        if location is None:
            console.print(f"[red]Not a CapCut installation: {args.path}[/red]")
            return 1
        ctx.config.custom_install_path = str(location.root_path)
    else:
        location = ctx.resolver.resolve()
        if location is None:
            console.print("[yellow]CapCut installation not found[/yellow]")
            return 1

    console.print(f"Root:    {location.root_path}")
    console.print(f"Apps:    {location.payload_path}")
    console.print(f"Source:  {location.source}")
    return 0


def cmd_scan(ctx: AppContext, args: argparse.Namespace) -> int:
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    found: list[VersionInfo] = []
    errors: list[str] = []

    worker = ScanWorker(ctx.scanner)
    worker.finished_scan.connect(found.extend)
    worker.error.connect(errors.append)
    worker.finished.connect(app.quit)
    worker.start()
    app.exec()
    worker.wait()

    if errors:
        console.print(f"[red]Scan failed: {errors[0]}[/red]")
        return 1

    if not found:
        console.print("[yellow]No installed versions found[/yellow]")
        return 0

    table = Table(title=f"Installed versions ({len(found)})")
    table.add_column("Version", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Path", style="dim")
    for version in found:
        table.add_row(version.name, format_size(version.size_bytes), version.path)
    console.print(table)
    return 0


def cmd_protect(ctx: AppContext, args: argparse.Namespace) -> int:
    check = ctx.orchestrator.precheck()
    if not check.installed:
        console.print("[red]CapCut installation not found[/red]")
        return 1
    if check.running:
        console.print("[red]CapCut is still running. Please close it.[/red]")
        return 1

    config = ctx.config
    plan = ProtectionPlan(
        versions_to_delete=[str(Path(p)) for p in args.delete],
        clean_cache=config.get("protection.clean_cache", True) and not args.no_cache,
        lock_config=config.get("protection.lock_config", True) and not args.no_lock,
        create_blockers=config.get("protection.create_blockers", True) and not args.no_blockers,
    )
    return _print_result(ctx.orchestrator.run(plan))


def cmd_unprotect(ctx: AppContext, args: argparse.Namespace) -> int:
    return _print_result(ctx.protector.remove())


def cmd_backups(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.backup_store
    command = args.backup_command or "list"

    if command == "list":
        records = store.list_backups()
        if not records:
            console.print("[green]No backups[/green]")
            return 0
        table = Table(title=f"Backups ({len(records)})")
        table.add_column("ID", style="cyan")
        table.add_column("Version")
        table.add_column("Size", justify="right")
        table.add_column("Reason", style="dim")
        for record in records:
            table.add_row(
                record.backup_id, record.version_label, format_size(record.size_bytes), record.reason
            )
        console.print(table)
        return 0

    if command == "restore":
        restored = store.restore(args.backup_id)
        if not restored.success:
            console.print(f"[red]{restored.error}[/red]")
            return 1
        console.print(f"[green]Restored to {restored.restored_path}[/green]")
        return 0

    if command in ("delete", "clear"):
        result = store.delete(args.backup_id) if command == "delete" else store.clear_all()
        if not result.success:
            console.print(f"[red]{result.error}[/red]")
            return 1
        console.print("[green]Done[/green]")
        return 0

    if command == "size":
        console.print(format_size(store.total_size()))
        return 0

    console.print(f"Unknown backups command: {command}")
    return 1


_COMMANDS = {
    "status": cmd_status,
    "locate": cmd_locate,
    "scan": cmd_scan,
    "protect": cmd_protect,
    "unprotect": cmd_unprotect,
    "backups": cmd_backups,
}


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = parse_args(argv)
    ctx = create_context()

    command = args.command or "status"
    handler = _COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: {command}")
        return 1
    return handler(ctx, args)


if __name__ == "__main__":
    sys.exit(main())
