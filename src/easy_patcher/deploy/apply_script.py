#!/usr/bin/env python3
"""Apply a patch bundle on the deployment host.

This file is copied verbatim into every patch output directory as
``apply_patch.py`` and must only use the standard library.

Bundle layout (next to this script)::

    manifest.json     selected revisions and final change entries
    files/            replacement content for added/modified/renamed paths
    targets.json      target roots registered on this host (created here)
    bak_<timestamp>/  one backup snapshot per apply (created here)

Menu states: configure target, apply patch, exit.
"""

from __future__ import annotations

import argparse
import json
import os
import shutil
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

MANIFEST_FILENAME = "manifest.json"
TARGETS_FILENAME = "targets.json"
FILES_DIRNAME = "files"
BACKUP_PREFIX = "bak_"
BACKUP_INDEX_FILENAME = "backup_index.json"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

ADDED = "added"
MODIFIED = "modified"
DELETED = "deleted"
RENAMED = "renamed"

STATE_CONFIGURE = "configure"
STATE_APPLY = "apply"
STATE_EXIT = "exit"
MENU_CHOICES = {
    "1": STATE_CONFIGURE,
    "2": STATE_APPLY,
    "3": STATE_EXIT,
    "q": STATE_EXIT,
}


class ApplyError(Exception):
    """Base exception for apply operations."""


class BackupIncompleteError(ApplyError):
    """Raised when any affected file could not be backed up.

    No target file has been modified when this is raised.
    """


class WriteError(ApplyError):
    """A single failed write; collected, never raised out of an apply."""

    def __init__(self, target: str, path: str, reason: str) -> None:
        super().__init__(f"{target}: {path}: {reason}")
        self.target = target
        self.path = path
        self.reason = reason


@dataclass
class ApplyResult:
    backup_dir: Path
    backed_up: list[Path] = field(default_factory=list)
    written: int = 0
    removed: int = 0
    failures: list[WriteError] = field(default_factory=list)


def bundle_dir_default() -> Path:
    return Path(__file__).resolve().parent


# ---------------------------------------------------------------------------
# Target configuration
# ---------------------------------------------------------------------------

def load_targets(bundle_dir: Path) -> list[str]:
    targets_file = bundle_dir / TARGETS_FILENAME
    if not targets_file.exists():
        return []
    try:
        data = json.loads(targets_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ApplyError(f"Cannot read {targets_file}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("targets", []), list):
        raise ApplyError(f"{targets_file} is not a target list")
    return [str(item) for item in data.get("targets", [])]


def save_targets(bundle_dir: Path, targets: list[str]) -> None:
    targets_file = bundle_dir / TARGETS_FILENAME
    tmp_file = targets_file.with_name(targets_file.name + ".tmp")
    tmp_file.write_text(json.dumps({"targets": targets}, indent=2), encoding="utf-8")
    os.replace(tmp_file, targets_file)


def add_target(bundle_dir: Path, target: str) -> list[str]:
    """Register a target root; the path must exist. Duplicates are ignored."""
    target_path = Path(target).expanduser()
    if not target_path.exists():
        raise ApplyError(f"Target path does not exist: {target}")
    resolved = str(target_path.resolve())
    targets = load_targets(bundle_dir)
    if resolved not in targets:
        targets.append(resolved)
        save_targets(bundle_dir, targets)
    return targets


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------

def load_manifest(bundle_dir: Path) -> dict:
    manifest_file = bundle_dir / MANIFEST_FILENAME
    try:
        manifest = json.loads(manifest_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ApplyError(f"Cannot read {manifest_file}: {exc}") from exc
    if not isinstance(manifest, dict) or not isinstance(manifest.get("changes"), list):
        raise ApplyError(f"{manifest_file} has no change list")
    return manifest


def affected_paths(changes: list[dict]) -> list[str]:
    """Every relative path an apply may overwrite or remove, in order."""
    seen: dict[str, None] = {}
    for change in changes:
        if change.get("change_kind") == RENAMED and change.get("old_path"):
            seen.setdefault(change["old_path"], None)
        seen.setdefault(change["path"], None)
    return list(seen)


def safe_join(root: str | Path, relative: str) -> Path:
    rel = Path(relative)
    if rel.is_absolute() or ".." in rel.parts:
        raise ApplyError(f"Refusing unsafe path {relative!r}")
    return Path(root) / rel


# ---------------------------------------------------------------------------
# Backup phase
# ---------------------------------------------------------------------------

def new_backup_dir(bundle_dir: Path, now: datetime | None = None) -> Path:
    """Fresh `bak_<timestamp>` path; never reuses an existing directory."""
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    candidate = bundle_dir / f"{BACKUP_PREFIX}{stamp}"
    suffix = 1
    while candidate.exists():
        candidate = bundle_dir / f"{BACKUP_PREFIX}{stamp}_{suffix}"
        suffix += 1
    return candidate


def target_slot(index: int, target: str) -> str:
    return f"{index}_{Path(target).name or 'root'}"


def backup_targets(targets: list[str], changes: list[dict], backup_dir: Path) -> list[Path]:
    """Copy every existing affected file into `backup_dir`.

    Each target root gets its own sub-directory, keeping relative structure.
    If any copy fails the partial snapshot is removed and
    BackupIncompleteError is raised.
    """
    copied: list[Path] = []
    paths = affected_paths(changes)
    try:
        backup_dir.mkdir(parents=True, exist_ok=False)
    except OSError as exc:
        raise BackupIncompleteError(f"Cannot create backup directory {backup_dir}: {exc}") from exc
    try:
        index_data = {}
        for index, target in enumerate(targets):
            slot = target_slot(index, target)
            index_data[slot] = target
            for relative in paths:
                source = safe_join(target, relative)
                if not source.is_file():
                    continue
                destination = backup_dir / slot / relative
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
                copied.append(destination)
        (backup_dir / BACKUP_INDEX_FILENAME).write_text(
            json.dumps(index_data, indent=2), encoding="utf-8"
        )
    except (OSError, ApplyError) as exc:
        shutil.rmtree(backup_dir, ignore_errors=True)
        raise BackupIncompleteError(f"Backup aborted, no files were changed: {exc}") from exc
    return copied


# ---------------------------------------------------------------------------
# Write phase
# ---------------------------------------------------------------------------

def write_file(target: str, relative: str, files_dir: Path) -> None:
    source = safe_join(files_dir, relative)
    if not source.is_file():
        raise ApplyError("replacement file is missing from the bundle")
    destination = safe_join(target, relative)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)


def remove_file(target: str, relative: str) -> bool:
    """Remove a target file. A missing file is not an error."""
    destination = safe_join(target, relative)
    if destination.is_dir() and not destination.is_symlink():
        raise ApplyError("path is a directory; remove it manually")
    try:
        destination.unlink()
    except FileNotFoundError:
        return False
    return True


def plan_change(change: dict) -> tuple[list[str], list[str]]:
    """Split one change into the paths it removes and the paths it writes."""
    kind = change.get("change_kind")
    path = change.get("path")
    if not path:
        raise ApplyError("change entry has no path")
    if kind in (ADDED, MODIFIED):
        return [], [path]
    if kind == DELETED:
        return [path], []
    if kind == RENAMED:
        if not change.get("old_path"):
            raise ApplyError("renamed entry has no old_path")
        return [change["old_path"]], [path]
    raise ApplyError(f"unknown change kind {kind!r}")


def write_changes(
    targets: list[str], changes: list[dict], files_dir: Path, result: ApplyResult
) -> None:
    """Apply every change to every target, collecting per-file failures.

    On each target every removal runs before any write, so a path that one
    entry removes and another entry writes ends up written.
    """
    for target in targets:
        removals: list[str] = []
        writes: list[str] = []
        for change in changes:
            try:
                removed, written = plan_change(change)
            except ApplyError as exc:
                result.failures.append(WriteError(target, change.get("path", "?"), str(exc)))
                continue
            removals.extend(removed)
            writes.extend(written)

        for relative in removals:
            try:
                if remove_file(target, relative):
                    result.removed += 1
            except (OSError, ApplyError) as exc:
                result.failures.append(WriteError(target, relative, str(exc)))
        for relative in writes:
            try:
                write_file(target, relative, files_dir)
                result.written += 1
            except (OSError, ApplyError) as exc:
                result.failures.append(WriteError(target, relative, str(exc)))


def apply_patch(bundle_dir: Path, now: datetime | None = None) -> ApplyResult:
    """Back up every affected file, then write the changes.

    Raises:
        ApplyError: If no targets are configured or the manifest is unreadable.
        BackupIncompleteError: If the backup could not be completed; nothing
            was written in that case.
    """
    targets = load_targets(bundle_dir)
    if not targets:
        raise ApplyError("No target paths configured; configure a target first")
    changes = load_manifest(bundle_dir)["changes"]

    backup_dir = new_backup_dir(bundle_dir, now)
    result = ApplyResult(backup_dir=backup_dir)
    result.backed_up = backup_targets(targets, changes, backup_dir)
    write_changes(targets, changes, bundle_dir / FILES_DIRNAME, result)
    return result


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------

def next_state(choice: str) -> str | None:
    return MENU_CHOICES.get(choice.strip().lower())


def print_summary(result: ApplyResult) -> None:
    print(f"Backup: {result.backup_dir} ({len(result.backed_up)} files)")
    print(f"Written: {result.written}, removed: {result.removed}")
    if result.failures:
        print(f"Failures ({len(result.failures)}), restore from the backup if needed:")
        for failure in result.failures:
            print(f"  - {failure}")
    else:
        print("All changes applied.")


def run_configure(bundle_dir: Path, read=input) -> None:
    target = read("Target root path: ").strip()
    if not target:
        return
    try:
        targets = add_target(bundle_dir, target)
    except ApplyError as exc:
        print(f"Error: {exc}")
        return
    print("Targets:")
    for item in targets:
        print(f"  - {item}")


def run_apply(bundle_dir: Path) -> bool:
    try:
        result = apply_patch(bundle_dir)
    except ApplyError as exc:
        print(f"Error: {exc}")
        return False
    print_summary(result)
    return not result.failures


def menu_loop(bundle_dir: Path, read=input) -> int:
    while True:
        print("\n1) Configure target  2) Apply patch  3) Exit")
        try:
            state = next_state(read("> "))
        except (EOFError, KeyboardInterrupt):
            state = STATE_EXIT
        if state == STATE_EXIT:
            return 0
        try:
            if state == STATE_CONFIGURE:
                run_configure(bundle_dir, read)
            elif state == STATE_APPLY:
                run_apply(bundle_dir)
            else:
                print("Choose 1, 2 or 3.")
        except (EOFError, KeyboardInterrupt):
            return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Apply this patch bundle with backup")
    parser.add_argument("--add-target", action="append", default=[], help="Register a target root")
    parser.add_argument("--apply", action="store_true", help="Apply without the menu")
    args = parser.parse_args(argv)

    bundle_dir = bundle_dir_default()
    if not args.add_target and not args.apply:
        return menu_loop(bundle_dir)

    for target in args.add_target:
        try:
            add_target(bundle_dir, target)
        except ApplyError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    if args.apply:
        return 0 if run_apply(bundle_dir) else 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
