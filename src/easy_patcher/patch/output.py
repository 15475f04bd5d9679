"""Per-project output directory assembly."""

import hashlib
import re
import shutil
from datetime import datetime
from pathlib import Path

from loguru import logger

from easy_patcher.models import (
    MANIFEST_FILENAME,
    ChangeKind,
    PatchManifest,
    PatchOutput,
    Project,
    ProjectChangeSet,
    RevisionRecord,
)
from easy_patcher.patch.exceptions import OutputAssemblyError, OutputCollisionError
from easy_patcher.patch.stager import STAGING_DIRNAME

RUN_LABEL_FORMAT = "%Y%m%d_%H%M%S"
FILES_DIRNAME = "files"
_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")
PATH_DIGEST_LENGTH = 8


def make_run_label(now: datetime | None = None) -> str:
    """Second-granularity label shared by every project in one run."""
    return (now or datetime.now()).strftime(RUN_LABEL_FORMAT)


def output_dir_name(project: Project, run_label: str) -> str:
    """`<basename>_<path digest>_<run label>`.

    The digest of the project path keeps two projects that share a folder
    name apart; only the same project twice in one run label collides.
    """
    safe_name = _UNSAFE_NAME_RE.sub("_", project.name).strip("_") or "project"
    digest = hashlib.sha1(project.path.encode("utf-8")).hexdigest()[:PATH_DIGEST_LENGTH]
    return f"{safe_name}_{digest}_{run_label}"


class OutputAssembler:
    """Creates one output directory per project per run.

    Layout::

        <output_root>/<project>_<path digest>_<run_label>/
            manifest.json
            files/<relative path>      current content of added/modified files
            unzip_target/ or <artifact file name>
    """

    def __init__(self, output_root: str | Path) -> None:
        self.output_root = Path(output_root)

    def assemble(
        self,
        project: Project,
        selected_revisions: list[RevisionRecord],
        change_set: ProjectChangeSet,
        run_label: str,
        staged_artifact: Path | None = None,
        artifact_warning: str | None = None,
    ) -> PatchOutput:
        """Write artifact, changed files and manifest for one project.

        Raises:
            OutputCollisionError: If the directory for this project and run
                label already exists.
            OutputAssemblyError: If copying or writing fails.
        """
        output_dir = self.output_root / output_dir_name(project, run_label)
        try:
            self.output_root.mkdir(parents=True, exist_ok=True)
            output_dir.mkdir(exist_ok=False)
        except FileExistsError as exc:
            raise OutputCollisionError(
                f"Output directory {output_dir} already exists; refusing to overwrite"
            ) from exc
        except OSError as exc:
            raise OutputAssemblyError(f"Cannot create {output_dir}: {exc}") from exc

        try:
            artifact_name, artifact_staged = self._copy_artifact(staged_artifact, output_dir)
            changes, missing = self._copy_changed_files(project, change_set, output_dir)
            manifest = PatchManifest.from_change_set(
                project=project,
                run_label=run_label,
                selected_revisions=selected_revisions,
                change_set=changes,
                artifact=artifact_name,
                artifact_staged=artifact_staged,
                missing_files=missing,
            )
            manifest_path = output_dir / MANIFEST_FILENAME
            manifest_path.write_text(manifest.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            shutil.rmtree(output_dir, ignore_errors=True)
            raise OutputAssemblyError(f"Failed to assemble {output_dir}: {exc}") from exc

        logger.info(
            f"Assembled {output_dir} ({len(changes)} changes, {len(missing)} missing files)"
        )
        return PatchOutput(
            project_path=project.path,
            output_dir=str(output_dir),
            manifest_path=str(manifest_path),
            artifact_warning=artifact_warning,
            missing_files=missing,
        )

    def _copy_artifact(
        self, staged_artifact: Path | None, output_dir: Path
    ) -> tuple[str | None, bool]:
        if staged_artifact is None:
            return None, False
        if staged_artifact.is_dir():
            shutil.copytree(staged_artifact, output_dir / STAGING_DIRNAME)
            return STAGING_DIRNAME, True
        shutil.copy2(staged_artifact, output_dir / staged_artifact.name)
        return staged_artifact.name, False

    def _copy_changed_files(
        self,
        project: Project,
        change_set: ProjectChangeSet,
        output_dir: Path,
    ) -> tuple[ProjectChangeSet, list[str]]:
        """Copy working-copy content for entries that write a file.

        Entries naming a directory are dropped: directories are created
        implicitly when their files are written.
        """
        source_root = Path(project.path)
        files_dir = output_dir / FILES_DIRNAME
        kept: ProjectChangeSet = {}
        missing: list[str] = []

        for path, entry in change_set.items():
            if ".." in Path(path).parts or Path(path).is_absolute():
                logger.warning(f"Skipping unsafe path {path!r} in {project.path}")
                missing.append(path)
                continue
            if entry.change_kind == ChangeKind.DELETED:
                kept[path] = entry
                continue
            source = source_root / path
            if source.is_dir():
                logger.debug(f"Dropping directory entry {path} from {project.path}")
                continue
            kept[path] = entry
            if not source.is_file():
                missing.append(path)
                continue
            destination = files_dir / path
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)

        return kept, sorted(missing)
