"""Build artifact staging with clean-replace archive extraction."""

import shutil
import zipfile
from pathlib import Path

from loguru import logger

from easy_patcher.patch.exceptions import ArtifactStagingError

ARCHIVE_EXTENSIONS = frozenset({".war", ".zip", ".jar", ".ear"})
STAGING_DIRNAME = "unzip_target"


def is_archive(path: str | Path) -> bool:
    return Path(path).suffix.lower() in ARCHIVE_EXTENSIONS


def staging_dir_for(artifact_path: str | Path) -> Path:
    """Deterministic staging location: a sibling `unzip_target` directory."""
    return Path(artifact_path).parent / STAGING_DIRNAME


def extract_archive(archive_path: str | Path, dest_dir: str | Path) -> list[str]:
    """Extract a zip-style archive into a freshly recreated directory.

    Any existing `dest_dir` is removed first. On failure the partially
    written directory is removed as well, so a half-populated tree is never
    left behind.

    Args:
        archive_path: Archive to read.
        dest_dir: Directory to (re)create and fill.

    Returns:
        Relative POSIX paths of the extracted files.

    Raises:
        ArtifactStagingError: If the archive is unreadable, contains a member
            escaping `dest_dir`, or a write fails.
    """
    archive = Path(archive_path)
    dest = Path(dest_dir)

    try:
        if dest.is_dir() and not dest.is_symlink():
            shutil.rmtree(dest)
        elif dest.exists() or dest.is_symlink():
            raise ArtifactStagingError(f"Staging path {dest} exists and is not a directory")
        dest.mkdir(parents=True)
    except OSError as exc:
        raise ArtifactStagingError(f"Cannot prepare staging directory {dest}: {exc}") from exc
    resolved_dest = dest.resolve()

    extracted: list[str] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                member = Path(info.filename)
                # Reject absolute members and traversal sequences
                if member.is_absolute() or ".." in member.parts:
                    raise ArtifactStagingError(
                        f"Unsafe archive member {info.filename!r} in {archive}"
                    )
                target = (dest / member).resolve()
                if not target.is_relative_to(resolved_dest):
                    raise ArtifactStagingError(
                        f"Archive member {info.filename!r} escapes {dest}"
                    )
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                extracted.append(member.as_posix())
    except ArtifactStagingError:
        shutil.rmtree(dest, ignore_errors=True)
        raise
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, RuntimeError, ValueError) as exc:
        shutil.rmtree(dest, ignore_errors=True)
        raise ArtifactStagingError(f"Failed to extract {archive}: {exc}") from exc

    return extracted


class ArtifactStager:
    """Locates a project's build artifact and stages archives for packaging."""

    def stage(self, artifact_path: str) -> Path:
        """Return the path to package for this artifact.

        Archives are re-extracted into `<artifact parent>/unzip_target` and
        that directory is returned. Other files are returned untouched.

        Raises:
            ArtifactStagingError: If the artifact is missing or extraction fails.
        """
        artifact = Path(artifact_path)
        if not artifact.is_file():
            raise ArtifactStagingError(f"Artifact not found: {artifact}")

        if not is_archive(artifact):
            logger.debug(f"Artifact {artifact} is not an archive; packaging as-is")
            return artifact

        staging_dir = staging_dir_for(artifact)
        extracted = extract_archive(artifact, staging_dir)
        logger.info(f"Staged {len(extracted)} files from {artifact} into {staging_dir}")
        return staging_dir
