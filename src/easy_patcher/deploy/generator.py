"""Writes the standalone apply script into a patch output directory."""

import stat
from pathlib import Path

from loguru import logger

from easy_patcher.models import MANIFEST_FILENAME
from easy_patcher.patch.exceptions import ScriptGenerationError

APPLY_SCRIPT_NAME = "apply_patch.py"
_TEMPLATE_PATH = Path(__file__).with_name("apply_script.py")


def load_script_source() -> str:
    return _TEMPLATE_PATH.read_text(encoding="utf-8")


class ScriptGenerator:
    """Pairs a written manifest with the target-side apply script.

    The script text is identical for every bundle; all per-patch data lives
    in the manifest and `files/` next to it.
    """

    def __init__(self, script_source: str | None = None) -> None:
        self._source = script_source if script_source is not None else load_script_source()

    def generate(self, output_dir: str | Path) -> Path:
        """Write `apply_patch.py` into `output_dir` and mark it executable.

        Raises:
            ScriptGenerationError: If the manifest is missing or the write fails.
        """
        output_path = Path(output_dir)
        if not (output_path / MANIFEST_FILENAME).is_file():
            raise ScriptGenerationError(f"No {MANIFEST_FILENAME} in {output_path}")

        script_path = output_path / APPLY_SCRIPT_NAME
        try:
            script_path.write_text(self._source, encoding="utf-8")
            mode = script_path.stat().st_mode
            script_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as exc:
            raise ScriptGenerationError(f"Failed to write {script_path}: {exc}") from exc

        logger.debug(f"Wrote apply script {script_path}")
        return script_path
