"""Deployment bundle generation."""

from easy_patcher.deploy.generator import APPLY_SCRIPT_NAME, ScriptGenerator, load_script_source

__all__ = [
    "APPLY_SCRIPT_NAME",
    "ScriptGenerator",
    "load_script_source",
]
