"""Easy patcher: file-level patches from Git/SVN history with backup-first apply."""

__version__ = "0.1.0"
