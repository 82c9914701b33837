"""Secure file I/O utilities for git-spaces.

Atomic, owner-only writes for the hunk and group documents. A document is
either the old version or the new version on disk, never a torn write.
"""

import os
import stat
from pathlib import Path

# Owner-only permissions for the storage directory
SECURE_DIR_MODE: int = stat.S_IRWXU  # 0o700

# Owner read/write only for storage documents
SECURE_FILE_MODE: int = stat.S_IRUSR | stat.S_IWUSR  # 0o600


def secure_mkdir(path: Path, parents: bool = True) -> None:
    """Create directory with secure permissions (0o700).

    Only directories created here get the secure mode; existing parents
    (for example the repository's .git directory) are left alone.

    Args:
        path: Directory path to create.
        parents: If True, create missing parent directories as well.
    """
    if parents:
        for parent in reversed(list(path.parents)):
            if not parent.exists():
                parent.mkdir(mode=SECURE_DIR_MODE)
                # Re-apply in case umask interfered
                os.chmod(parent, SECURE_DIR_MODE)

    if not path.exists():
        path.mkdir(mode=SECURE_DIR_MODE)
        os.chmod(path, SECURE_DIR_MODE)


def _write_fd(path: Path, content: bytes) -> None:
    fd = os.open(
        str(path),
        os.O_CREAT | os.O_EXCL | os.O_WRONLY,
        SECURE_FILE_MODE,
    )
    try:
        os.write(fd, content)
        os.fsync(fd)
    finally:
        os.close(fd)


def secure_write_atomic(path: Path, content: str | bytes) -> None:
    """Atomically write to a file (new or existing) with secure permissions.

    Content is written to a sibling temp file which then replaces the target
    with os.replace().

    Args:
        path: Path to the file to write.
        content: Content to write (str or bytes).
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    temp_path = path.with_suffix(path.suffix + ".tmp")
    if temp_path.exists():
        # Left behind by an interrupted write
        temp_path.unlink()

    try:
        _write_fd(temp_path, content)
        os.replace(temp_path, path)
        # Some filesystems do not preserve mode across replace
        os.chmod(path, SECURE_FILE_MODE)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise
