"""Minimal virtual filesystem layer with a single root mount."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, List, Optional


class VfsError(Exception):
    """Raised when a VFS operation fails."""


class NodeType(enum.IntEnum):
    """Kind of a filesystem node."""

    FILE = 1
    DIR = 2


@dataclass(eq=False)
class Inode:
    """A node as seen through the VFS."""

    path: str
    type: NodeType
    size: int = 0
    fs_data: Any = None
    ops: Optional["FilesystemOps"] = None


class FilesystemOps:
    """Operations a filesystem offers to the VFS.

    The defaults describe a filesystem that holds nothing and supports no
    changes: lookups find nothing, directories are empty and every other
    operation fails.
    """

    def lookup(self, path: str) -> Optional[Inode]:
        """Return the inode at ``path``, or None if there is none."""
        return None

    def readdir(self, dir_path: str) -> List[Inode]:
        """Return the direct children of ``dir_path``."""
        return []

    def read(self, inode: Inode, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes from ``inode`` at ``offset``."""
        raise VfsError("read not supported")

    def write(self, inode: Inode, offset: int, data: bytes) -> int:
        """Write ``data`` at ``offset``; return the number of bytes written."""
        raise VfsError("write not supported")

    def create(self, path: str, initial: bytes = b"") -> None:
        """Create a file at ``path`` holding ``initial``."""
        raise VfsError("create not supported")

    def mkdir(self, path: str) -> None:
        """Create a directory at ``path``."""
        raise VfsError("mkdir not supported")

    def remove(self, path: str) -> None:
        """Remove the node at ``path``."""
        raise VfsError("remove not supported")

    def rename(self, old_path: str, new_path: str) -> None:
        """Move the node at ``old_path`` to ``new_path``."""
        raise VfsError("rename not supported")

    def truncate(self, path: str, new_size: int) -> None:
        """Resize the file at ``path`` to ``new_size`` bytes."""
        raise VfsError("truncate not supported")


def _normalize(path: Optional[str]) -> str:
    return path if path else "/"


class Vfs:
    """Dispatches path operations to the filesystem mounted at the root."""

    def __init__(self) -> None:
        self.mount_point: Optional[str] = None
        self.ops: Optional[FilesystemOps] = None
        self.fs_name: Optional[str] = None

    @property
    def mounted(self) -> bool:
        return self.ops is not None

    def _require_ops(self) -> FilesystemOps:
        if self.ops is None:
            raise VfsError("no filesystem mounted")
        return self.ops

    def mount_root(self, ops: FilesystemOps, fs_name: str) -> None:
        """Mount ``ops`` at the root; fails if a root is already mounted."""
        if ops is None or fs_name is None:
            raise VfsError("filesystem and name are required")
        if self.ops is not None:
            raise VfsError(f"root already mounted ({self.fs_name})")
        self._set_root(ops, fs_name)

    def replace_root(self, ops: FilesystemOps, fs_name: str) -> None:
        """Mount ``ops`` at the root, replacing any current root."""
        if ops is None or fs_name is None:
            raise VfsError("filesystem and name are required")
        self._set_root(ops, fs_name)

    def _set_root(self, ops: FilesystemOps, fs_name: str) -> None:
        self.mount_point = "/"
        self.ops = ops
        self.fs_name = fs_name

    def lookup(self, path: Optional[str]) -> Optional[Inode]:
        """Return the inode at ``path`` (empty means root), or None."""
        if self.ops is None:
            return None
        return self.ops.lookup(_normalize(path))

    def readdir(self, path: Optional[str]) -> List[Inode]:
        """Return the direct children of the directory at ``path``."""
        return self._require_ops().readdir(_normalize(path))

    def read_all(self, path: str, bufsize: Optional[int] = None) -> bytes:
        """Read a whole file; fails if it is larger than ``bufsize``."""
        ops = self._require_ops()
        inode = self.lookup(path)
        if inode is None or inode.type != NodeType.FILE:
            raise VfsError(f"not a file: {path!r}")
        if bufsize is not None and inode.size > bufsize:
            raise VfsError(f"{path!r} is larger than {bufsize} bytes")
        return ops.read(inode, 0, inode.size)

    def create(self, path: str, data: bytes = b"") -> None:
        """Create a file at ``path`` holding ``data``."""
        self._require_ops().create(path, data)

    def write(self, path: str, offset: int, data: bytes) -> int:
        """Write ``data`` into the file at ``path``; return bytes written."""
        ops = self._require_ops()
        inode = self.lookup(path)
        if inode is None or inode.type != NodeType.FILE:
            raise VfsError(f"not a file: {path!r}")
        return ops.write(inode, offset, data)

    def mkdir(self, path: str) -> None:
        """Create a directory at ``path``."""
        self._require_ops().mkdir(path)

    def remove(self, path: str) -> None:
        """Remove the node at ``path``."""
        self._require_ops().remove(path)

    def rename(self, old_path: str, new_path: str) -> None:
        """Move the node at ``old_path`` to ``new_path``."""
        self._require_ops().rename(old_path, new_path)

    def truncate(self, path: str, new_size: int) -> None:
        """Resize the file at ``path``."""
        self._require_ops().truncate(path, new_size)