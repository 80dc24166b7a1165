"""Adapter exposing a RamFS through the VFS filesystem interface."""

from __future__ import annotations

import contextlib
from typing import Iterator, List, Optional

from secos.ramfs import RAMFS_MAX_FILES, Entry, RamFS, RamFSError
from secos.vfs import FilesystemOps, Inode, NodeType, Vfs, VfsError

_CACHE_SIZE = RAMFS_MAX_FILES + 4
_PATH_MAX = 256


@contextlib.contextmanager
def _ramfs_errors() -> Iterator[None]:
    try:
        yield
    except RamFSError as exc:
        raise VfsError(str(exc)) from exc


def _strip(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def _is_root(path: Optional[str]) -> bool:
    return not path or path == "/"


class RamFSOps(FilesystemOps):
    """VFS operations backed by a RamFS, with a small inode cache."""

    def __init__(self, ramfs: RamFS) -> None:
        self.ramfs = ramfs
        self._cache: List[Inode] = []

    @staticmethod
    def _refresh(inode: Inode, entry: Entry) -> None:
        inode.path = ("/" + entry.name)[: _PATH_MAX - 1] if entry.name else "/"
        inode.type = NodeType.DIR if entry.is_dir else NodeType.FILE
        inode.size = entry.size
        inode.ops = None

    def _inode_for(self, entry: Entry) -> Optional[Inode]:
        for inode in self._cache:
            if inode.fs_data is entry:
                self._refresh(inode, entry)
                return inode
        if len(self._cache) >= _CACHE_SIZE:
            return None
        inode = Inode(path="/", type=NodeType.FILE, fs_data=entry)
        self._refresh(inode, entry)
        self._cache.append(inode)
        return inode

    def _root_inode(self) -> Optional[Inode]:
        for inode in self._cache:
            if inode.fs_data is None and inode.path == "/":
                return inode
        if len(self._cache) >= _CACHE_SIZE:
            return None
        root = Inode(path="/", type=NodeType.DIR, size=0, fs_data=None)
        self._cache.append(root)
        return root

    def lookup(self, path: Optional[str]) -> Optional[Inode]:
        """Return the inode at ``path``; the root always exists."""
        if path is None:
            return None
        if path == "/":
            return self._root_inode()
        entry = self.ramfs.find(_strip(path))
        if entry is None:
            return None
        return self._inode_for(entry)

    def readdir(self, dir_path: Optional[str]) -> List[Inode]:
        """Return inodes for the direct children of ``dir_path``."""
        target = "" if _is_root(dir_path) else _strip(dir_path)
        children = self.ramfs.list_path(target, RAMFS_MAX_FILES)
        inodes = (self._inode_for(entry) for entry in children)
        return [inode for inode in inodes if inode is not None]

    @staticmethod
    def _file_entry(inode: Optional[Inode]) -> Entry:
        if inode is None or inode.type != NodeType.FILE or inode.fs_data is None:
            raise VfsError("not a file")
        return inode.fs_data

    def read(self, inode: Inode, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes at ``offset``; offset past the end fails."""
        entry = self._file_entry(inode)
        if offset < 0 or offset > entry.size:
            raise VfsError(f"offset {offset} beyond end of file")
        return bytes(entry.data[offset : offset + length])

    def write(self, inode: Inode, offset: int, data: bytes) -> int:
        """Write ``data`` at ``offset`` into the file behind ``inode``."""
        entry = self._file_entry(inode)
        with _ramfs_errors():
            written = self.ramfs.write(entry.name, offset, data)
        inode.size = entry.size
        return written

    def create(self, path: str, initial: bytes = b"") -> None:
        """Create a mutable file; fails if ``path`` already exists."""
        if path is None:
            raise VfsError("path is required")
        name = _strip(path)
        if self.ramfs.find(name) is not None:
            raise VfsError(f"already exists: {path!r}")
        with _ramfs_errors():
            self.ramfs.add(name, initial)

    def mkdir(self, path: str) -> None:
        """Create a directory."""
        if path is None:
            raise VfsError("path is required")
        with _ramfs_errors():
            self.ramfs.mkdir(_strip(path))

    def remove(self, path: str) -> None:
        """Remove a mutable entry."""
        if path is None:
            raise VfsError("path is required")
        with _ramfs_errors():
            self.ramfs.remove(_strip(path))

    def rename(self, old_path: str, new_path: str) -> None:
        """Rename a file or directory."""
        if old_path is None or new_path is None:
            raise VfsError("paths are required")
        with _ramfs_errors():
            self.ramfs.rename(_strip(old_path), _strip(new_path))

    def truncate(self, path: str, new_size: int) -> None:
        """Resize a mutable file."""
        if path is None:
            raise VfsError("path is required")
        with _ramfs_errors():
            self.ramfs.truncate(_strip(path), new_size)


def mount_ramfs(vfs: Vfs, ramfs: RamFS) -> RamFSOps:
    """Mount ``ramfs`` as the VFS root and return its operations object."""
    ops = RamFSOps(ramfs)
    vfs.mount_root(ops, "ramfs")
    return ops