"""In-memory hierarchical filesystem with a fixed-size entry table."""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import List, Optional, Union

RAMFS_MAX_FILES = 32
RAMFS_NAME_MAX = 96

BASE_VERSION = "0.1.0-dev"
DEFAULT_BUILD_TS = "UNKNOWN_TS"
DEFAULT_GIT_HASH = "NOHASH"

_VERSION_CAP = 128
_MANIFEST_CAP = 4096

_README = b"SecOS RAMFS\nThis is a demonstrative in-memory filesystem.\n"
_HELLO = b"Hello from RAMFS!\n"
_DOCS_INFO = b"Documentazione RAMFS dir docs"
_SYSCALLS = b"0 exit\n1 write\n2 read\n3 sleep\n"
_INIT_RC = (
    b"# init.rc SecOS\ncolor light_gray black\nrfusage\nrftree\n"
    b"rfcat sys/manifest.txt\n"
)
_MANIFEST_HEADER = "# SecOS RAMFS Manifest\n# List of initial entries\n"

Data = Union[bytes, bytearray, memoryview]


class RamFSError(Exception):
    """Raised when a RAMFS operation fails."""


@dataclass(eq=False)
class Entry:
    """One file or directory, named by its full path without a leading '/'."""

    name: str
    data: Union[bytes, bytearray]
    immutable: bool = False
    is_dir: bool = False

    @property
    def size(self) -> int:
        return len(self.data)


def _is_root(path: Optional[str]) -> bool:
    return not path or path == "/"


def _is_under(name: str, parent: str) -> bool:
    return name.startswith(parent + "/")


class RamFS:
    """A table of at most ``RAMFS_MAX_FILES`` entries addressed by path."""

    def __init__(self) -> None:
        self._entries: List[Entry] = []
        self._initialized = False

    def __len__(self) -> int:
        return len(self._entries)

    def _add(self, name: str, data: Data, immutable: bool, is_dir: bool) -> Entry:
        if len(self._entries) >= RAMFS_MAX_FILES:
            raise RamFSError("RAMFS table is full")
        if not name or len(name) >= RAMFS_NAME_MAX:
            raise RamFSError(f"invalid name: {name!r}")
        if self.find(name) is not None:
            raise RamFSError(f"already exists: {name!r}")
        stored = bytes(data) if immutable else bytearray(data)
        entry = Entry(name, stored, immutable=immutable, is_dir=is_dir)
        self._entries.append(entry)
        return entry

    def _require(self, name: str) -> Entry:
        entry = self.find(name)
        if entry is None:
            raise RamFSError(f"not found: {name!r}")
        return entry

    def _require_mutable(self, name: str) -> Entry:
        entry = self._require(name)
        if entry.immutable:
            raise RamFSError(f"immutable entry: {name!r}")
        return entry

    def find(self, name: Optional[str]) -> Optional[Entry]:
        """Return the entry named ``name``, or None."""
        if name is None:
            return None
        return next((e for e in self._entries if e.name == name), None)

    def entries(self) -> List[Entry]:
        """Return all entries in table order."""
        return list(self._entries)

    def add(self, name: str, data: Data = b"") -> Entry:
        """Add a mutable file holding a copy of ``data``."""
        return self._add(name, data, immutable=False, is_dir=False)

    def add_static(self, name: str, data: Data) -> Entry:
        """Add an immutable file."""
        return self._add(name, data, immutable=True, is_dir=False)

    def write(self, name: str, offset: int, data: Data) -> int:
        """Write ``data`` at ``offset``, growing the file; return bytes written.

        Writing past the current end (leaving a hole) is not allowed.
        """
        entry = self._require_mutable(name)
        if offset < 0 or offset > entry.size:
            raise RamFSError(f"offset {offset} beyond end of {name!r}")
        payload = bytes(data)
        entry.data[offset : offset + len(payload)] = payload
        return len(payload)

    def truncate(self, name: str, new_size: int) -> None:
        """Shrink or zero-extend the file to ``new_size`` bytes."""
        entry = self._require_mutable(name)
        if new_size < 0:
            raise RamFSError("size must not be negative")
        if new_size < entry.size:
            del entry.data[new_size:]
        else:
            entry.data.extend(bytes(new_size - entry.size))

    def remove(self, name: str) -> None:
        """Delete a mutable entry."""
        entry = self._require_mutable(name)
        self._entries.remove(entry)

    def _parents_are_dirs(self, path: str) -> bool:
        for index, char in enumerate(path):
            if char == "/":
                parent = self.find(path[:index])
                if parent is None or not parent.is_dir:
                    return False
        return True

    def mkdir(self, path: str) -> Entry:
        """Create an empty mutable directory whose parents all exist."""
        if not path or len(path) >= RAMFS_NAME_MAX:
            raise RamFSError(f"invalid path: {path!r}")
        if self.find(path) is not None:
            raise RamFSError(f"already exists: {path!r}")
        if not self._parents_are_dirs(path):
            raise RamFSError(f"parent directory missing for {path!r}")
        return self._add(path, b"", immutable=False, is_dir=True)

    def rmdir(self, path: str) -> None:
        """Remove an empty mutable directory."""
        entry = self._require(path)
        if not entry.is_dir:
            raise RamFSError(f"not a directory: {path!r}")
        if entry.immutable:
            raise RamFSError(f"immutable entry: {path!r}")
        if any(e is not entry and _is_under(e.name, path) for e in self._entries):
            raise RamFSError(f"directory not empty: {path!r}")
        self.remove(path)

    def is_dir(self, path: Optional[str]) -> bool:
        """True for directories (and the root), False for files.

        Raises RamFSError when ``path`` does not exist.
        """
        if _is_root(path):
            return True
        return self._require(path).is_dir

    def list_path(
        self, path: Optional[str], limit: int = RAMFS_MAX_FILES
    ) -> List[Entry]:
        """Return the direct children of ``path`` (root when empty or '/')."""
        if _is_root(path):
            children = (e for e in self._entries if "/" not in e.name)
        else:
            entry = self.find(path)
            if entry is None or not entry.is_dir:
                return []
            prefix = path + "/"
            children = (
                e
                for e in self._entries
                if e.name.startswith(prefix) and "/" not in e.name[len(prefix) :]
            )
        result: List[Entry] = []
        for child in children:
            if len(result) >= limit:
                break
            result.append(child)
        return result

    def rename(self, old_path: str, new_path: str) -> None:
        """Rename a file or directory, moving a directory's descendants too."""
        if not old_path or not new_path:
            raise RamFSError("paths must not be empty")
        if len(new_path) >= RAMFS_NAME_MAX:
            raise RamFSError(f"name too long: {new_path!r}")
        if self.find(new_path) is not None:
            raise RamFSError(f"already exists: {new_path!r}")
        entry = self._require_mutable(old_path)
        if entry.is_dir and new_path.startswith(old_path):
            rest = new_path[len(old_path) :]
            if len(rest) > 1 and rest[0] == "/":
                raise RamFSError("cannot move a directory into itself")
        slash = new_path.rfind("/")
        if slash >= 0:
            parent = self.find(new_path[:slash])
            if parent is None or not parent.is_dir:
                raise RamFSError(f"parent directory missing for {new_path!r}")
        old_name = entry.name
        entry.name = new_path
        if entry.is_dir:
            for other in self._entries:
                if other is not entry and _is_under(other.name, old_name):
                    moved = new_path + other.name[len(old_name) :]
                    other.name = moved[: RAMFS_NAME_MAX - 1]

    def init(
        self, build_ts: Optional[str] = None, git_hash: Optional[str] = None
    ) -> None:
        """Populate the sample files, version info and manifest once."""
        if self._initialized:
            return
        self._initialized = True
        ts = build_ts if build_ts is not None else DEFAULT_BUILD_TS
        gh = git_hash if git_hash is not None else DEFAULT_GIT_HASH

        with contextlib.suppress(RamFSError):
            self.add_static("README.txt", _README)
        with contextlib.suppress(RamFSError):
            self.add_static("hello.txt", _HELLO)
        with contextlib.suppress(RamFSError):
            self.mkdir("docs")
        with contextlib.suppress(RamFSError):
            self.add("docs/info.txt", _DOCS_INFO)

        version = f"VERSION={BASE_VERSION}\nBUILD_TS={ts}\nGIT_HASH={gh}\n"
        version_bytes = version.encode()[: _VERSION_CAP - 1]
        with contextlib.suppress(RamFSError):
            self.add_static("VERSION", version_bytes)

        with contextlib.suppress(RamFSError):
            self.mkdir("sys")
        with contextlib.suppress(RamFSError):
            self.add_static("sys/syscalls.txt", _SYSCALLS)
        with contextlib.suppress(RamFSError):
            self.add_static("init.rc", _INIT_RC)

        with contextlib.suppress(RamFSError):
            self.add_static("sys/manifest.txt", self._manifest())

    def _manifest(self) -> bytes:
        text = _MANIFEST_HEADER
        for entry in self._entries:
            kind = "DIR" if entry.is_dir else "FILE"
            text += f"{kind} {entry.size} {entry.name}\n"
            if len(text) >= _MANIFEST_CAP - 2:
                break
        return text.encode()[: _MANIFEST_CAP - 1]