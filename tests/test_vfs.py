import pytest

from secos.vfs import FilesystemOps, Inode, NodeType, Vfs, VfsError


class DictFs(FilesystemOps):
    """Tiny flat filesystem: files under '/' kept in a dict."""

    def __init__(self):
        self.files = {}
        self.dirs = {"/"}
        self.renamed = []
        self.truncated = []

    def lookup(self, path):
        if path in self.dirs:
            return Inode(path, NodeType.DIR, 0, ops=self)
        if path in self.files:
            return Inode(path, NodeType.FILE, len(self.files[path]), ops=self)
        return None

    def readdir(self, dir_path):
        return [self.lookup(p) for p in sorted(self.files)]

    def read(self, inode, offset, length):
        return bytes(self.files[inode.path][offset : offset + length])

    def write(self, inode, offset, data):
        buf = self.files[inode.path]
        buf[offset : offset + len(data)] = data
        return len(data)

    def create(self, path, initial=b""):
        if path in self.files:
            raise VfsError("exists")
        self.files[path] = bytearray(initial)

    def mkdir(self, path):
        self.dirs.add(path)

    def remove(self, path):
        del self.files[path]

    def rename(self, old_path, new_path):
        self.renamed.append((old_path, new_path))
        self.files[new_path] = self.files.pop(old_path)

    def truncate(self, path, new_size):
        self.truncated.append((path, new_size))
        del self.files[path][new_size:]


@pytest.fixture
def vfs():
    v = Vfs()
    v.mount_root(DictFs(), "dictfs")
    return v


def test_node_type_values_match_format(vfs):
    vfs.create("/a", b"x")
    assert vfs.lookup("/a").type == 1
    assert vfs.lookup("/").type == 2


def test_unmounted_lookup_is_none():
    assert Vfs().lookup("/") is None


@pytest.mark.parametrize(
    "call",
    [
        lambda v: v.readdir("/"),
        lambda v: v.read_all("/x"),
        lambda v: v.create("/x", b""),
        lambda v: v.write("/x", 0, b"a"),
        lambda v: v.mkdir("/d"),
        lambda v: v.remove("/x"),
        lambda v: v.rename("/x", "/y"),
        lambda v: v.truncate("/x", 0),
    ],
)
def test_unmounted_operations_fail(call):
    with pytest.raises(VfsError):
        call(Vfs())


def test_mount_root_records_mount(vfs):
    assert vfs.mounted
    assert vfs.mount_point == "/"
    assert vfs.fs_name == "dictfs"


def test_mount_root_twice_fails(vfs):
    with pytest.raises(VfsError):
        vfs.mount_root(DictFs(), "other")
    assert vfs.fs_name == "dictfs"


def test_mount_root_requires_ops_and_name():
    v = Vfs()
    with pytest.raises(VfsError):
        v.mount_root(None, "x")
    with pytest.raises(VfsError):
        v.mount_root(DictFs(), None)
    assert not v.mounted


def test_replace_root_swaps_filesystem(vfs):
    new_fs = DictFs()
    vfs.replace_root(new_fs, "second")
    assert vfs.ops is new_fs
    assert vfs.fs_name == "second"


def test_empty_path_means_root(vfs):
    root = vfs.lookup("")
    assert root.path == "/"
    assert root.type == NodeType.DIR
    assert vfs.lookup(None).path == "/"


def test_create_and_read_all_round_trip(vfs):
    vfs.create("/a.txt", b"payload")
    assert vfs.read_all("/a.txt") == b"payload"
    assert vfs.read_all("/a.txt", bufsize=len(b"payload")) == b"payload"


def test_read_all_buffer_too_small(vfs):
    vfs.create("/a.txt", b"payload")
    with pytest.raises(VfsError):
        vfs.read_all("/a.txt", bufsize=len(b"payload") - 1)


def test_read_all_of_directory_or_missing_fails(vfs):
    with pytest.raises(VfsError):
        vfs.read_all("/")
    with pytest.raises(VfsError):
        vfs.read_all("/missing")


def test_write_through_vfs(vfs):
    vfs.create("/a.txt", b"aaaa")
    assert vfs.write("/a.txt", 1, b"bb") == 2
    assert vfs.read_all("/a.txt") == b"abba"


def test_write_to_directory_fails(vfs):
    with pytest.raises(VfsError):
        vfs.write("/", 0, b"x")


def test_readdir_returns_children(vfs):
    vfs.create("/b", b"")
    vfs.create("/a", b"")
    assert [child.path for child in vfs.readdir("")] == ["/a", "/b"]


def test_rename_remove_truncate_mkdir_dispatch(vfs):
    vfs.create("/a", b"abcdef")
    vfs.rename("/a", "/b")
    assert vfs.ops.renamed == [("/a", "/b")]
    vfs.truncate("/b", 3)
    assert vfs.read_all("/b") == b"abc"
    vfs.mkdir("/d")
    assert vfs.lookup("/d").type == NodeType.DIR
    vfs.remove("/b")
    assert vfs.lookup("/b") is None


def test_default_ops_hold_nothing():
    ops = FilesystemOps()
    assert ops.lookup("/") is None
    assert ops.readdir("/") == []
    inode = Inode("/x", NodeType.FILE)
    with pytest.raises(VfsError):
        ops.read(inode, 0, 1)
    with pytest.raises(VfsError):
        ops.write(inode, 0, b"x")
    with pytest.raises(VfsError):
        ops.create("/x", b"")
    with pytest.raises(VfsError):
        ops.mkdir("/d")
    with pytest.raises(VfsError):
        ops.remove("/x")
    with pytest.raises(VfsError):
        ops.rename("/x", "/y")
    with pytest.raises(VfsError):
        ops.truncate("/x", 0)


def test_vfs_over_default_ops_finds_nothing():
    v = Vfs()
    v.mount_root(FilesystemOps(), "empty")
    assert v.lookup("/anything") is None
    assert v.readdir("/") == []
    with pytest.raises(VfsError):
        v.read_all("/anything")