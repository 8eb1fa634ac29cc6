"""
Tests for the in-memory filesystem engine.
"""

import pytest

from app.schemas.filesystem import FileNode
from app.schemas.results import ErrorKind
from app.services.filesystem import FileSystem, find_node


@pytest.fixture
def fs():
    """Fresh empty filesystem"""
    return FileSystem()


@pytest.fixture
def populated_fs():
    """
    Filesystem with:
      /manifests/
        pod.yaml
        dev/
      /examples/
    """
    fs = FileSystem()
    fs.create_directory("manifests")
    fs.create_directory("examples")
    fs.create_file("/manifests/pod.yaml", "apiVersion: v1")
    fs.create_directory("/manifests/dev")
    return fs


def child_names(fs, path="/"):
    return [node.name for node in fs.list_directory(path).value]


class TestNavigation:
    """Tests for cd / pwd / ls"""

    def test_starts_at_root(self, fs):
        assert fs.get_current_path() == "/"

    def test_change_to_absolute_path(self, populated_fs):
        result = populated_fs.change_directory("/manifests/dev")

        assert result.ok
        assert result.value == "/manifests/dev"
        assert populated_fs.get_current_path() == "/manifests/dev"

    def test_change_to_relative_path(self, populated_fs):
        populated_fs.change_directory("manifests")
        populated_fs.change_directory("dev")

        assert populated_fs.get_current_path() == "/manifests/dev"

    def test_change_to_parent(self, populated_fs):
        populated_fs.change_directory("/manifests/dev")
        populated_fs.change_directory("..")

        assert populated_fs.get_current_path() == "/manifests"

    def test_change_to_missing_directory(self, fs):
        result = fs.change_directory("nowhere")

        assert not result.ok
        assert result.kind == ErrorKind.NOT_FOUND
        assert fs.get_current_path() == "/"

    def test_change_into_file(self, populated_fs):
        result = populated_fs.change_directory("/manifests/pod.yaml")

        assert not result.ok
        assert result.kind == ErrorKind.NOT_A_DIRECTORY

    def test_list_empty_root(self, fs):
        result = fs.list_directory()

        assert result.ok
        assert result.value == []

    def test_list_in_insertion_order(self, fs):
        for name in ["zeta", "alpha", "mid"]:
            fs.create_directory(name)

        assert child_names(fs) == ["zeta", "alpha", "mid"]

    def test_list_specific_path(self, populated_fs):
        assert child_names(populated_fs, "/manifests") == ["pod.yaml", "dev"]

    def test_list_relative_to_current(self, populated_fs):
        populated_fs.change_directory("/manifests")
        assert child_names(populated_fs, ".") == ["pod.yaml", "dev"]

    def test_list_missing(self, fs):
        assert fs.list_directory("/nope").kind == ErrorKind.NOT_FOUND

    def test_list_file(self, populated_fs):
        assert populated_fs.list_directory("/manifests/pod.yaml").kind == ErrorKind.NOT_A_DIRECTORY


class TestCreateDirectory:
    """Tests for directory creation"""

    def test_create_in_current_directory(self, fs):
        result = fs.create_directory("manifests")

        assert result.ok
        assert result.value == "/manifests"
        node = find_node(fs.tree, "/manifests")
        assert node.type == "directory"
        assert node.name == "manifests"
        assert node.path == "/manifests"

    def test_create_nested_with_existing_parent(self, populated_fs):
        result = populated_fs.create_directory("/examples/pods")
        assert result.ok
        assert find_node(populated_fs.tree, "/examples/pods").path == "/examples/pods"

    def test_create_relative_to_current(self, populated_fs):
        populated_fs.change_directory("/manifests")
        result = populated_fs.create_directory("prod")

        assert result.value == "/manifests/prod"

    def test_missing_parent_without_recursive(self, fs):
        result = fs.create_directory("a/b")

        assert not result.ok
        assert result.kind == ErrorKind.NOT_FOUND
        assert "/a" in result.message
        assert child_names(fs) == []

    def test_recursive_creates_ancestors(self, fs):
        result = fs.create_directory("a/b/c", recursive=True)

        assert result.ok
        assert result.value == "/a/b/c"
        for path in ["/a", "/a/b", "/a/b/c"]:
            node = find_node(fs.tree, path)
            assert node.type == "directory"
            assert node.path == path

    def test_recursive_reuses_existing_ancestors(self, populated_fs):
        result = populated_fs.create_directory("/manifests/dev/team", recursive=True)

        assert result.ok
        assert child_names(populated_fs, "/manifests") == ["pod.yaml", "dev"]
        assert child_names(populated_fs, "/manifests/dev") == ["team"]

    def test_already_exists(self, populated_fs):
        result = populated_fs.create_directory("manifests")

        assert not result.ok
        assert result.kind == ErrorKind.ALREADY_EXISTS

    def test_already_exists_with_recursive(self, populated_fs):
        assert populated_fs.create_directory("/manifests/dev", recursive=True).kind == ErrorKind.ALREADY_EXISTS

    def test_name_collides_with_file(self, populated_fs):
        assert populated_fs.create_directory("/manifests/pod.yaml").kind == ErrorKind.ALREADY_EXISTS

    def test_ancestor_is_file(self, populated_fs):
        result = populated_fs.create_directory("/manifests/pod.yaml/sub", recursive=True)

        assert result.kind == ErrorKind.NOT_A_DIRECTORY

    @pytest.mark.parametrize("name", ["my dir", "bad*", "what?", "a|b", "<x>"])
    def test_invalid_names(self, fs, name):
        result = fs.create_directory(name)

        assert result.kind == ErrorKind.INVALID_NAME
        assert child_names(fs) == []

    def test_invalid_intermediate_segment(self, fs):
        assert fs.create_directory("ok/b*d/leaf", recursive=True).kind == ErrorKind.INVALID_NAME
        assert child_names(fs) == []

    def test_cannot_create_root(self, fs):
        assert fs.create_directory("/").kind == ErrorKind.INVALID_NAME

    def test_max_depth_enforced(self, fs):
        fs.create_directory("a/b/c", recursive=True)
        before = fs.to_json()

        result = fs.create_directory("/a/b/c/d")

        assert not result.ok
        assert result.kind == ErrorKind.MAX_DEPTH_EXCEEDED
        assert fs.to_json() == before

    def test_recursive_too_deep_leaves_no_ancestors(self, fs):
        """A too-deep mkdir -p fails, a shallower one succeeds"""
        result = fs.create_directory("a/b/c/d", recursive=True)

        assert result.kind == ErrorKind.MAX_DEPTH_EXCEEDED
        assert child_names(fs) == []

        assert fs.create_directory("a/b/c", recursive=True).ok
        assert fs.change_directory("/a/b/c").ok

    def test_custom_depth_bound(self):
        fs = FileSystem(max_depth=1)

        assert fs.create_directory("a").ok
        assert fs.create_directory("a/b").kind == ErrorKind.MAX_DEPTH_EXCEEDED


class TestCreateFile:
    """Tests for file creation"""

    def test_create_then_read(self, fs):
        """Test mkdir, cd, touch with content, then read it back"""
        assert fs.create_directory("manifests").ok
        assert fs.change_directory("manifests").ok

        result = fs.create_file("pod.yaml", "apiVersion: v1")

        assert result.ok
        assert isinstance(result.value, FileNode)
        assert result.value.path == "/manifests/pod.yaml"
        assert fs.read_file("pod.yaml").value == "apiVersion: v1"

    def test_default_content(self, fs):
        fs.create_file("empty.json")
        assert fs.read_file("/empty.json").value == ""

    @pytest.mark.parametrize("name", ["a.yaml", "b.yml", "c.json", "d.kyaml"])
    def test_supported_extensions(self, fs, name):
        result = fs.create_file(name)

        assert result.ok
        assert result.value.extension == name[name.rfind("."):]

    def test_unsupported_extension(self, fs):
        result = fs.create_file("readme.txt")

        assert not result.ok
        assert result.kind == ErrorKind.UNSUPPORTED_EXTENSION
        assert child_names(fs) == []

    def test_missing_extension(self, fs):
        assert fs.create_file("Makefile").kind == ErrorKind.UNSUPPORTED_EXTENSION

    def test_custom_extensions(self):
        fs = FileSystem(extensions=[".txt"])

        assert fs.create_file("notes.txt").ok
        assert fs.create_file("pod.yaml").kind == ErrorKind.UNSUPPORTED_EXTENSION

    def test_already_exists(self, populated_fs):
        result = populated_fs.create_file("/manifests/pod.yaml", "other")

        assert result.kind == ErrorKind.ALREADY_EXISTS
        assert populated_fs.read_file("/manifests/pod.yaml").value == "apiVersion: v1"

    @pytest.mark.parametrize("name", ["my file.yaml", "a*.yaml", "q?.json"])
    def test_invalid_name(self, fs, name):
        assert fs.create_file(name).kind == ErrorKind.INVALID_NAME

    def test_missing_parent(self, fs):
        assert fs.create_file("/nope/pod.yaml").kind == ErrorKind.NOT_FOUND

    def test_parent_is_file(self, populated_fs):
        assert populated_fs.create_file("/manifests/pod.yaml/x.yaml").kind == ErrorKind.NOT_A_DIRECTORY

    def test_file_allowed_at_deepest_directory(self, fs):
        fs.create_directory("a/b/c", recursive=True)

        result = fs.create_file("/a/b/c/pod.yaml")

        assert result.ok
        assert result.value.path == "/a/b/c/pod.yaml"

    def test_returned_node_is_detached(self, fs):
        result = fs.create_file("pod.yaml", "original")
        result.value.content = "changed"

        assert fs.read_file("pod.yaml").value == "original"


class TestReadWriteFile:
    """Tests for reading and writing files"""

    def test_read_relative(self, populated_fs):
        populated_fs.change_directory("/manifests")
        assert populated_fs.read_file("pod.yaml").value == "apiVersion: v1"

    def test_read_missing(self, fs):
        assert fs.read_file("missing.yaml").kind == ErrorKind.NOT_FOUND

    def test_read_directory(self, populated_fs):
        assert populated_fs.read_file("/manifests").kind == ErrorKind.NOT_A_FILE

    def test_write_updates_content(self, populated_fs):
        before = find_node(populated_fs.tree, "/manifests/pod.yaml")

        result = populated_fs.write_file("/manifests/pod.yaml", "kind: Pod")

        assert result.ok
        after = find_node(populated_fs.tree, "/manifests/pod.yaml")
        assert after.content == "kind: Pod"
        assert after.created_at == before.created_at
        assert after.modified_at >= before.modified_at

    def test_write_keeps_sibling_order(self, populated_fs):
        populated_fs.write_file("/manifests/pod.yaml", "kind: Pod")
        assert child_names(populated_fs, "/manifests") == ["pod.yaml", "dev"]

    def test_write_missing(self, fs):
        assert fs.write_file("missing.yaml", "x").kind == ErrorKind.NOT_FOUND

    def test_write_directory(self, populated_fs):
        assert populated_fs.write_file("/manifests", "x").kind == ErrorKind.NOT_A_FILE


class TestDelete:
    """Tests for file and directory removal"""

    def test_delete_file(self, populated_fs):
        assert populated_fs.delete_file("/manifests/pod.yaml").ok
        assert child_names(populated_fs, "/manifests") == ["dev"]

    def test_delete_missing_file(self, fs):
        assert fs.delete_file("nope.yaml").kind == ErrorKind.NOT_FOUND

    def test_delete_file_on_directory(self, populated_fs):
        assert populated_fs.delete_file("/manifests").kind == ErrorKind.NOT_A_FILE

    def test_delete_empty_directory(self, populated_fs):
        assert populated_fs.delete_directory("/examples").ok
        assert "examples" not in child_names(populated_fs)

    def test_delete_non_empty_requires_recursive(self, fs):
        """Non-recursive delete fails, recursive delete succeeds"""
        fs.create_directory("manifests")
        fs.create_file("/manifests/pod.yaml")

        result = fs.delete_directory("/manifests", recursive=False)
        assert result.kind == ErrorKind.NOT_EMPTY
        assert "manifests" in child_names(fs)

        assert fs.delete_directory("/manifests", recursive=True).ok
        assert "manifests" not in child_names(fs)

    def test_delete_missing_directory(self, fs):
        assert fs.delete_directory("/nope").kind == ErrorKind.NOT_FOUND

    def test_delete_directory_on_file(self, populated_fs):
        assert populated_fs.delete_directory("/manifests/pod.yaml").kind == ErrorKind.NOT_A_DIRECTORY

    def test_cannot_delete_root(self, populated_fs):
        assert populated_fs.delete_directory("/", recursive=True).kind == ErrorKind.CANNOT_DELETE_ROOT
        assert populated_fs.delete_directory("..", recursive=True).kind == ErrorKind.CANNOT_DELETE_ROOT

    def test_deleting_current_directory_moves_to_parent(self, populated_fs):
        populated_fs.change_directory("/manifests/dev")

        populated_fs.delete_directory("/manifests", recursive=True)

        assert populated_fs.get_current_path() == "/"


class TestFailureIdempotence:
    """Failed operations report the same error and change nothing"""

    @pytest.mark.parametrize("operation", [
        lambda fs: fs.create_directory("/manifests"),
        lambda fs: fs.create_directory("/a/b/c/d", recursive=True),
        lambda fs: fs.create_file("notes.txt"),
        lambda fs: fs.delete_directory("/manifests"),
        lambda fs: fs.delete_file("/manifests"),
        lambda fs: fs.change_directory("/missing"),
    ])
    def test_repeated_failure(self, populated_fs, operation):
        before = populated_fs.to_json()

        first = operation(populated_fs)
        second = operation(populated_fs)

        assert not first.ok
        assert first.kind == second.kind
        assert populated_fs.to_json() == before
