import pytest

from diverge.core.models import FileStatus
from diverge.services.compare_service import CompareServiceError, LocalCompareService
from tests.helpers import write_tree


@pytest.fixture
def trees(tmp_path):
    left = write_tree(tmp_path / "left", {
        "same.txt": "same\n",
        "changed.txt": "left\n",
        "src/only_left.py": "def f():\n    pass\n",
        "node_modules/pkg/index.js": "ignored\n",
    })
    right = write_tree(tmp_path / "right", {
        "same.txt": "same\n",
        "changed.txt": "right\n",
        "docs/only_right.md": "# Docs\n",
        ".git/HEAD": "ref: refs/heads/main\n",
    })
    return left, right


def test_classifies_files(trees):
    left, right = trees
    result = LocalCompareService(["node_modules", ".git"]).compare_directories(str(left), str(right))

    statuses = {r.relative_path: r.status for r in result}
    assert statuses == {
        "changed.txt": FileStatus.DIFFERENT,
        "docs/only_right.md": FileStatus.ONLY_RIGHT,
        "same.txt": FileStatus.IDENTICAL,
        "src/only_left.py": FileStatus.ONLY_LEFT,
    }
    assert [r.relative_path for r in result] == sorted(statuses)
    assert result.ignored_dirs == (".git", "node_modules")
    assert (result.total, result.identical, result.different,
            result.only_left, result.only_right) == (4, 1, 1, 1, 1)


def test_records_carry_contents_and_paths(trees):
    left, right = trees
    result = LocalCompareService(["node_modules", ".git"]).compare_directories(str(left), str(right))

    changed = result.get("changed.txt")
    assert (changed.left_content, changed.right_content) == ("left\n", "right\n")
    assert changed.right_path == str(right / "changed.txt")

    only_left = result.get("src/only_left.py")
    assert only_left.right_path == ""
    assert only_left.right_content == ""


def test_without_ignore_list_everything_is_scanned(trees):
    left, right = trees
    result = LocalCompareService().compare_directories(str(left), str(right))
    assert result.get("node_modules/pkg/index.js").status == FileStatus.ONLY_LEFT
    assert result.ignored_dirs == ()


def test_binary_and_oversized_files_are_skipped(tmp_path):
    left = write_tree(tmp_path / "left", {"big.txt": "x" * 64})
    right = write_tree(tmp_path / "right", {"big.txt": "y" * 64})
    (left / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)

    result = LocalCompareService(max_file_size=32).compare_directories(str(left), str(right))
    assert len(result) == 0


def test_nested_ignored_dirs_report_relative_paths(tmp_path):
    left = write_tree(tmp_path / "left", {"pkg/__pycache__/m.pyc": "x", "pkg/m.py": "x"})
    right = write_tree(tmp_path / "right", {"pkg/m.py": "x"})
    result = LocalCompareService(["__pycache__"]).compare_directories(str(left), str(right))
    assert result.ignored_dirs == ("pkg/__pycache__",)
    assert result.is_identical


@pytest.mark.parametrize("side", ["Left", "Right"])
def test_missing_root(tmp_path, side):
    existing = str(tmp_path)
    missing = str(tmp_path / "missing")
    args = (missing, existing) if side == "Left" else (existing, missing)
    with pytest.raises(CompareServiceError, match=f"{side} path is not a directory"):
        LocalCompareService().compare_directories(*args)
