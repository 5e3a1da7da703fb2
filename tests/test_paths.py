import pytest

from diverge.core.models import FileStatus
from diverge.core.paths import (
    ROOT_FOLDER,
    file_name,
    files_in_folder,
    folder_for_path,
    folders_for,
    group_by_folder,
)
from tests.helpers import record, sample_result


@pytest.mark.parametrize("path, folder", [
    ("a.txt", ROOT_FOLDER),
    ("src/c.txt", "src"),
    ("src/lib/deep.py", "src/lib"),
])
def test_folder_for_path(path, folder):
    assert folder_for_path(path) == folder


def test_file_name():
    assert file_name("src/lib/deep.py") == "deep.py"
    assert file_name("a.txt") == "a.txt"


def test_folders_are_sorted_and_distinct():
    records = [
        record("z/1.txt", FileStatus.IDENTICAL),
        record("a.txt", FileStatus.IDENTICAL),
        record("b/2.txt", FileStatus.IDENTICAL),
        record("z/3.txt", FileStatus.IDENTICAL),
    ]
    assert folders_for(records) == [".", "b", "z"]


def test_files_in_folder_keeps_record_order():
    assert files_in_folder(sample_result(), "src") == ["src/c.txt", "src/d.txt"]
    assert files_in_folder(sample_result(), ".") == ["a.txt", "b.txt"]
    assert files_in_folder(sample_result(), "missing") == []


def test_nested_folder_is_its_own_group():
    records = [record("src/a.py", FileStatus.IDENTICAL), record("src/lib/b.py", FileStatus.IDENTICAL)]
    assert files_in_folder(records, "src") == ["src/a.py"]


def test_group_by_folder():
    groups = group_by_folder(sample_result())
    assert list(groups) == [".", "src"]
    assert [r.relative_path for r in groups["src"]] == ["src/c.txt", "src/d.txt"]
