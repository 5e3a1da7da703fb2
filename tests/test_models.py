import pytest

from diverge.core.models import (
    STATUS_STYLES,
    ComparisonRecord,
    ComparisonResult,
    EffectiveStatus,
    FileStatus,
    SaveFailure,
    SaveReport,
)
from tests.helpers import sample_result


def test_counts_are_computed_from_records():
    result = sample_result()
    assert (result.total, result.identical, result.different,
            result.only_left, result.only_right) == (4, 1, 1, 1, 1)
    assert result.total_differences == 3
    assert not result.is_identical


def test_inconsistent_counts_rejected():
    rec = ComparisonRecord("a.txt", FileStatus.DIFFERENT, "x", "y")
    with pytest.raises(ValueError):
        ComparisonResult(records=(rec,), total=1, identical=1)


def test_payload_round_trip_uses_service_keys():
    payload = sample_result().to_dict()
    assert payload["entries"][2]["rel_path"] == "src/c.txt"
    assert payload["entries"][2]["status"] == "only_left"
    assert ComparisonResult.from_dict(payload) == sample_result()


def test_from_dict_rejects_bad_counts():
    payload = sample_result().to_dict()
    payload["different"] = 3
    with pytest.raises(ValueError):
        ComparisonResult.from_dict(payload)


def test_from_dict_defaults_missing_counts():
    payload = {"entries": [{"rel_path": "a", "status": "identical"}]}
    result = ComparisonResult.from_dict(payload)
    assert result.total == 1 and result.identical == 1
    assert result.ignored_dirs == ()


def test_get_and_iteration():
    result = sample_result()
    assert result.get("b.txt").status == FileStatus.DIFFERENT
    assert result.get("nope") is None
    assert len(result) == 4
    assert [r.relative_path for r in result.iter_by_status(FileStatus.ONLY_RIGHT)] == ["src/d.txt"]


def test_record_sides():
    result = sample_result()
    only_left = result.get("src/c.txt")
    assert only_left.exists_left and not only_left.exists_right
    assert only_left.right_path == ""


def test_effective_status_mirrors_raw_values():
    for status in FileStatus:
        assert EffectiveStatus.from_file_status(status).value == status.value


def test_every_effective_status_has_a_style():
    assert set(STATUS_STYLES) == set(EffectiveStatus)
    assert STATUS_STYLES[EffectiveStatus.APPLIED].label == "Applied (unsaved)"


def test_save_report():
    report = SaveReport(saved=2, failures=[SaveFailure("b.txt", "FileWriteError", "denied")])
    assert report.attempted == 3
    assert not report.success
    assert report.to_dict()["failures"][0]["path"] == "b.txt"
    assert str(report.failures[0]) == "FileWriteError: b.txt - denied"
