import pytest

from diverge.services.compare_service import CompareServiceError
from diverge.session.comparison import MISSING_DIRECTORIES, ComparisonSession
from tests.helpers import FakeCompareService, sample_result


@pytest.fixture
def session(fake_service):
    return ComparisonSession(fake_service)


def test_compare_without_directories_is_a_no_op(session, fake_service):
    assert session.compare() is False
    assert fake_service.calls == []
    assert not session.loading
    assert session.error == MISSING_DIRECTORIES


def test_compare_with_one_directory_reports_error(session, fake_service):
    errors = []
    session.error_changed.connect(errors.append)
    assert session.compare("/l") is False
    assert errors == ["Both directories must be set"]
    assert fake_service.calls == []


def test_compare_replaces_result(session, fake_service):
    result = sample_result()
    fake_service.queue(result)
    assert session.compare("/l", "/r") is True
    assert session.result is result
    assert session.error is None
    assert not session.loading
    assert fake_service.calls == [("/l", "/r")]


def test_failure_keeps_previous_result(session, fake_service):
    first = sample_result()
    fake_service.queue(first)
    fake_service.queue(CompareServiceError("Right path is not a directory: /r"))
    session.compare("/l", "/r")

    assert session.compare() is False
    assert session.result is first
    assert session.error == "Right path is not a directory: /r"
    assert not session.loading


def test_new_compare_clears_error(session, fake_service):
    fake_service.queue(CompareServiceError("boom"))
    fake_service.queue(sample_result())
    session.compare("/l", "/r")
    session.compare()
    assert session.error is None


def test_loading_signal_brackets_compare(session, fake_service):
    states = []
    session.loading_changed.connect(states.append)
    fake_service.queue(sample_result())
    session.compare("/l", "/r")
    assert states == [True, False]


def test_resync_uses_given_left_dir():
    service = FakeCompareService(sample_result(), sample_result())
    session = ComparisonSession(service)
    session.compare("/l", "/r")
    assert session.resync("/other") is True
    assert service.calls[-1] == ("/other", "/r")


def test_resync_errors_propagate(session, fake_service):
    fake_service.queue(sample_result())
    session.compare("/l", "/r")
    fake_service.queue(CompareServiceError("gone"))
    with pytest.raises(CompareServiceError):
        session.resync("/l")
    assert session.result is not None


def test_resync_after_failed_compare_clears_error(session, fake_service):
    fake_service.queue(sample_result())
    fake_service.queue(CompareServiceError("Right path is not a directory: /r"))
    session.compare("/l", "/r")
    session.compare()
    assert session.error is not None

    fresh = sample_result()
    fake_service.queue(fresh)
    assert session.resync("/l") is True
    assert session.result is fresh
    assert session.error is None


def test_clear(session, fake_service):
    fake_service.queue(sample_result())
    session.compare("/l", "/r")
    changed = []
    session.directories_changed.connect(lambda l, r: changed.append((l, r)))
    session.clear()
    assert session.result is None
    assert (session.left_dir, session.right_dir) == ("", "")
    assert changed == [("", "")]
