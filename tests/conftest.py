import pytest
from PyQt6.QtCore import QCoreApplication

from tests.helpers import FakeCompareService, FakeFileWriter


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def fake_service():
    return FakeCompareService()


@pytest.fixture
def fake_writer():
    return FakeFileWriter()
