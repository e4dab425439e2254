"""Shared test fixtures."""

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from batchmove.config import Settings
from batchmove.domain.models import ResultRecord
from batchmove.ports.eventlog import EventLogPort
from batchmove.ports.filesystem import FileSystemPort
from batchmove.ports.mail import MailPort


@pytest.fixture
def config_data(tmp_path: Path) -> dict:
    """Raw configuration document with existing source/destination folders."""
    source = tmp_path / "in"
    destination = tmp_path / "out"
    source.mkdir()
    destination.mkdir()

    return {
        "source": {"folder": str(source), "matchPattern": r"^Analyse_\d{8}\.xlsx$"},
        "destination": {
            "folder": str(destination),
            "yearSubfolder": True,
            "fileNamePrefix": "AnalysesJour",
        },
        "settings": {
            "scriptName": "Move analyses",
            "saveLogFiles": {
                "where": {
                    "folder": str(tmp_path / "logs"),
                    "fileExtensions": [".json", ".csv"],
                },
                "what": {
                    "systemErrors": True,
                    "allActions": False,
                    "onlyActionErrors": True,
                },
                "deleteLogsAfterDays": 0,
            },
            "saveInEventLog": {"save": False, "logName": "Scripts"},
            "sendMail": {
                "when": "OnError",
                "from": "batch@contoso.com",
                "to": ["ops@contoso.com"],
                "subject": "Move analyses",
                "smtp": {"serverName": "smtp.contoso.com", "port": 25},
            },
        },
    }


@pytest.fixture
def settings(config_data: dict) -> Settings:
    return Settings(**config_data)


@pytest.fixture
def moved_result() -> ResultRecord:
    return ResultRecord(
        timestamp=datetime(2025, 3, 26, 8, 0, 0),
        source_folder=Path("/in"),
        source_file_name="Analyse_26032025.xlsx",
        new_file_name="AnalysesJour_20250326.xlsx",
        destination_folder=Path("/out/2025"),
        moved=True,
    )


@pytest.fixture
def failed_result() -> ResultRecord:
    return ResultRecord(
        timestamp=datetime(2025, 3, 26, 8, 0, 1),
        source_folder=Path("/in"),
        source_file_name="Analyse_27032025.xlsx",
        new_file_name="AnalysesJour_20250327.xlsx",
        destination_folder=Path("/out/2025"),
        error="failed to move file '/in/Analyse_27032025.xlsx': Access denied",
    )


@pytest.fixture
def mock_fs() -> MagicMock:
    """Mock file system port."""
    mock = MagicMock(spec=FileSystemPort)
    mock.exists.return_value = True
    mock.list_files.return_value = []
    return mock


@pytest.fixture
def mock_mailer() -> MagicMock:
    """Mock mail port."""
    return MagicMock(spec=MailPort)


@pytest.fixture
def mock_event_log() -> MagicMock:
    """Mock event log port."""
    return MagicMock(spec=EventLogPort)
