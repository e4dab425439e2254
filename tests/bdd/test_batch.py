"""BDD step definitions for batch runs."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pytest_bdd import given, parsers, scenario, then, when

from batchmove.adapters.storage import LocalFileSystemAdapter
from batchmove.config import Settings
from batchmove.domain.models import RunReport
from batchmove.ports.eventlog import EventLogPort
from batchmove.ports.mail import MailPort
from batchmove.runner import run_batch


@scenario("features/batch.feature", "Matching file is renamed into its year folder")
def test_matching_file_moved() -> None:
    pass


@scenario("features/batch.feature", "Failed move is written to the action error logs")
def test_failed_move_logged() -> None:
    pass


@scenario("features/batch.feature", "No mail on a clean run with OnError")
def test_no_mail_on_clean_run() -> None:
    pass


@scenario("features/batch.feature", "High priority mail on a failed move with OnError")
def test_high_priority_mail() -> None:
    pass


@scenario("features/batch.feature", "Missing source folder fails the run")
def test_missing_source_folder() -> None:
    pass


class FailingMoveFileSystem(LocalFileSystemAdapter):
    """Local file system whose moves always fail."""

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason

    def move_file(self, source: Path, destination: Path) -> None:
        raise PermissionError(self.reason)


@pytest.fixture
def context(config_data: dict, tmp_path: Path) -> dict:
    """Shared test context with temp directory."""
    return {
        "tmp_path": tmp_path,
        "config": config_data,
        "fs": LocalFileSystemAdapter(),
        "event_log": MagicMock(spec=EventLogPort),
        "mailer": MagicMock(spec=MailPort),
    }


@given("a source folder and a destination folder")
def folders(context: dict) -> None:
    context["source"] = Path(context["config"]["source"]["folder"])
    context["destination"] = Path(context["config"]["destination"]["folder"])
    context["logs"] = context["tmp_path"] / "logs"


@given(parsers.parse('log files "{formats}" with only action errors'))
def log_files(context: dict, formats: str) -> None:
    save = context["config"]["settings"]["saveLogFiles"]
    save["where"]["fileExtensions"] = [f.strip() for f in formats.split(",")]
    save["what"] = {"systemErrors": True, "allActions": False, "onlyActionErrors": True}


@given(parsers.parse('a source file "{name}"'))
def source_file(context: dict, name: str) -> None:
    (context["source"] / name).write_bytes(b"analysis")


@given(parsers.parse('moving files fails with "{reason}"'))
def moves_fail(context: dict, reason: str) -> None:
    context["fs"] = FailingMoveFileSystem(reason)


@given(parsers.parse('mail is sent "{when}"'))
def mail_policy(context: dict, when: str) -> None:
    context["config"]["settings"]["sendMail"]["when"] = when


@given("the source folder is missing")
def source_missing(context: dict) -> None:
    context["source"].rmdir()


@when("the batch runs")
def batch_runs(context: dict) -> None:
    context["report"] = run_batch(
        Settings(**context["config"]),
        fs=context["fs"],
        event_log=context["event_log"],
        mailer=context["mailer"],
    )


@then(parsers.parse('the destination contains "{relative}"'))
def destination_contains(context: dict, relative: str) -> None:
    assert (context["destination"] / relative).read_bytes() == b"analysis"


@then("the source folder is empty")
def source_empty(context: dict) -> None:
    assert list(context["source"].iterdir()) == []


@then(parsers.re(r"the run has (?P<moved>\d+) moved files? and (?P<errors>\d+) action errors?"))
def run_counts(context: dict, moved: str, errors: str) -> None:
    report: RunReport = context["report"]
    assert report.moved_count == int(moved)
    assert report.action_error_count == int(errors)


@then(parsers.parse("the exit code is {code:d}"))
def exit_code(context: dict, code: int) -> None:
    assert context["report"].exit_code == code


@then(parsers.parse('exactly {count:d} log files end with "{suffix}"'))
def log_files_with_suffix(context: dict, count: int, suffix: str) -> None:
    matches = sorted(p for p in context["logs"].iterdir() if p.stem.endswith(suffix))
    assert len(matches) == count
    assert len(list(context["logs"].iterdir())) == count
    context["log_files"] = matches


@then(parsers.parse('every action error log mentions "{text}"'))
def logs_mention(context: dict, text: str) -> None:
    for path in context["log_files"]:
        assert text in path.read_text(encoding="utf-8"), f"{path.name} lacks '{text}'"


@then("no mail is sent")
def no_mail(context: dict) -> None:
    context["mailer"].send.assert_not_called()


@then(parsers.parse('one mail is sent with priority "{priority}"'))
def mail_sent(context: dict, priority: str) -> None:
    context["mailer"].send.assert_called_once()
    message = context["mailer"].send.call_args.args[0]
    assert message.priority.value == priority
    context["mail"] = message


@then(parsers.parse('the mail subject is "{subject}"'))
def mail_subject(context: dict, subject: str) -> None:
    assert context["mail"].subject == subject


@then(parsers.parse('the run has a system error containing "{text}"'))
def system_error(context: dict, text: str) -> None:
    assert any(text in e.message for e in context["report"].system_errors)
