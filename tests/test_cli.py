"""CLI smoke tests — argument handling and exit codes."""

from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner
from sqlalchemy.exc import OperationalError

from scangate.cli.main import cli
from scangate.container.images import Image
from scangate.container.lifecycle import ContainerStatus, ScanContainer
from scangate.core.exceptions import ContainerAPIError, PullTimeoutError
from scangate.core.runner import ScanOutcome
from scangate.models import ContainerRecord
from scangate.schemas.analysis import Verdict
from tests.conftest import CID

_RUN = "scangate.cli.commands.scan._run"
_RUN_ARGS = [
    "run",
    "--image", "retirejs",
    "--cmd", "scan.sh %GIT_REPO% %GIT_BRANCH%",
    "--repo", "git@x/y",
    "--branch", "main",
]


def _outcome(verdict):
    container = ScanContainer(
        image=Image(name="retirejs"), cid=CID, status=ContainerStatus.FINISHED, exit_code=0
    )
    return ScanOutcome(container=container, verdict=verdict)


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    for name in ("run", "health", "images", "container", "db"):
        assert name in result.output


def test_run_passed():
    with patch(_RUN, new_callable=AsyncMock, return_value=_outcome(Verdict.PASSED)) as run:
        result = CliRunner().invoke(cli, _RUN_ARGS)
    assert result.exit_code == 0, result.output
    assert "passed" in result.output
    image, template, repo, branch, analyzer_cls = run.call_args.args
    assert image.reference == "retirejs:latest"
    assert (repo, branch) == ("git@x/y", "main")
    assert analyzer_cls.metadata.name == "retirejs"


def test_run_failed_verdict_exits_non_zero():
    with patch(_RUN, new_callable=AsyncMock, return_value=_outcome(Verdict.FAILED)):
        result = CliRunner().invoke(cli, _RUN_ARGS)
    assert result.exit_code == 1
    assert "failed" in result.output


def test_run_infrastructure_error():
    with patch(_RUN, new_callable=AsyncMock, side_effect=PullTimeoutError("retirejs:latest", 900)):
        result = CliRunner().invoke(cli, _RUN_ARGS)
    assert result.exit_code == 1
    assert "Scan aborted" in result.output


def test_run_database_unreachable():
    error = OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))
    with patch(_RUN, new_callable=AsyncMock, side_effect=error):
        result = CliRunner().invoke(cli, _RUN_ARGS)
    assert result.exit_code == 1
    assert "Database error" in result.output


def test_run_requires_repository():
    result = CliRunner().invoke(cli, ["run", "--image", "retirejs", "--cmd", "x", "--branch", "main"])
    assert result.exit_code == 2


def test_health_ok():
    with patch("scangate.container.lifecycle.health_check", new_callable=AsyncMock):
        result = CliRunner().invoke(cli, ["health"])
    assert result.exit_code == 0
    assert "up" in result.output


def test_health_down():
    with patch(
        "scangate.container.lifecycle.health_check",
        new_callable=AsyncMock,
        side_effect=ContainerAPIError("ping", "connection refused"),
    ):
        result = CliRunner().invoke(cli, ["health"])
    assert result.exit_code == 1
    assert "unhealthy" in result.output


_GET_BY_CID = "scangate.core.gateway.SqlContainerGateway.get_by_cid"
_SESSION_FACTORY = "scangate.core.database.get_session_factory"


def test_container_show_prints_record():
    record = ContainerRecord(
        cid=CID,
        image_name="retirejs",
        image_tag="2.0.0",
        command="scan.sh %GIT_REPO% %GIT_BRANCH%",
        repository_url="git@x/y",
        branch="main",
        analyzer="retirejs",
        status="finished",
        exit_code=0,
        result="failed",
    )
    with patch(_SESSION_FACTORY, return_value=MagicMock()), patch(
        _GET_BY_CID, new_callable=AsyncMock, return_value=record
    ) as get_by_cid:
        result = CliRunner().invoke(cli, ["container", "show", CID])

    assert result.exit_code == 0, result.output
    get_by_cid.assert_awaited_once_with(CID)
    assert "git@x/y (main)" in result.output
    assert "failed" in result.output


def test_container_show_unknown_cid():
    with patch(_SESSION_FACTORY, return_value=MagicMock()), patch(
        _GET_BY_CID, new_callable=AsyncMock, return_value=None
    ):
        result = CliRunner().invoke(cli, ["container", "show", "missing"])

    assert result.exit_code == 1
    assert "No record" in result.output
