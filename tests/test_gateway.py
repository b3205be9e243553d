"""Tests for the SQL persistence gateway."""

from datetime import datetime, timezone

import pytest

from scangate.container.images import Image
from scangate.container.lifecycle import ContainerStatus, ScanContainer
from scangate.core.exceptions import PersistenceError
from tests.conftest import CID


def _finished_container() -> ScanContainer:
    now = datetime.now(timezone.utc)
    return ScanContainer(
        image=Image(name="retirejs", tag="2.0.0", canonical_url="docker.io/scanners/retirejs:2.0.0"),
        command="scan.sh git@x/y main",
        cid=CID,
        status=ContainerStatus.FINISHED,
        output='{"data": []}',
        exit_code=0,
        started_at=now,
        finished_at=now,
    )


async def _save(gateway):
    return await gateway.save_container(
        _finished_container(),
        command_template="scan.sh %GIT_REPO% %GIT_BRANCH%",
        repository_url="git@x/y",
        branch="main",
        analyzer="retirejs",
    )


@pytest.mark.asyncio
async def test_save_container(sql_gateway):
    await _save(sql_gateway)

    record = await sql_gateway.get_by_cid(CID)
    assert record is not None
    assert record.image_name == "retirejs"
    assert record.image_tag == "2.0.0"
    assert record.command == "scan.sh %GIT_REPO% %GIT_BRANCH%"
    assert record.status == "finished"
    assert record.exit_code == 0
    assert record.result is None
    assert record.output is None


@pytest.mark.asyncio
async def test_update_one_by_cid(sql_gateway):
    await _save(sql_gateway)

    await sql_gateway.update_one_by_cid(CID, {"result": "failed"})
    await sql_gateway.update_one_by_cid(CID, {"output": "No issues found."})

    record = await sql_gateway.get_by_cid(CID)
    assert record.result == "failed"
    assert record.output == "No issues found."


@pytest.mark.asyncio
async def test_update_unknown_cid_is_not_an_error(sql_gateway):
    await sql_gateway.update_one_by_cid("missing", {"result": "passed"})
    assert await sql_gateway.get_by_cid("missing") is None


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(sql_gateway):
    await _save(sql_gateway)
    with pytest.raises(PersistenceError, match="unknown record fields"):
        await sql_gateway.update_one_by_cid(CID, {"cResult": "failed"})


@pytest.mark.asyncio
async def test_duplicate_cid_rejected(sql_gateway):
    await _save(sql_gateway)
    with pytest.raises(PersistenceError):
        await _save(sql_gateway)


@pytest.mark.asyncio
async def test_container_without_cid_cannot_be_saved(sql_gateway):
    container = ScanContainer(image=Image(name="retirejs"))
    with pytest.raises(PersistenceError):
        await sql_gateway.save_container(
            container, command_template="x", repository_url="git@x/y", branch="main"
        )
