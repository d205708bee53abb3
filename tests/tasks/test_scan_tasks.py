"""
Tests for the Celery scan task and scan submission.

Validates that the run_scan task delegates to the ScanOrchestrator, that
the synchronous Celery entry point manages the event loop, and that
submit_scan validates, records and enqueues.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from domainrecon.core.exceptions import InvalidDomainError
from domainrecon.models.scan import ScanStatus

FAKE_SCAN_ID = "12345678-1234-1234-1234-123456789abc"


def _make_session_factory() -> tuple[MagicMock, AsyncMock]:
    """Build a mock session factory that yields one async session."""
    mock_session = AsyncMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=mock_session), mock_session


@pytest.mark.asyncio
async def test_execute_scan_calls_orchestrator() -> None:
    """_execute_scan runs the orchestrator in a fresh session and disposes the engine."""
    mock_orchestrator = MagicMock()
    mock_orchestrator.run_scan = AsyncMock(return_value=MagicMock(status=ScanStatus.COMPLETED))
    mock_factory, mock_session = _make_session_factory()
    mock_engine = MagicMock()
    mock_engine.dispose = AsyncMock()

    with patch("domainrecon.tasks.scan_tasks.build_engine", return_value=mock_engine), patch(
        "domainrecon.tasks.scan_tasks.build_session_factory",
        return_value=mock_factory,
    ), patch(
        "domainrecon.tasks.scan_tasks.ScanOrchestrator",
        return_value=mock_orchestrator,
    ):
        from domainrecon.tasks.scan_tasks import _execute_scan

        status = await _execute_scan(FAKE_SCAN_ID)

    assert status == "completed"
    mock_orchestrator.run_scan.assert_awaited_once_with(
        scan_id=FAKE_SCAN_ID,
        db_session=mock_session,
    )
    mock_engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_execute_scan_propagates_failure() -> None:
    mock_orchestrator = MagicMock()
    mock_orchestrator.run_scan = AsyncMock(side_effect=RuntimeError("orchestrator fault"))
    mock_factory, _ = _make_session_factory()
    mock_engine = MagicMock()
    mock_engine.dispose = AsyncMock()

    with patch("domainrecon.tasks.scan_tasks.build_engine", return_value=mock_engine), patch(
        "domainrecon.tasks.scan_tasks.build_session_factory",
        return_value=mock_factory,
    ), patch(
        "domainrecon.tasks.scan_tasks.ScanOrchestrator",
        return_value=mock_orchestrator,
    ):
        from domainrecon.tasks.scan_tasks import _execute_scan

        with pytest.raises(RuntimeError, match="orchestrator fault"):
            await _execute_scan(FAKE_SCAN_ID)

    mock_engine.dispose.assert_awaited_once()


def test_run_scan_task_returns_status() -> None:
    """The synchronous Celery task drives _execute_scan on its own loop."""
    from domainrecon.tasks.scan_tasks import run_scan

    with patch(
        "domainrecon.tasks.scan_tasks._execute_scan",
        new=AsyncMock(return_value="completed"),
    ) as mock_execute:
        result = run_scan.run(FAKE_SCAN_ID)

    assert result == {"scan_id": FAKE_SCAN_ID, "status": "completed"}
    mock_execute.assert_awaited_once_with(FAKE_SCAN_ID)


def test_run_scan_task_is_not_retried() -> None:
    from domainrecon.tasks.scan_tasks import run_scan

    assert run_scan.name == "domainrecon.run_scan"
    assert run_scan.max_retries == 0


def test_submit_scan_records_and_enqueues() -> None:
    from domainrecon.tasks import scan_tasks

    with patch.object(
        scan_tasks,
        "_create_scan",
        new=AsyncMock(return_value=FAKE_SCAN_ID),
    ) as mock_create, patch.object(scan_tasks.run_scan, "delay") as mock_delay:
        scan_id = scan_tasks.submit_scan("example.com", stages=["dns", "whois", "dns"])

    assert scan_id == FAKE_SCAN_ID
    mock_create.assert_awaited_once_with("example.com", {"stages": ["dns", "whois"]})
    mock_delay.assert_called_once_with(FAKE_SCAN_ID)


def test_submit_scan_rejects_invalid_domain() -> None:
    from domainrecon.tasks import scan_tasks

    with patch.object(scan_tasks.run_scan, "delay") as mock_delay:
        with pytest.raises(InvalidDomainError):
            scan_tasks.submit_scan("not a domain")

    mock_delay.assert_not_called()


def test_repeated_submissions_each_use_their_own_engine() -> None:
    """Every submit_scan runs on a new loop, so each one builds and disposes an engine."""
    from domainrecon.tasks import scan_tasks

    engines = [MagicMock(), MagicMock()]
    for engine in engines:
        engine.dispose = AsyncMock()
    sessions = [_make_session_factory(), _make_session_factory()]
    repository = MagicMock()
    repository.create_scan = AsyncMock(
        side_effect=[MagicMock(id=FAKE_SCAN_ID), MagicMock(id="87654321-4321-4321-4321-cba987654321")]
    )

    with patch.object(scan_tasks, "build_engine", side_effect=engines) as mock_build, patch.object(
        scan_tasks,
        "build_session_factory",
        side_effect=[factory for factory, _ in sessions],
    ), patch.object(scan_tasks, "ScanRepository", return_value=repository) as mock_repository, patch.object(
        scan_tasks.run_scan, "delay"
    ) as mock_delay:
        first = scan_tasks.submit_scan("example.com")
        second = scan_tasks.submit_scan("example.org", stages=["dns"])

    assert first == FAKE_SCAN_ID
    assert second == "87654321-4321-4321-4321-cba987654321"
    assert mock_build.call_count == 2
    for engine in engines:
        engine.dispose.assert_awaited_once()
    assert [c.args[0] for c in mock_repository.call_args_list] == [session for _, session in sessions]
    repository.create_scan.assert_any_await("example.org", {"stages": ["dns"]})
    assert mock_delay.call_count == 2
