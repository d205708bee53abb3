"""
Scan Orchestrator for domainrecon.

Coordinates the full lifecycle of a reconnaissance scan:

1. Load the scan from the database, mark it RUNNING and record the start
   checkpoint.
2. Run every pipeline stage in order.  Stages never run concurrently with
   each other; each stage's own failures are contained and logged.
3. After each stage, persist its findings and advance progress to the
   stage's checkpoint.
4. Mark the scan COMPLETED once all stages are exhausted.
5. Publish real-time events via Redis Pub/Sub so observers can follow
   progress live.

Anything that fails outside a stage (persistence, progress bookkeeping)
marks the scan FAILED and is re-raised.  Findings committed up to that
point are kept.
"""

from __future__ import annotations

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Union

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from domainrecon.config import Settings, get_settings
from domainrecon.core.exceptions import ScanNotFoundError
from domainrecon.core.logging import ScanLogAdapter, get_logger, scan_logger
from domainrecon.engine.repository import COMPLETE_PROGRESS, ScanRepository, build_finding_rows
from domainrecon.models.scan import Scan
from domainrecon.modules import START_CHECKPOINT, BaseReconModule, ModuleRegistry, ModuleResult

logger = get_logger(__name__)


class ScanOrchestrator:
    """Orchestrates a complete scan lifecycle.

    The orchestrator is driven by :meth:`run_scan`.  It uses async I/O
    throughout so that stages can issue concurrent network requests while
    the database session remains on a single event-loop thread.

    Args:
        settings: Configuration handed to every stage.  Defaults to
            :func:`get_settings`.
        stages: Explicit stage instances, in execution order.  Defaults to
            the registered pipeline.

    Usage::

        orchestrator = ScanOrchestrator()
        await orchestrator.run_scan(scan_id="...", db_session=session)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        stages: Optional[Sequence[BaseReconModule]] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self._stages: Optional[list[BaseReconModule]] = list(stages) if stages is not None else None
        self._owns_stages: bool = stages is None

    @property
    def stages(self) -> list[BaseReconModule]:
        if self._stages is None:
            self._stages = ModuleRegistry.get_pipeline(self.settings)
        return self._stages

    # -- Public entry point ---------------------------------------------------

    async def run_scan(
        self,
        scan_id: Union[str, uuid.UUID],
        db_session: AsyncSession,
    ) -> Optional[Scan]:
        """Execute the full scan pipeline for *scan_id*.

        This is the main method called by the Celery task.

        Args:
            scan_id: The UUID of the :class:`~domainrecon.models.scan.Scan` row.
            db_session: An active :class:`AsyncSession` for database I/O.

        Returns:
            The finished scan, or ``None`` when no such scan exists.

        Raises:
            Exception: Any error outside stage isolation is propagated after
                the scan status has been set to ``FAILED`` and the failure
                event has been published.
        """
        repository = ScanRepository(db_session)
        try:
            scan = await repository.get_scan(scan_id)
        except ScanNotFoundError:
            logger.error(
                "Scan not found",
                extra={"action": "scan_not_found", "target": str(scan_id)},
            )
            return None

        channel_id: str = str(scan.id)
        log = scan_logger(logger, scan.id, scan.domain)

        try:
            await self._run_pipeline(repository, scan, channel_id, log)
        except Exception as exc:
            await self._fail(repository, scan, channel_id, log, exc)
            raise
        finally:
            self._release_stages()

        log.info(
            "Scan completed in %.1fs",
            scan.duration_seconds or 0.0,
            extra={"action": "scan_completed"},
        )
        await self._publish_event(
            channel_id,
            "scan_completed",
            {"progress": scan.progress, "duration_seconds": scan.duration_seconds},
        )
        return scan

    # -- Pipeline -------------------------------------------------------------

    async def _run_pipeline(
        self,
        repository: ScanRepository,
        scan: Scan,
        channel_id: str,
        log: ScanLogAdapter,
    ) -> None:
        target_domain: str = scan.domain
        log.info("Starting scan", extra={"action": "scan_start"})

        await repository.mark_running(scan)
        await repository.advance_progress(scan, START_CHECKPOINT)
        await self._publish_event(channel_id, "scan_started", {"target": target_domain})

        selected: Optional[set[str]] = self._selected_stages(scan.config)
        context: dict[str, Any] = {}

        for stage in self.stages:
            if selected is not None and stage.name not in selected:
                log.info("Stage skipped: %s", stage.name, extra={"action": "stage_skipped"})
                await self._checkpoint(repository, scan, stage.checkpoint)
                continue

            result: ModuleResult = await self._run_stage(stage, target_domain, context, log)
            self._merge_context(context, result)

            stored: int = await repository.add_findings(
                scan, build_finding_rows(scan.id, result.data)
            )
            await self._checkpoint(repository, scan, stage.checkpoint)

            await self._publish_event(
                channel_id,
                "stage_completed",
                {
                    "module": stage.name,
                    "outcome": result.outcome.value,
                    "findings": stored,
                    "progress": scan.progress,
                    "duration": result.duration_seconds,
                },
            )

        await repository.mark_completed(scan)

    async def _run_stage(
        self,
        stage: BaseReconModule,
        target_domain: str,
        context: dict[str, Any],
        log: ScanLogAdapter,
    ) -> ModuleResult:
        """Run one stage; an escaping exception becomes an ERROR outcome."""
        if not stage.validate_config():
            log.warning(
                "Stage %s is missing %s and runs with reduced coverage",
                stage.name,
                stage.api_key_setting,
                extra={"action": "stage_unconfigured"},
            )

        start: float = time.monotonic()
        try:
            result = await stage.execute(target_domain, context)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Stage %s failed: %s",
                stage.name,
                exc,
                exc_info=True,
                extra={"action": "stage_error"},
            )
            return ModuleResult.failure(
                stage.name,
                f"{stage.name} failed: {exc}",
                duration_seconds=round(time.monotonic() - start, 3),
            )

        log.info(
            "Stage completed: %s (outcome=%s, duration=%.2fs)",
            stage.name,
            result.outcome.value,
            result.duration_seconds,
            extra={"action": "stage_completed"},
        )
        return result

    def _release_stages(self) -> None:
        """Close the pipeline built from the registry; caller-supplied stages stay open."""
        if not self._owns_stages or self._stages is None:
            return
        for stage in self._stages:
            stage.close()
        self._stages = None

    @staticmethod
    async def _checkpoint(repository: ScanRepository, scan: Scan, checkpoint: int) -> None:
        # 100 is only ever written together with the COMPLETED status.
        if checkpoint < COMPLETE_PROGRESS:
            await repository.advance_progress(scan, checkpoint)

    async def _fail(
        self,
        repository: ScanRepository,
        scan: Scan,
        channel_id: str,
        log: ScanLogAdapter,
        exc: Exception,
    ) -> None:
        log.exception("Scan failed: %s", exc, extra={"action": "scan_failed"})
        try:
            await repository.mark_failed(scan, f"{type(exc).__name__}: {exc}")
        except Exception as mark_exc:  # noqa: BLE001
            log.error(
                "Could not record scan failure: %s",
                mark_exc,
                extra={"action": "scan_fail_record_error"},
            )
        await self._publish_event(channel_id, "scan_failed", {"error": str(exc)})

    # -- Context --------------------------------------------------------------

    @staticmethod
    def _selected_stages(config: Optional[dict[str, Any]]) -> Optional[set[str]]:
        """Stage names chosen in the scan options, or ``None`` for all."""
        stages = (config or {}).get("stages")
        if not stages:
            return None
        return {str(name) for name in stages}

    @staticmethod
    def _merge_context(context: dict[str, Any], result: ModuleResult) -> None:
        """Merge list-valued outputs by extension, dicts by update, scalars by replacement."""
        for key, value in result.data.items():
            if isinstance(value, list):
                context.setdefault(key, []).extend(value)
            elif isinstance(value, dict):
                context.setdefault(key, {}).update(value)
            else:
                context[key] = value

    # -- Redis Pub/Sub --------------------------------------------------------

    async def _publish_event(
        self,
        scan_id: str,
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        """Publish a progress event to the Redis Pub/Sub channel.

        Observers subscribe to ``scan:{scan_id}``.  Nothing is sent when
        ``PUBLISH_EVENTS`` is off in the orchestrator's settings.  Publishing
        failures are logged and otherwise ignored.

        Args:
            scan_id: The scan UUID (used as the channel suffix).
            event_type: Event name (``stage_completed``, ``scan_completed``,
                etc.).
            data: Arbitrary JSON-serialisable payload.
        """
        if not self.settings.PUBLISH_EVENTS:
            return

        channel: str = f"scan:{scan_id}"
        message: str = json.dumps(
            {
                "event": event_type,
                "module": data.get("module"),
                "data": data,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            default=str,
        )

        try:
            redis_client = aioredis.from_url(self.settings.REDIS_URL)
            async with redis_client:
                await redis_client.publish(channel, message)
        except Exception as exc:
            logger.warning(
                "Failed to publish Redis event: %s",
                exc,
                extra={"action": "redis_publish_error", "target": scan_id},
            )
