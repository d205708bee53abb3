"""
Base stage interface for the domainrecon scan pipeline.

Defines the abstract base class every stage implements, the standard
result container, and the outcome tag the orchestrator consumes.  Stages
run strictly one after another; each one advances scan progress to its own
checkpoint once it finishes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from domainrecon.config import Settings, get_settings
from domainrecon.engine.repository import FINDING_KEYS

# Progress recorded once a scan has been picked up, before any stage runs.
START_CHECKPOINT: int = 10


class StageOutcome(str, Enum):
    """How a stage ended.

    Attributes:
        FINDINGS: Completed and produced at least one result.
        EMPTY:    Completed with nothing to report.
        ERROR:    Failed; the failure was logged and nothing is persisted.
    """

    FINDINGS = "findings"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class ModuleResult:
    """Standardised result container returned by every stage.

    Attributes:
        module_name:      Unique identifier of the stage that produced this result.
        success:          ``True`` when the stage completed without fatal errors.
        data:             Stage output keyed by finding type (e.g. ``"ports"``).
        errors:           Human-readable error messages collected during execution.
        duration_seconds: Wall-clock time the stage spent executing.
        raw_response:     Optional raw upstream response kept for debugging purposes.
        outcome:          Derived from ``success`` and the finding keys of ``data``
                          unless given; context values such as ``resolved_ip``
                          do not count as findings.
    """

    module_name: str
    success: bool
    data: dict[str, Any]
    errors: list[str] | None = None
    duration_seconds: float = 0.0
    raw_response: Any = None
    outcome: Optional[StageOutcome] = None

    def __post_init__(self) -> None:
        if self.outcome is None:
            if not self.success:
                self.outcome = StageOutcome.ERROR
            elif any(self.data.get(key) for key in FINDING_KEYS):
                self.outcome = StageOutcome.FINDINGS
            else:
                self.outcome = StageOutcome.EMPTY

    @classmethod
    def failure(
        cls,
        module_name: str,
        error: str,
        duration_seconds: float = 0.0,
    ) -> "ModuleResult":
        return cls(
            module_name=module_name,
            success=False,
            data={},
            errors=[error],
            duration_seconds=duration_seconds,
            outcome=StageOutcome.ERROR,
        )


class BaseReconModule(ABC):
    """Abstract base class that every pipeline stage must implement.

    Subclasses **must** override :meth:`execute` and set ``name``,
    ``description``, ``order`` and ``checkpoint``.

    Attributes:
        name:             Short unique identifier used in the registry and scan options.
        description:      Human-readable one-liner describing the stage.
        order:            Position in the pipeline (ascending).
        checkpoint:       Scan progress once this stage has finished.
        requires_api_key: Whether an external API key is needed at runtime.
        api_key_setting:  Name of the :class:`Settings` field holding the key.
    """

    name: str = "base"
    description: str = ""
    order: int = 0
    checkpoint: int = 0
    requires_api_key: bool = False
    api_key_setting: str = ""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings: Settings = settings or get_settings()

    @abstractmethod
    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Run the stage against *target* and return structured results.

        Args:
            target:  The root domain to scan (e.g. ``"example.com"``).
            context: Merged data of previously completed stages.
                     Example keys: ``"resolved_ip"``, ``"subdomains"``.

        Returns:
            A :class:`ModuleResult` containing the stage's findings.
        """

    def validate_config(self) -> bool:
        """Check whether all prerequisites (API keys, etc.) are satisfied.

        Returns:
            ``True`` when the stage is ready to run, ``False`` otherwise.
        """
        if self.requires_api_key:
            return bool(getattr(self.settings, self.api_key_setting, None))
        return True

    def close(self) -> None:
        """Release resources the stage created for itself.  No-op by default."""
