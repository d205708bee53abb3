"""
Tests for the stage registry and the base stage contract.
"""

from __future__ import annotations

import domainrecon.modules  # noqa: F401
from domainrecon.config import Settings
from domainrecon.modules import BaseReconModule, ModuleRegistry, ModuleResult, StageOutcome


def test_pipeline_order_and_checkpoints(settings: Settings) -> None:
    pipeline = ModuleRegistry.get_pipeline(settings)

    assert [stage.name for stage in pipeline] == [
        "whois",
        "dns",
        "subdomains",
        "portscan",
        "techdetect",
        "sslcert",
        "headeraudit",
        "historical",
    ]
    checkpoints = [stage.checkpoint for stage in pipeline]
    assert checkpoints == [20, 35, 50, 65, 80, 90, 95, 100]
    assert all(isinstance(stage, BaseReconModule) for stage in pipeline)


def test_get_module_by_name(settings: Settings) -> None:
    stage = ModuleRegistry.get_module("dns", settings)
    assert stage.name == "dns"
    assert stage.settings is settings


def test_historical_requires_securitytrails_key(settings: Settings) -> None:
    assert ModuleRegistry.get_module("historical", settings).validate_config() is False

    configured = settings.model_copy(update={"SECURITYTRAILS_API_KEY": "key"})
    assert ModuleRegistry.get_module("historical", configured).validate_config() is True


def test_result_outcome_is_derived() -> None:
    assert ModuleResult("dns", True, {"dns_records": []}).outcome is StageOutcome.EMPTY
    assert ModuleResult("dns", True, {"dns_records": [{"record_type": "A"}]}).outcome is StageOutcome.FINDINGS

    context_only = ModuleResult("portscan", True, {"ports": [], "port_source": "probe", "resolved_ip": "203.0.113.5"})
    assert context_only.outcome is StageOutcome.EMPTY

    failed = ModuleResult.failure("dns", "dns failed: boom", duration_seconds=0.5)
    assert failed.outcome is StageOutcome.ERROR
    assert failed.success is False
    assert failed.errors == ["dns failed: boom"]


def test_blank_api_key_is_unconfigured() -> None:
    assert Settings(_env_file=None, SHODAN_API_KEY="  ").SHODAN_API_KEY is None
