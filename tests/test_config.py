"""
Tests for configuration loading, metrics and CLI input parsing.
"""
import json

from infra_manager.cli import read_runtime_ids
from infra_manager.config import ReconcilerConfig, load_converter_config
from infra_manager.metrics import Metrics


class TestConverterConfig:
    def test_load_json(self, tmp_path):
        path = tmp_path / "converter_config.json"
        path.write_text(
            json.dumps(
                {
                    "kubernetes": {"defaultVersion": "1.31"},
                    "dns": {"domainPrefix": "dev.kyma.ondemand.com"},
                    "provider": {"aws": {"enableIMDSv2": True}},
                    "gardener": {"projectName": "kyma"},
                }
            )
        )

        config = load_converter_config(path)

        assert config.kubernetes.defaultVersion == "1.31"
        assert config.kubernetes.defaultOperatorOidc.signingAlgs == ["RS256"]
        assert config.provider.aws.enableIMDSv2 is True
        assert config.gardener.projectName == "kyma"
        assert config.auditLogging.policyConfigMapName == ""


class TestReconcilerConfig:
    def test_defaults(self, monkeypatch):
        for name in ("GARDENER_REQUEUE_DURATION", "AUDIT_LOG_MANDATORY", "FIELD_MANAGER", "API_TIMEOUT", "METRICS_PORT"):
            monkeypatch.delenv(name, raising=False)

        config = ReconcilerConfig.from_env()

        assert config.gardener_requeue_duration == 15.0
        assert config.audit_log_mandatory is True
        assert config.field_manager == "kim"
        assert config.api_timeout == 20.0
        assert config.metrics_port == 8080

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GARDENER_REQUEUE_DURATION", "30")
        monkeypatch.setenv("AUDIT_LOG_MANDATORY", "false")
        monkeypatch.setenv("FIELD_MANAGER", "restore")

        config = ReconcilerConfig.from_env()

        assert config.gardener_requeue_duration == 30.0
        assert config.audit_log_mandatory is False
        assert config.field_manager == "restore"


class TestRuntimeIds:
    def test_file_and_options_merged_in_order(self, tmp_path):
        path = tmp_path / "runtimes.txt"
        path.write_text("rt-1\n\n# comment\nrt-2\n")

        assert read_runtime_ids(path, ["rt-3", "rt-1"]) == ["rt-1", "rt-2", "rt-3"]

    def test_options_only(self):
        assert read_runtime_ids(None, ["rt-1"]) == ["rt-1"]


class TestMetrics:
    def test_stop_counter_is_exported(self):
        metrics = Metrics()

        metrics.inc_runtime_fsm_stop_counter()
        metrics.inc_runtime_fsm_stop_counter()

        assert metrics.registry.get_sample_value("im_runtime_fsm_stop_total") == 2.0

    def test_instances_do_not_share_counts(self):
        first, second = Metrics(), Metrics()

        first.inc_runtime_fsm_stop_counter()

        assert first.runtime_fsm_stop_count == 1
        assert second.runtime_fsm_stop_count == 0
