"""Tests for subsweep.core.config."""

from __future__ import annotations

from subsweep.core.config import Config, PipelineConfig, WildcardConfig, load_config


def test_default_config_instantiates():
    cfg = Config()
    assert cfg.general.task_count == 25
    assert cfg.http.timeout == 9.0
    assert cfg.http.fetch_title is True


def test_default_nameservers_are_google():
    cfg = Config()
    assert "8.8.8.8" in cfg.dns.nameservers


def test_pipeline_defaults():
    pc = PipelineConfig()
    assert pc.task_queue_size == 10_000
    assert pc.result_queue_size == 1_000
    assert pc.worker_poll_interval == 0.2
    assert pc.sink_poll_interval == 1.0


def test_wildcard_defaults():
    wc = WildcardConfig()
    assert wc.enabled is True
    assert wc.probe_label == "thisdomainneverexist"
    assert wc.random_length == 5


def test_load_config_from_yaml(tmp_path):
    config_file = tmp_path / "subsweep.yaml"
    config_file.write_text("general:\n  task_count: 99\npipeline:\n  sink_poll_interval: 0.5\n")

    cfg = load_config(str(config_file))
    assert cfg.general.task_count == 99
    assert cfg.pipeline.sink_poll_interval == 0.5


def test_load_config_missing_file_uses_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "nonexistent.yaml"))
    assert cfg.general.task_count == 25


def test_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("SUBSWEEP__GENERAL__TASK_COUNT", "77")
    cfg = load_config(str(tmp_path / "nonexistent.yaml"))
    assert cfg.general.task_count == 77


def test_env_override_list(monkeypatch, tmp_path):
    monkeypatch.setenv("SUBSWEEP__DNS__NAMESERVERS", "1.1.1.1, 9.9.9.9")
    cfg = load_config(str(tmp_path / "nonexistent.yaml"))
    assert cfg.dns.nameservers == ["1.1.1.1", "9.9.9.9"]
