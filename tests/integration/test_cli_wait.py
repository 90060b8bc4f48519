from __future__ import annotations

import logging

import pytest
import yaml
from typer.testing import CliRunner

from blockon import cli
from blockon.probes.resources import ProbeError


class _Response:
    status_code = 204


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda **_: logging.getLogger("blockon"))
    monkeypatch.delenv("BLOCKON_INTERVAL_MS", raising=False)
    monkeypatch.delenv("BLOCKON_TRACK_CALLER", raising=False)


def test_wait_http_retries_until_ready(monkeypatch, caplog) -> None:
    outcomes = [ProbeError("http://svc/", 503), ProbeError("http://svc/", 503), _Response()]
    calls: list[dict[str, object]] = []

    def fake_probe(url, **kwargs):
        calls.append({"url": url, **kwargs})
        item = outcomes[len(calls) - 1]
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(cli, "http_probe", fake_probe)

    with caplog.at_level(logging.WARNING, logger="blockon.core.executor"):
        result = CliRunner().invoke(cli.app, ["wait-http", "http://svc/", "--interval-ms", "0"])

    assert result.exit_code == 0, result.output
    assert "http://svc/ ready (204)" in result.output
    assert len(calls) == 3
    assert calls[0]["timeout_seconds"] == 5.0
    retry_messages = [r.getMessage() for r in caplog.records if r.name == "blockon.core.executor"]
    assert retry_messages == [
        "Error at wait-http http://svc/: ProbeError('http://svc/', 503), will block till success..."
    ]


def test_wait_tcp_uses_label(monkeypatch, caplog) -> None:
    outcomes = [ConnectionRefusedError(111, "Connection refused"), ("db", 5432)]

    def fake_probe(host, port, **kwargs):
        item = outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(cli, "tcp_probe", fake_probe)

    with caplog.at_level(logging.WARNING, logger="blockon.core.executor"):
        result = CliRunner().invoke(
            cli.app, ["wait-tcp", "db", "5432", "--interval-ms", "0", "--label", "postgres"]
        )

    assert result.exit_code == 0, result.output
    assert "db:5432 ready" in result.output
    assert any(r.getMessage().startswith("Error at postgres:") for r in caplog.records)


def test_wait_path_returns_once_present(tmp_path) -> None:
    target = tmp_path / "ready.flag"
    target.write_text("ok", encoding="utf-8")

    result = CliRunner().invoke(cli.app, ["wait-path", str(target)])

    assert result.exit_code == 0, result.output
    assert f"{target} ready" in result.output


def test_wait_path_reports_absence(monkeypatch, tmp_path, caplog) -> None:
    target = tmp_path / "later.flag"
    answers = [None, None, target]
    monkeypatch.setattr(cli, "path_probe", lambda path: answers.pop(0))

    with caplog.at_level(logging.WARNING, logger="blockon.core.executor"):
        result = CliRunner().invoke(cli.app, ["wait-path", str(target), "--interval-ms", "0"])

    assert result.exit_code == 0, result.output
    messages = [r.getMessage() for r in caplog.records if r.name == "blockon.core.executor"]
    assert messages == [f"None at wait-path {target}, will block till Some..."]


def test_bad_config_exits_with_error(tmp_path) -> None:
    config = tmp_path / "broken.yaml"
    config.write_text("retry:\n  interval_ms: -1\n", encoding="utf-8")

    result = CliRunner().invoke(cli.app, ["wait-path", str(tmp_path), "--config", str(config)])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_interval_from_config_and_option(monkeypatch, tmp_path) -> None:
    config = tmp_path / "blockon.yaml"
    config.write_text("retry:\n  interval_ms: 0\n", encoding="utf-8")
    captured: list[dict[str, object]] = []
    real = cli.retry_until_some_async

    def spy(operation, **kwargs):
        captured.append(kwargs)
        return real(operation, **kwargs)

    monkeypatch.setattr(cli, "retry_until_some_async", spy)
    runner = CliRunner()

    first = runner.invoke(cli.app, ["wait-path", str(tmp_path), "--config", str(config)])
    second = runner.invoke(
        cli.app, ["wait-path", str(tmp_path), "--config", str(config), "--interval-ms", "25"]
    )

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert captured[0]["config"].interval_ms == 0
    assert captured[1]["config"].interval_ms == 25


def test_dump_config(tmp_path) -> None:
    dest = tmp_path / "blockon.yaml"

    result = CliRunner().invoke(cli.app, ["dump-config", str(dest)])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(dest.read_text(encoding="utf-8"))["retry"]["interval_ms"] == 50


def test_dump_config_rejects_toml(tmp_path) -> None:
    result = CliRunner().invoke(cli.app, ["dump-config", str(tmp_path / "blockon.toml")])

    assert result.exit_code == 1
