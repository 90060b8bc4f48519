"""Command-line entry points: block until a resource becomes available."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from blockon.config import BlockOnConfig, ConfigError, RetryConfig, dump_example_config, load_config
from blockon.core.executor import retry_until_ok_async, retry_until_some_async
from blockon.probes.resources import http_probe, path_probe, tcp_probe
from blockon.util.logging import configure_logging

app = typer.Typer(add_completion=False, help="Block until external resources become available")

_CONFIG_OPTION = typer.Option(None, "--config", help="YAML/TOML/JSON config file")
_INTERVAL_OPTION = typer.Option(None, "--interval-ms", min=0, help="Pause between failed attempts (default from config)")
_LABEL_OPTION = typer.Option(None, help="Label attached to retry diagnostics")


def _load(config_path: Optional[Path]) -> BlockOnConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _retry_settings(cfg: BlockOnConfig, interval_ms: Optional[int]) -> RetryConfig:
    if interval_ms is None:
        return cfg.retry
    return cfg.retry.model_copy(update={"interval_ms": interval_ms})


@app.command("wait-http")
def wait_http(
    url: str = typer.Argument(..., help="URL to poll with GET"),
    expect_status: Optional[int] = typer.Option(None, help="Exact status to wait for (default: any below 400)"),
    interval_ms: Optional[int] = _INTERVAL_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    label: Optional[str] = _LABEL_OPTION,
) -> None:
    """Poll an HTTP endpoint until it answers."""

    cfg = _load(config)
    logger = configure_logging(level=cfg.logging.level, log_path=cfg.logging.log_path)
    status = expect_status if expect_status is not None else cfg.probes.expect_status

    def _probe():
        return http_probe(url, timeout_seconds=cfg.probes.http_timeout_seconds, expect_status=status)

    logger.info("Waiting for %s", url)
    response = asyncio.run(
        retry_until_ok_async(
            lambda: asyncio.to_thread(_probe),
            label=label or f"wait-http {url}",
            config=_retry_settings(cfg, interval_ms),
        )
    )
    typer.echo(f"{url} ready ({response.status_code})")


@app.command("wait-tcp")
def wait_tcp(
    host: str = typer.Argument(..., help="Host name or address"),
    port: int = typer.Argument(..., min=1, max=65535, help="TCP port"),
    interval_ms: Optional[int] = _INTERVAL_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    label: Optional[str] = _LABEL_OPTION,
) -> None:
    """Wait until a TCP port accepts connections."""

    cfg = _load(config)
    logger = configure_logging(level=cfg.logging.level, log_path=cfg.logging.log_path)

    def _probe():
        return tcp_probe(host, port, timeout_seconds=cfg.probes.connect_timeout_seconds)

    logger.info("Waiting for %s:%s", host, port)
    asyncio.run(
        retry_until_ok_async(
            lambda: asyncio.to_thread(_probe),
            label=label or f"wait-tcp {host}:{port}",
            config=_retry_settings(cfg, interval_ms),
        )
    )
    typer.echo(f"{host}:{port} ready")


@app.command("wait-path")
def wait_path(
    path: Path = typer.Argument(..., help="File or directory that must appear"),
    interval_ms: Optional[int] = _INTERVAL_OPTION,
    config: Optional[Path] = _CONFIG_OPTION,
    label: Optional[str] = _LABEL_OPTION,
) -> None:
    """Wait until a path exists."""

    cfg = _load(config)
    logger = configure_logging(level=cfg.logging.level, log_path=cfg.logging.log_path)

    async def _probe():
        return path_probe(path)

    logger.info("Waiting for %s", path)
    found = asyncio.run(
        retry_until_some_async(
            _probe,
            label=label or f"wait-path {path}",
            config=_retry_settings(cfg, interval_ms),
        )
    )
    typer.echo(f"{found} ready")


@app.command("dump-config")
def dump_config(dest: Path = typer.Argument(..., help="Destination (.yaml or .json)")) -> None:
    """Write the default configuration."""

    try:
        dump_example_config(dest)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
