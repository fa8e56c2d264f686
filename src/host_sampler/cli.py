"""CLI interface for host_sampler."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import time

from . import __version__
from .config import HostSamplerConfig, load_config
from .errors import ConfigurationError


def _build_exporters(cfg: HostSamplerConfig) -> list:
    from .exporter.local import LocalExporter

    exporters = []
    if cfg.local_exporter.enabled:
        exporters.append(LocalExporter(cfg.local_exporter))

    if cfg.mode == "online":
        from .exporter.otel import OtelExporter
        exporters.append(OtelExporter(cfg.otel))
    return exporters


def _cmd_collect(args: argparse.Namespace) -> None:
    """Run host metric collection until interrupted."""
    cfg = load_config(args.config)

    from .collector.manager import CollectorManager

    manager = CollectorManager(cfg.sampler)
    exporters = _build_exporters(cfg)
    for exp in exporters:
        manager.add_sink(exp.export)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    manager.start()
    print(f"host_sampler running (mode={cfg.mode}, interval={cfg.sampler.interval_seconds}s)")
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        manager.stop()
        for exp in exporters:
            exp.shutdown()
    print("\nCollection stopped.")


def _cmd_sample(args: argparse.Namespace) -> None:
    """Run a few cycles in the foreground and print the last one."""
    cfg = load_config(args.config)
    interval = args.interval if args.interval is not None else cfg.sampler.interval_seconds

    from .collector.manager import CollectorManager

    manager = CollectorManager(cfg.sampler)
    samples = manager.collect_once()
    for _ in range(max(args.cycles, 1) - 1):
        time.sleep(interval)
        samples = manager.collect_once()

    print_samples(samples, show_labels=args.labels)


def print_samples(samples: list, *, show_labels: bool = False) -> None:
    """Pretty-print one cycle of samples to the terminal using Rich."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Host metrics", show_lines=False)
    table.add_column("Metric", style="green", width=24)
    table.add_column("Device", style="magenta", width=12)
    table.add_column("Value", justify="right", width=14)
    table.add_column("Unit", width=9)
    if show_labels:
        table.add_column("Labels")

    for s in samples:
        device = s.labels.get("disk") or s.labels.get("interface") or s.labels.get("path") or ""
        value = "NaN" if s.value != s.value else f"{s.value:.2f}"
        row = [s.name, device, value, s.unit]
        if show_labels:
            row.append(s.labels.serialize())
        table.add_row(*row)

    console = Console()
    console.print(table)
    console.print(f"  {len(samples)} samples")


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"host_sampler {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the host-sampler CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        prog="host-sampler",
        description="Sample host CPU, memory, disk, network and TCP metrics",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to host_sampler.yaml")
    sub = parser.add_subparsers(dest="command")

    # collect
    collect_p = sub.add_parser("collect", help="Start periodic host metric collection")
    collect_p.set_defaults(func=_cmd_collect)

    # sample
    sample_p = sub.add_parser("sample", help="Run a few cycles and print the last one")
    sample_p.add_argument("--cycles", type=int, default=2, help="Number of cycles to run")
    sample_p.add_argument("--interval", type=float, default=None, help="Seconds between cycles")
    sample_p.add_argument("--labels", action="store_true", help="Show full label sets")
    sample_p.set_defaults(func=_cmd_sample)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ConfigurationError as exc:
        logging.getLogger(__name__).error("Invalid configuration: %s", exc)
        sys.exit(2)


if __name__ == "__main__":
    main()
