"""Entry point for pingboard."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from rich.console import Console
from rich.panel import Panel

from pingboard.config import settings
from pingboard.monitor.models import Endpoint
from pingboard.monitor.prober import Prober

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel(f"Starting pingboard on {settings.api_host}:{settings.api_port}", style="bold green"))
    uvicorn.run(
        "pingboard.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def run_check(url: str, timeout: float) -> int:
    """Probe a single URL once and print the outcome."""
    record = Prober(timeout=timeout).probe(Endpoint(name=url, url=url))

    latency = f"{record.response_time * 1000:.0f} ms"
    if record.is_up:
        console.print(f"[bold green]UP[/bold green] {url} — {record.status_code} in {latency}")
        return 0
    detail = record.error or f"HTTP Status {record.status_code}"
    console.print(f"[bold red]DOWN[/bold red] {url} — {detail} ({latency})")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="pingboard endpoint monitor")
    sub = parser.add_subparsers(dest="command")

    # Server mode
    sub.add_parser("serve", help="Start the API server and the check scheduler")

    # One-off probe
    check_parser = sub.add_parser("check", help="Probe a URL once")
    check_parser.add_argument("url", help="The URL to probe")
    check_parser.add_argument(
        "--timeout", type=float, default=settings.probe_timeout_seconds,
        help="Probe timeout in seconds",
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        sys.exit(run_check(args.url, args.timeout))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
