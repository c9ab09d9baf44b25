"""
otelsiphon CLI - command-line interface for the OTLP logs receiver.

Runs the receiver and offers offline helpers for inspecting how OTLP
payloads are flattened.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from otelsiphon.logging_config import setup_logging

app = typer.Typer(
    name="otelsiphon",
    help="otelsiphon - flatten OpenTelemetry logs for columnar storage",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (default: OTELSIPHON_API_HOST)"),
    port: int = typer.Option(None, help="Port to bind to (default: OTELSIPHON_API_PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """
    Start the OTLP/HTTP receiver.

    Accepts log exports on POST /v1/logs and forwards flat records to the
    configured sink.
    """
    import uvicorn

    from otelsiphon.config import settings

    host = host or settings.api_host
    port = port or settings.api_port

    console.print("[bold green]Starting otelsiphon OTLP receiver...[/bold green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Sink: {settings.sink_type}")
    console.print(f"\n  Logs endpoint: http://{host}:{port}/v1/logs")

    uvicorn.run(
        "otelsiphon.api.app:app",
        host=host,
        port=port,
        reload=reload or settings.api_reload,
    )


@app.command()
def transform(
    path: Path = typer.Argument(..., help="OTLP JSON file (optionally gzip-compressed)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write JSON lines to this file"),
    protobuf: bool = typer.Option(
        False, "--protobuf", help="Treat the file as a protobuf ExportLogsServiceRequest"
    ),
) -> None:
    """
    Flatten an OTLP logs export file and print one JSON line per record.
    """
    from otelsiphon.config import settings
    from otelsiphon.exceptions import PayloadDecodeError
    from otelsiphon.otel.decoder import decode_otlp_request
    from otelsiphon.otel.mapper import transform as transform_request

    try:
        setup_logging(context="cli")
    except PermissionError:
        # Basic logging to stdout
        import logging

        logging.basicConfig(level=logging.INFO)

    if not path.exists():
        err_console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        request = decode_otlp_request(
            path.read_bytes(),
            content_type="application/x-protobuf" if protobuf else "application/json",
        )
    except PayloadDecodeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    records = transform_request(request, max_depth=settings.max_value_depth)
    lines = [json.dumps(record.to_dict(), ensure_ascii=False, default=str) for record in records]

    if output is not None:
        output.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        err_console.print(f"[green]✓[/green] Wrote {len(lines)} records to {output}")
        return

    for line in lines:
        typer.echo(line)


@app.command()
def severities() -> None:
    """Show the OTLP severity number table."""
    from otelsiphon.otel.normalizers import SEVERITY_NAMES

    table = Table(title="OTLP severity numbers")
    table.add_column("Number", justify="right")
    table.add_column("Name")
    for number, name in enumerate(SEVERITY_NAMES):
        table.add_row(str(number), name)
    console.print(table)


if __name__ == "__main__":
    app()
