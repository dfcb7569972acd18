"""CLI entry point: `lectern start`."""

from __future__ import annotations

import os
import webbrowser

import typer
from rich.console import Console

from lectern.config import ensure_dirs, load_config

app = typer.Typer(name="lectern", help="Source-grounded research notebook.")
console = Console()


@app.callback()
def _root() -> None:
    """Source-grounded research notebook."""


@app.command()
def start(
    port: int = typer.Option(8000, "--port", "-p", help="Port to serve on"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser"),
) -> None:
    """Start the Lectern server."""
    import logging

    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    ensure_dirs()
    config = load_config()
    for label, env_var in (("chat", config.llm.api_key_env), ("speech", config.speech.api_key_env)):
        if not os.environ.get(env_var):
            console.print(f"[yellow]Warning:[/yellow] {env_var} is not set; {label} features will fail.")

    console.print(f"[bold]Starting Lectern on port {port}...[/bold]")

    if not no_browser:
        webbrowser.open(f"http://localhost:{port}")

    uvicorn.run("lectern.server:app", host="127.0.0.1", port=port, reload=False)


def main() -> None:
    app()
