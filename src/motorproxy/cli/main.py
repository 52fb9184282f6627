"""
Top-level CLI commands: start, health, login, doctor.
"""

import json
import os
from dataclasses import replace

import typer

from motorproxy.cli._http import _http_get, _http_post, get_server_url


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from motorproxy.logger import setup_logging

    log_level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO")
    setup_logging(level=log_level, log_file=os.getenv("LOG_FILE"))


def register_commands(app: typer.Typer):
    """Register top-level commands onto the app."""

    @app.command()
    def start(
        host: str = typer.Option(None, help="Host to bind to (default: PROXY_HOST)"),
        port: int = typer.Option(None, help="Port to bind to (default: PROXY_PORT)"),
        no_auto_auth: bool = typer.Option(
            False, "--no-auto-auth", help="Disable server-managed authentication"
        ),
    ):
        """Start the proxy server."""
        import uvicorn

        from motorproxy.config import load_settings
        from motorproxy.server import create_app

        settings = load_settings()
        overrides = {}
        if host:
            overrides["host"] = host
        if port:
            overrides["port"] = port
        if no_auto_auth:
            overrides["auto_auth"] = False
        settings = replace(settings, **overrides)

        typer.echo(f"🚀 Starting proxy on http://{settings.host}:{settings.port}...")
        try:
            uvicorn.run(
                create_app(settings),
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
                log_config=None,
            )
        except KeyboardInterrupt:
            typer.echo("\n🛑 Server stopped.")

    @app.command()
    def health():
        """Show the running proxy's session status."""
        data = _http_get("/health")
        typer.echo(json.dumps(data, indent=2))
        if data.get("session") != "authenticated":
            raise typer.Exit(code=1)

    @app.command()
    def login(
        card_number: str = typer.Option(
            None, "--card-number", envvar="EBSCO_CARD_NUMBER", help="Library card number"
        ),
        password: str = typer.Option(
            ..., "--password", envvar="EBSCO_PASSWORD", prompt=True, hide_input=True
        ),
    ):
        """Run a manual EBSCO login through the proxy and print the token."""
        from motorproxy.config import Config

        data = _http_post(
            "/api/auth/ebsco",
            data={
                "cardNumber": card_number or Config.DEFAULT_CARD_NUMBER,
                "password": password,
            },
        )
        typer.echo(data.get("authToken", ""))

    @app.command()
    def doctor():
        """Check the configuration used by `start`."""
        from motorproxy.config import load_settings

        settings = load_settings()
        ok = True

        typer.echo(f"Auto-auth:   {'enabled' if settings.auto_auth else 'disabled'}")
        typer.echo(f"Card number: {settings.card_number}")
        if settings.password:
            typer.echo("Password:    ***SET***")
        else:
            typer.echo("Password:    ⚠️  NOT SET (set EBSCO_PASSWORD)")
            ok = not settings.auto_auth
        typer.echo(f"Listen:      {settings.host}:{settings.port}")
        typer.echo(f"Session TTL: {settings.session_ttl_minutes:g} minutes")
        typer.echo(f"CLI target:  {get_server_url()}")

        if not ok:
            raise typer.Exit(code=1)
