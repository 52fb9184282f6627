"""
motorproxy CLI.

- start:  run the proxy server
- health: show the running proxy's session status
- login:  run a manual EBSCO login through the running proxy
- doctor: check the configuration
"""

import typer

from motorproxy.cli._http import _http_get, _http_post  # noqa: F401
from motorproxy.cli.main import configure_logging, register_commands

app = typer.Typer(help="motorproxy - EBSCO-authenticated proxy for the Motor.com M1 API")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    motorproxy - EBSCO-authenticated proxy for the Motor.com M1 API.
    """
    configure_logging(verbose)


register_commands(app)

if __name__ == "__main__":
    app()
