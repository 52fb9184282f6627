"""
Shared HTTP helpers for CLI commands that talk to the running proxy.
"""

import os

import httpx
import typer

from motorproxy.config import Config


def get_server_url() -> str:
    """Get the proxy URL from environment or default."""
    explicit = os.getenv("PROXY_URL")
    if explicit:
        return explicit.rstrip("/")

    port = os.getenv("PROXY_PORT") or str(Config.DEFAULT_PORT)
    return f"http://localhost:{port}"


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        error = payload.get("error", f"HTTP {response.status_code}")
        message = payload.get("message")
        return f"{error}: {message}" if message else error
    return f"HTTP {response.status_code}"


def _http_get(path: str) -> dict:
    """Make a GET request to the running proxy."""
    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.get(url, timeout=10.0)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        typer.echo("❌ Cannot connect to the proxy. Is it running?")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as e:
        typer.echo(f"❌ Server error: {_error_detail(e.response)}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)


def _http_post(path: str, data: dict = None, timeout: float = 60.0) -> dict:
    """Make a POST request to the running proxy."""
    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.post(url, json=data or {}, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        typer.echo("❌ Cannot connect to the proxy. Is it running?")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as e:
        typer.echo(f"❌ Server error: {_error_detail(e.response)}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
