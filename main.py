#!/usr/bin/env python3
"""
GoDrive SGF Editor - Main Entry Point
"""
import os
import socket
import sys

import click
from rich.console import Console

console = Console()


def check_port_available(port: int, host: str = '0.0.0.0') -> bool:
    """Check if a port can be bound"""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.close()
        return True
    except OSError:
        return False


def check_client_secrets(path: str) -> bool:
    """True when OAuth client secrets are available from the file or environment"""
    if os.path.exists(path):
        return True
    return bool(os.getenv('GOOGLE_CLIENT_ID') and os.getenv('GOOGLE_CLIENT_SECRET'))


@click.command()
@click.option('--port', default=None, type=int, help='Port to run server on (default: server.port from config)')
@click.option('--host', default=None, help='Host to bind to (default: server.host from config)')
@click.option('--config', 'config_path', default='config/config.yaml', help='Configuration file')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def main(port: int, host: str, config_path: str, reload: bool):
    """
    GoDrive SGF Editor

    Start the FastAPI application serving SGF files from Google Drive
    """
    import uvicorn
    from godrive.utils.config import load_config

    os.environ["GODRIVE_CONFIG"] = config_path
    config = load_config(config_path)
    host = host or config.server.host
    port = port or config.server.port

    if not check_client_secrets(config.google.client_secrets_path):
        console.print(f"[bold red]No client_secrets.json found at {config.google.client_secrets_path}[/bold red]")
        console.print("[yellow]Download it from the Google Cloud console, or set "
                      "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET[/yellow]")
        sys.exit(1)

    if not check_port_available(port, host):
        console.print(f"[bold red]Port {port} is already in use[/bold red]")
        console.print(f"  Use a different port: [bold]python main.py --port {port + 1}[/bold]")
        sys.exit(1)

    console.print(f"[bold blue]Starting {config.app.name}[/bold blue]")
    console.print(f"Server: http://{host}:{port}")
    console.print(f"Docs: http://{host}:{port}/docs")
    console.print("[bold]Press Ctrl+C to stop[/bold]\n")

    try:
        uvicorn.run(
            "api.main:app",
            host=host,
            port=port,
            reload=reload,
            log_level=config.logging.level.lower()
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")


if __name__ == "__main__":
    main()
