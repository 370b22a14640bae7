"""CLI entry point for NetWise: ``python -m netwise``."""

import logging

import click
import uvicorn
from dotenv import find_dotenv, load_dotenv

from . import NetWise

# .env values become defaults for the options below and for Settings.from_env
load_dotenv(find_dotenv(usecwd=True))


@click.command()
@click.option("--host", default="127.0.0.1", envvar="NETWISE_HOST", help="Host to bind to.")
@click.option("--port", default=8050, envvar="NETWISE_PORT", help="Port to serve on.")
@click.option(
    "--log-level",
    default="INFO",
    envvar="NETWISE_LOG_LEVEL",
    help="Logging level for the netwise loggers.",
)
def main(host: str, port: int, log_level: str):
    """Serve the NetWise chat page."""
    logging.basicConfig(
        level=log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    )
    click.echo(f"Starting NetWise on http://{host}:{port}")
    uvicorn.run(NetWise(), host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
