"""
rg-cleanup — command-line entry point.

    rg-cleanup [--log-file PATH] <AZURE_RG>
"""

import sys
from typing import Optional

import click

from rgcleanup import __version__
from rgcleanup.cleanup import run
from rgcleanup.config import APP_NAME, LOG_FILE, MIN_CLIENT_VERSION
from rgcleanup.utils import setup_logging


@click.command(name=APP_NAME)
@click.argument("resource_group", required=False, default="")
@click.option("--log-file", default=LOG_FILE, show_default=True,
              help="File every log line is appended to.")
@click.option("--min-client-version", default=MIN_CLIENT_VERSION, show_default=True,
              help="Oldest azure-mgmt-resource release accepted.")
@click.version_option(__version__, prog_name=APP_NAME)
def cli(resource_group: Optional[str], log_file: str, min_client_version: str):
    """Delete every resource in an Azure resource group, dependencies first."""
    setup_logging(log_file)
    sys.exit(run(resource_group, min_version=min_client_version))


if __name__ == "__main__":
    cli()
