"""
cloudtable Command-Line Interface

Generates table Shared Access Signatures from configured account keys.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from cloudtable import __version__
from cloudtable.auth.sas import SharedAccessTablePolicy
from cloudtable.core.config_manager import ConfigManager
from cloudtable.core.logging_config import log_with_context, setup_logging
from cloudtable.exceptions import StorageClientError


@click.group()
@click.version_option(version=__version__, prog_name="cloudtable")
@click.pass_context
def cli(ctx):
    """
    cloudtable - table references and Shared Access Signatures

    Account settings come from a config file or CLOUDTABLE_* environment variables.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option("--table", "-t", "table_name", required=True, help="Table name")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--permissions",
    "-p",
    default="r",
    show_default=True,
    help="Permissions: any of r (query), a (add), u (update), d (delete)",
)
@click.option("--start", type=click.DateTime(), help="Start time (UTC)")
@click.option("--expiry", type=click.DateTime(), help="Expiry time (UTC)")
@click.option(
    "--expiry-hours",
    type=float,
    default=1.0,
    show_default=True,
    help="Expiry relative to now, used when --expiry is not given",
)
@click.option("--policy-id", help="Stored access policy identifier")
@click.option("--start-pk", help="Start partition key")
@click.option("--start-rk", help="Start row key")
@click.option("--end-pk", help="End partition key")
@click.option("--end-rk", help="End row key")
@click.option("--url", "full_url", is_flag=True, help="Print the full table URL instead of the query string")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides the configured level)",
)
def sas(
    table_name: str,
    config: Optional[Path],
    permissions: str,
    start: Optional[datetime],
    expiry: Optional[datetime],
    expiry_hours: float,
    policy_id: Optional[str],
    start_pk: Optional[str],
    start_rk: Optional[str],
    end_pk: Optional[str],
    end_rk: Optional[str],
    full_url: bool,
    log_level: Optional[str],
):
    """
    Generate a Shared Access Signature for a table.

    Examples:
        cloudtable sas --table orders --permissions raud
        cloudtable sas -t orders -c account.yaml --start-pk 2024 --end-pk 2024 --url
    """
    logger = logging.getLogger("cloudtable.cli")

    try:
        manager = ConfigManager()
        loaded = manager.load(config_file=str(config) if config else None)

        # An explicit --log-level wins over the configured level
        setup_logging(
            (log_level or loaded.logging.level).upper(),
            loaded.logging.format,
            loaded.logging.file,
        )

        client = manager.create_client()

        if expiry is None and not policy_id:
            expiry = datetime.now(timezone.utc) + timedelta(hours=expiry_hours)

        policy = SharedAccessTablePolicy(
            permissions=permissions,
            shared_access_start_time=start,
            shared_access_expiry_time=expiry,
        )

        table = client.get_table_reference(table_name)
        token = table.get_shared_access_signature(
            policy,
            policy_id,
            start_pk,
            start_rk,
            end_pk,
            end_rk,
        )
    except (StorageClientError, ValidationError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    log_with_context(
        logger,
        logging.INFO,
        "Generated table Shared Access Signature",
        table=table_name,
        permissions=permissions,
    )

    click.echo(f"{table.uri}{token}" if full_url else token)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
