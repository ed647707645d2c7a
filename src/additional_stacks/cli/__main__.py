#!/usr/bin/env python3
"""Main CLI entry point for additional stacks."""

import logging
import sys
from typing import Optional

import click

from ..config import DeployPhase, Purpose, load_settings
from ..deployment import Orchestrator
from ..errors import ConfigurationError


@click.group()
@click.version_option(package_name="additional-stacks")
@click.option("--config", "-c", "config_path", help="Configuration file path")
@click.option("--stage", "-s", help="Stage (defaults to the configured stage)")
@click.option("--region", "-r", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--concurrency", type=click.IntRange(min=1), help="Stacks processed in parallel")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    stage: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    concurrency: Optional[int],
    verbose: bool,
) -> None:
    """Deploy, describe and remove additional CloudFormation stacks."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(threadName)s %(name)s %(levelname)s %(message)s",
        )

    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if profile:
        settings.profile = profile
    if concurrency:
        settings.concurrency = concurrency

    ctx.obj = {
        "settings": settings,
        "overrides": {
            key: value
            for key, value in {"stage": stage, "region": region}.items()
            if value
        },
        "orchestrator": Orchestrator.from_settings(
            settings, log=click.echo, region=region
        ),
    }


@cli.command()
@click.option("--stack", help="Additional Stack name to Deploy")
@click.option(
    "--phase",
    type=click.Choice([p.value for p in DeployPhase], case_sensitive=False),
    help="Only deploy stacks set to deploy before/after the main stack",
)
@click.option("--skip", is_flag=True, help="Skip deploying Additional Stacks")
@click.pass_obj
def deploy(obj, stack: Optional[str], phase: Optional[str], skip: bool) -> None:
    """Deploy Additional Stacks."""
    context = obj["settings"].context(
        Purpose.DEPLOY,
        stack=stack,
        skip=skip,
        phase=DeployPhase(phase.lower()) if phase else None,
        **obj["overrides"],
    )
    obj["orchestrator"].deploy(context)


@cli.command()
@click.option("--stack", help="Additional Stack name to Remove")
@click.option(
    "--all", "remove_all", is_flag=True, help="Explicitly state the wish to remove all stacks"
)
@click.pass_obj
def remove(obj, stack: Optional[str], remove_all: bool) -> None:
    """Remove Additional Stacks."""
    context = obj["settings"].context(
        Purpose.REMOVE, stack=stack, all=remove_all, **obj["overrides"]
    )
    obj["orchestrator"].remove(context)


@cli.command()
@click.option("--stack", help="Additional Stack name to Describe")
@click.pass_obj
def info(obj, stack: Optional[str]) -> None:
    """Show the status of Additional Stacks."""
    context = obj["settings"].context(
        Purpose.DESCRIBE, stack=stack, **obj["overrides"]
    )
    obj["orchestrator"].describe(context)


if __name__ == "__main__":
    cli()
