"""Command-line entry point: ``sasrotate rotate`` and ``sasrotate decode``."""

import sys
from enum import Enum
from pathlib import Path

import typer

from sasrotate.azure.client import AzureClient
from sasrotate.config import ConfigError, RotationConfig, load_config
from sasrotate.domain.secrets import decode_secret_name
from sasrotate.logs import configure_logging
from sasrotate.models import SecretNameError
from sasrotate.providers import MockBackend, RotationBackend
from sasrotate.rotation import Rotator

app = typer.Typer(
    help="Rotate Storage Account keys, SAS tokens and connection strings held in Key Vault",
    no_args_is_help=True,
)

# Module-level defaults for Typer arguments
_CONFIG_HELP = "JSON config file. Without it, $resource_groups or the built-in groups are used"
_RESOURCE_GROUP_HELP = "Resource group to rotate (repeatable); overrides the configured list"
_PREFIX_HELP = "Only rotate secrets whose name starts with this prefix"
_MOCK_HELP = "Use the in-memory backend instead of the Azure CLI"


class Output(str, Enum):
    pipeline = "pipeline"
    console = "console"


def _resolve_config(
    config_path: Path | None,
    resource_groups: list[str] | None,
    prefix: str | None,
    subscription: str | None,
) -> RotationConfig:
    """Load configuration, then apply command-line overrides on top."""
    config = load_config(config_path)
    overrides: dict[str, object] = {}
    if resource_groups:
        overrides["resource_groups"] = resource_groups
    if prefix is not None:
        overrides["secret_prefix"] = prefix
    if subscription is not None:
        overrides["subscription_id"] = subscription
    if not overrides:
        return config
    try:
        return RotationConfig.model_validate({**config.model_dump(), **overrides})
    except ValueError as exc:
        raise ConfigError(f"Invalid command-line option: {exc}") from exc


@app.command()
def rotate(
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help=_CONFIG_HELP
    ),
    resource_groups: list[str] | None = typer.Option(  # noqa: B008
        None, "--resource-group", "-g", help=_RESOURCE_GROUP_HELP
    ),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help=_PREFIX_HELP),
    subscription: str | None = typer.Option(None, "--subscription", help="Azure subscription ID"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Generate but do not upload"),
    mock: bool = typer.Option(False, "--mock", help=_MOCK_HELP),
    output: Output = typer.Option(  # noqa: B008
        Output.pipeline, "--output", "-o", help="Log format"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every az call"),
) -> None:
    """Regenerate every matching secret in the configured resource groups."""
    logger = configure_logging(output.value, verbose)

    try:
        config = _resolve_config(config_path, resource_groups, prefix, subscription)
    except ConfigError as exc:
        logger.error("%s", exc)
        sys.exit(2)

    backend: RotationBackend = MockBackend() if mock else AzureClient(config.subscription_id)
    report = Rotator(backend, config, dry_run=dry_run, output=output.value).run()

    for outcome in report.failed:
        target = "/".join(p for p in (outcome.vault, outcome.secret_name) if p)
        logger.error("Failed: %s: %s", target, outcome.message)
    sys.exit(0 if report.ok else 1)


@app.command()
def decode(
    names: list[str] = typer.Argument(..., help="Key Vault secret names to decode"),  # noqa: B008
) -> None:
    """Show how secret names are interpreted, without touching Azure."""
    invalid = 0
    for name in names:
        try:
            descriptor = decode_secret_name(name)
        except SecretNameError as exc:
            invalid += 1
            typer.echo(f"{name}: invalid ({exc})", err=True)
            continue
        container = descriptor.container if descriptor.container is not None else "-"
        typer.echo(
            f"{name}: account={descriptor.storage_account} "
            f"container={container} kind={descriptor.kind.value}"
        )
    sys.exit(1 if invalid else 0)


def main() -> None:
    app()
