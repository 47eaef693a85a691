"""CLI application entry point."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from template_preparer.config.loader import PROJECT_CONFIG_NAME, load_config
from template_preparer.config.schema import find_bitbucket_integration
from template_preparer.core.location import resolve_location
from template_preparer.core.reference import parse_repository_reference
from template_preparer.core.template import TemplateDescriptor
from template_preparer.errors import PreparerError
from template_preparer.fetch.git import GitCloner
from template_preparer.prepare.bitbucket import BitbucketPreparer
from template_preparer.prepare.types import PreparerOptions
from template_preparer.utils.output import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from template_preparer.utils.paths import ensure_dir, expand_path

app = typer.Typer(
    name="template-preparer",
    help="Check out scaffolder templates from Bitbucket repositories",
    no_args_is_help=True,
)


# Template for init command
TEMPLATE_CONFIG = """version: "1.0"

settings:
  # Root for checkout directories; the system temp dir when unset
  working_directory: null
  log_level: INFO

integrations:
  bitbucket:
    - host: bitbucket.org
      # Either username + appPassword, or token
      # username: my-user
      # appPassword: my-app-password
      # token: my-access-token
"""

@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing config file",
    ),
):
    """Create a starter config file in the current directory."""
    config_file = Path.cwd() / PROJECT_CONFIG_NAME

    if config_file.exists() and not force:
        print_error(f"Config file already exists: {config_file}")
        print_info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(TEMPLATE_CONFIG)
    print_success(f"Created config file: {config_file}")


@app.command()
def prepare(
    template_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Template entity YAML file",
    ),
    location: Optional[str] = typer.Option(
        None,
        "--location",
        "-l",
        help="Location annotation value, e.g. url:https://bitbucket.org/ws/repo/src/main/template.yaml",
    ),
    working_dir: Optional[Path] = typer.Option(
        None,
        "--working-dir",
        "-w",
        help="Root for the checkout directory (overrides config)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (merged on top of the default search)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """Check out a template's repository and print the template directory."""
    try:
        cfg = load_config(config)
    except ValidationError as e:
        print_error("Configuration validation failed:")
        console.print(e)
        raise typer.Exit(1)
    except (OSError, yaml.YAMLError) as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(1)

    logger = setup_logging("DEBUG" if verbose else cfg.settings.log_level)

    try:
        template = TemplateDescriptor.from_yaml_file(template_file)
        if location:
            template = template.with_location(location)

        resolved = resolve_location(template, BitbucketPreparer.SUPPORTED_PROTOCOLS)
        host = parse_repository_reference(resolved.location).host
        integration = find_bitbucket_integration(cfg, host)
        preparer = BitbucketPreparer.from_config(integration, cloner=GitCloner())
        if preparer.get_credentials() is None:
            print_warning(f"No credentials configured for {host}, cloning anonymously")

        if working_dir is not None:
            working_directory = expand_path(str(working_dir))
        elif cfg.settings.working_directory:
            working_directory = expand_path(cfg.settings.working_directory)
        else:
            working_directory = None

        opts = PreparerOptions(logger=logger)
        if working_directory is not None:
            opts.working_directory = ensure_dir(working_directory)

        print_info(f"Preparing template {template.name} from {host}")
        checkout_path = asyncio.run(preparer.prepare(template, opts))
    except PreparerError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except yaml.YAMLError as e:
        print_error(f"Failed to read template: {e}")
        raise typer.Exit(1)
    except OSError as e:
        print_error(f"Failed to prepare template: {e}")
        raise typer.Exit(1)

    print_success(f"Template ready: {checkout_path}")
    typer.echo(str(checkout_path))


if __name__ == "__main__":
    app()
