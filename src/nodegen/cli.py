"""CLI entry point for nodegen."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from nodegen.config import get_settings
from nodegen.generator import package_json
from nodegen.generator.template import TemplateBuilder
from nodegen.parser.base import MissingValueError, NodegenParams, SpecError
from nodegen.parser.custom import stage_custom
from nodegen.parser.detect import detect_format
from nodegen.parser.loader import load_document, load_spec
from nodegen.parser.openapi import normalize
from nodegen.printer import write_outputs


def _stage(spec_path: Path, fmt: str, bundle: bool, validate: bool) -> NodegenParams:
    """Parse and stage a spec based on format."""
    settings = get_settings()
    if fmt == "auto":
        fmt = detect_format(spec_path)

    if fmt == "openapi":
        bundler = settings.bundler if bundle else None
        document = load_spec(spec_path, bundler=bundler, work_path=settings.deref_path)
        return normalize(document, service_name=spec_path.stem, settings=settings)
    return stage_custom(load_document(spec_path), validate=validate)


def _run_stage(spec_path: Path, fmt: str, bundle: bool, validate: bool) -> NodegenParams:
    try:
        return _stage(spec_path, fmt, bundle, validate)
    except (SpecError, MissingValueError, ValidationError) as e:
        raise click.ClickException(str(e)) from e


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


spec_argument = click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
output_option = click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory.")
format_option = click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "openapi", "custom"]), help="Input format.")
bundle_option = click.option("--bundle", is_flag=True, help="Dereference the spec with the external bundler.")
validate_option = click.option("--validate", is_flag=True, help="Check custom-schema operations for missing route params.")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Generate workflow node source from API descriptions."""
    _configure_logging(verbose)


@main.command()
@spec_argument
@output_option
@format_option
@bundle_option
@validate_option
def stage(spec_path: Path, output: Path, fmt: str, bundle: bool, validate: bool):
    """Stage a spec into nodegen params (JSON dump + api map)."""
    click.echo(f"Staging {spec_path} (format: {fmt})...")
    params = _run_stage(spec_path, fmt, bundle, validate)
    count = sum(len(ops) for ops in params.main_params.values())
    click.echo(f"Found {len(params.main_params)} resources, {count} operations.")

    for path in write_outputs(params, output):
        click.echo(f"  Created {path}")


@main.command()
@spec_argument
@output_option
@format_option
@bundle_option
@validate_option
def generate(spec_path: Path, output: Path, fmt: str, bundle: bool, validate: bool):
    """Full pipeline: stage spec -> write params, code fragments and package.json."""
    # Step 1: Stage
    click.echo(f"Staging {spec_path} (format: {fmt})...")
    params = _run_stage(spec_path, fmt, bundle, validate)
    click.echo(f"Found {len(params.main_params)} resources.")

    written = write_outputs(params, output)

    # Step 2: Code fragments
    click.echo("Generating code fragments...")
    files = TemplateBuilder(params).render()
    for filename, content in files.items():
        file_path = output / filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        written.append(file_path)

    # Step 3: Package manifest
    manifest = output / "package.json"
    manifest.write_text(package_json.render(params.meta_params), encoding="utf-8")
    written.append(manifest)

    for path in written:
        click.echo(f"  Created {path}")
    click.echo(f"Done! Generated {len(written)} files in {output}")
