from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from boardbuild.errors import BoardConfigError, CancellationSignal, NotFoundError
from boardbuild.migration.board_products import BoardProductBuilder, summarize_migration
from boardbuild.run import load_generator_settings
from boardbuild.session import GenerationSession
from boardbuild.utils.catalog_store import CatalogStore, read_json
from boardbuild.validation.catalog import CatalogValidator
from boardbuild.validation.pins import PinDiagnostics, format_pin_report
from shared_libs.config_models.settings import GeneratorSettings
from tools.boardctl.prompts import TyperPrompter


app = typer.Typer(help="boardctl - validated per-unit board configuration generator")


def _settings(ctx: typer.Context) -> GeneratorSettings:
	return ctx.obj["settings"]


def _store(ctx: typer.Context) -> CatalogStore:
	return CatalogStore(_settings(ctx).catalog_dir)


def _fail(error: Exception) -> None:
	typer.secho(f"\n❌ {error}", fg=typer.colors.RED, err=True)
	raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def common(
	ctx: typer.Context,
	settings_path: Optional[Path] = typer.Option(
		None,
		"--settings",
		help="Path to generator_settings.yaml (defaults to config_sources/generator_settings.yaml)",
	),
	catalog_dir: Optional[Path] = typer.Option(None, "--catalog", help="Catalog directory (overrides settings)"),
	output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Where saved configs go (overrides settings)"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
	"""With no command, runs the interactive configuration generator."""
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
	)
	settings = load_generator_settings(settings_path)
	updates = {}
	if catalog_dir is not None:
		updates["catalog_dir"] = catalog_dir
	if output_dir is not None:
		updates["output_dir"] = output_dir
	ctx.obj = {"settings": settings.model_copy(update=updates)}
	if ctx.invoked_subcommand is None:
		generate(ctx)


@app.command("generate")
def generate(ctx: typer.Context):
	"""Prompt for product, board, batch and sensors, then print (and optionally save) the config."""
	session = GenerationSession(_store(ctx), TyperPrompter(), _settings(ctx), echo=typer.echo)
	try:
		session.run()
	except CancellationSignal:
		typer.echo("\n\n👋 Configuration cancelled.")
		raise typer.Exit(code=0)
	except BoardConfigError as e:
		_fail(e)


@app.command("validate")
def validate(ctx: typer.Context):
	"""Validate every board, sensor board and SKU catalog file."""
	ok, _ = CatalogValidator(_store(ctx), echo=typer.echo).validate()
	if not ok:
		raise typer.Exit(code=1)


@app.command("pins")
def pins(
	ctx: typer.Context,
	board: str = typer.Argument(..., help="Board identifier or alias"),
	print_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
):
	"""Report GPIO usage and conflicts for one board, even if the board would not load."""
	store = _store(ctx)
	try:
		path = store.resolve_board_file(board)
		if path is None:
			raise NotFoundError("Board configuration", board)
		report = PinDiagnostics(store.validator).diagnose_document(read_json(path))
	except BoardConfigError as e:
		_fail(e)
	if print_json:
		typer.echo(json.dumps(report.to_dict(), indent=2))
	else:
		typer.echo(format_pin_report(report, title=f"Pin Usage Report: {board}"))
	if not report.is_valid:
		raise typer.Exit(code=1)


@app.command("migrate")
def migrate(
	ctx: typer.Context,
	output: Optional[Path] = typer.Option(None, "--output", help="Directory for <board>.products.json files"),
	show_pins: bool = typer.Option(True, "--pins/--no-pins", help="Print per-board pin conflict summary"),
):
	"""Reshape sku-mappings.json into per-board product lists."""
	store = _store(ctx)
	typer.echo("🔄 Starting migration from SKU mappings to board products...\n")
	try:
		sku_mappings = store.load_sku_mappings()
		builder = BoardProductBuilder(validator=store.validator)
		board_products = builder.build(sku_mappings.products)
	except BoardConfigError as e:
		_fail(e)

	typer.echo(summarize_migration(board_products))

	if show_pins:
		reports = PinDiagnostics(store.validator).diagnose_groups(board_products)
		for board_id, report in reports.items():
			if report.is_valid:
				typer.echo(f"✅ {board_id}: pins unique ({len(report.all_pins)} in use)")
			else:
				pins_list = ", ".join(str(c.pin) for c in report.conflicts)
				typer.secho(
					f"⚠️  {board_id}: {len(report.conflicts)} shared pin(s) across products ({pins_list}); "
					"products must be split across boards before they can be loaded together",
					fg=typer.colors.YELLOW,
				)

	if output is not None:
		output.mkdir(parents=True, exist_ok=True)
		for board_id, products in board_products.items():
			out_path = output / f"{board_id}.products.json"
			with open(out_path, "w", encoding="utf-8") as f:
				json.dump([p.to_document() for p in products], f, indent=2)
			typer.echo(f"💾 {board_id}: {len(products)} product(s) -> {out_path}")
	typer.echo("\n✅ Migration complete.")


def main() -> None:
	app()


if __name__ == "__main__":
	main()
