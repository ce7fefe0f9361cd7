"""Typer root app. Wires all subcommands together."""

from __future__ import annotations

import logging

import typer

from vhs import __version__

app = typer.Typer(
    name="vhs",
    help="vhs: Video Highlight Studio client. Analyze, cut highlights, ask questions.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log debug output to stderr"),
) -> None:
    from vhs.core.config import get_config

    level = "DEBUG" if verbose else get_config().log_level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("version")
def version_cmd() -> None:
    """Print version info as JSON."""
    from vhs.cli.output import output_json

    output_json({"version": __version__, "package": "vhs-studio"})


# --- Register direct commands ---

from vhs.cli.analyze import register as register_analyze  # noqa: E402
from vhs.cli.highlight import register as register_highlight  # noqa: E402
from vhs.cli.ask import register as register_ask  # noqa: E402
from vhs.cli.list_cmd import register as register_list  # noqa: E402
from vhs.cli.delete import register as register_delete  # noqa: E402
from vhs.cli.cache_cmd import cache_app  # noqa: E402
from vhs.cli.config_cmd import config_app  # noqa: E402

register_analyze(app)
register_highlight(app)
register_ask(app)
register_list(app)
register_delete(app)
app.add_typer(cache_app, name="cache", help="Inspect the local conversation cache")
app.add_typer(config_app, name="config", help="Show/set configuration")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
