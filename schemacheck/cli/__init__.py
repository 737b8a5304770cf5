"""Command-line interface for schemacheck."""

import rich_click as click

from .. import __version__
from .check import check_command, diff_command

# Configure rich-click styling
click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.STYLE_OPTION = "bold cyan"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_COMMAND = "bold green"
click.rich_click.STYLE_SWITCH = "bold blue"


@click.group(name="schemacheck")
@click.version_option(version=__version__, prog_name="schemacheck")
def main() -> None:
    """🛡️ **schemacheck** - Catch breaking API schema changes before they ship.

    Diffs two versions of a schema and classifies every change by the risk
    it poses to existing clients, using recorded field usage.
    """
    pass


main.add_command(check_command)
main.add_command(diff_command)


if __name__ == "__main__":
    main()


__all__ = ["main"]
