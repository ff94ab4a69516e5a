import typer

from apps.boardfix.content_order import app as content_order
from apps.boardfix.misc.info import app as info
from apps.boardfix.utils.log_config import configure_logging


app = typer.Typer(help="boardfix command line interface")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Emit debug logs on stderr."
    ),
) -> None:
    """Check and repair the content order of board cards."""

    configure_logging(verbose)


app.add_typer(info)
app.add_typer(content_order)
