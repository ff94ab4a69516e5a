"""Typer application grouping the content order commands."""

import typer

from apps.boardfix.content_order.commands import check, repair, repair_all

app = typer.Typer(name="content-order", help="Check and repair card content orders")

app.command("check")(check)
app.command("repair")(repair)
app.command("repair-all")(repair_all)


__all__ = ["app"]
