"""Typer commands that check and repair card content orders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import structlog
import typer

from apps.boardfix.config import ProfileContext, load_profile, resolve_store_path
from apps.boardfix.utils.errors import translate_block_error
from apps.boardfix.utils.progress import card_progress
from libraries.blocks.errors import BlockError
from libraries.blocks.store import JsonBlockStore
from libraries.content_order.service import ContentOrderRepairService

log = structlog.get_logger(__name__)

StoreOption = typer.Option(
    None,
    "--store",
    help="Path to the JSON block store (defaults to the profile or BOARDFIX_STORE).",
)
ProfileOption = typer.Option(None, "--profile", "-p", help="Configuration profile.")
ActorOption = typer.Option(
    None, "--actor", help="User id recorded as the author of repairs."
)
JsonReportOption = typer.Option(
    None, "--json", help="Path to write a JSON report."
)


def _build_service(
    profile: Optional[str], store: Optional[Path]
) -> tuple[ContentOrderRepairService, ProfileContext]:
    context = load_profile(profile=profile)
    store_path = resolve_store_path(context, store)
    log.debug(
        "content_order.cli.store", path=str(store_path), profile=context.name
    )
    service = ContentOrderRepairService(
        JsonBlockStore(store_path), parent_kind=context.parent_kind
    )
    return service, context


def _write_json_report(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)


def check(
    card_id: str = typer.Argument(..., help="Id of the card to check."),
    store: Optional[Path] = StoreOption,
    profile: Optional[str] = ProfileOption,
    json_report: Optional[Path] = JsonReportOption,
) -> None:
    """Report orphaned and missing content blocks of a card."""

    service, _ = _build_service(profile, store)
    try:
        validation = service.check_card_block_order(card_id)
    except BlockError as exc:
        raise translate_block_error(exc) from exc

    if json_report:
        _write_json_report(json_report, {"card_id": card_id, **validation.to_dict()})
        typer.secho(f"Wrote JSON report to {json_report}", fg=typer.colors.BLUE)

    if not validation.has_issues:
        typer.secho(f"Content order of {card_id} is consistent", fg=typer.colors.GREEN)
        return

    typer.secho(f"Content order of {card_id} has issues:", fg=typer.colors.YELLOW)
    for block_id in validation.orphaned_ids:
        typer.secho(f"  orphaned: {block_id}", fg=typer.colors.YELLOW)
    for block_id in validation.missing_ids:
        typer.secho(f"  missing: {block_id}", fg=typer.colors.YELLOW)
    raise typer.Exit(code=1)


def repair(
    card_id: str = typer.Argument(..., help="Id of the card to repair."),
    store: Optional[Path] = StoreOption,
    profile: Optional[str] = ProfileOption,
    actor: Optional[str] = ActorOption,
) -> None:
    """Rewrite a card's content order so it matches its content blocks."""

    service, context = _build_service(profile, store)
    try:
        outcome = service.repair_card_block_order(card_id, actor or context.actor)
    except BlockError as exc:
        raise translate_block_error(exc) from exc

    if not outcome.changed:
        typer.secho(f"Content order of {card_id} already consistent", fg=typer.colors.GREEN)
        return

    typer.secho(
        f"Repaired {card_id}: removed {len(outcome.validation.orphaned_ids)} orphaned, "
        f"appended {len(outcome.validation.missing_ids)} missing",
        fg=typer.colors.CYAN,
    )


def repair_all(
    board_id: str = typer.Option(..., "--board", help="Board whose cards to repair."),
    store: Optional[Path] = StoreOption,
    profile: Optional[str] = ProfileOption,
    actor: Optional[str] = ActorOption,
    json_report: Optional[Path] = JsonReportOption,
) -> None:
    """Repair the content order of every card on a board."""

    service, context = _build_service(profile, store)
    try:
        total = len(service.store.get_blocks_with_type(board_id, service.parent_kind))
        with card_progress("Repair Content Order", total=total) as progress:
            outcomes = service.repair_board(
                board_id,
                actor or context.actor,
                progress_callback=progress.advance,
            )
    except BlockError as exc:
        raise translate_block_error(exc) from exc

    changed = [outcome for outcome in outcomes if outcome.changed]
    typer.secho(f"Checked {len(outcomes)} cards", fg=typer.colors.CYAN)
    if changed:
        typer.secho(f"Repaired {len(changed)} card(s):", fg=typer.colors.YELLOW)
        for outcome in changed:
            typer.secho(f"  {outcome.card_id}", fg=typer.colors.YELLOW)
    else:
        typer.secho("All cards are consistent", fg=typer.colors.GREEN)

    if json_report:
        _write_json_report(json_report, [outcome.to_dict() for outcome in outcomes])
        typer.secho(f"Wrote JSON report to {json_report}", fg=typer.colors.BLUE)


__all__ = ["check", "repair", "repair_all"]
