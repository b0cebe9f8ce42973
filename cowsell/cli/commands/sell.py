"""Order submission CLI command."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from cowsell.config import settings
from cowsell.errors import CowsellError, UserDeclined
from cowsell.models import load_order_definition
from cowsell.prompt import ConfirmationGate
from cowsell.report import print_order_submitted

from ..core import EXIT_ERROR, EXIT_MISSING_ARGUMENT, EXIT_USER_DECLINED, app, log
from ..utils import _build_flow

USAGE = (
    "Missing argument. Path to the order definition JSON file. "
    "i.e. cowsell orders/eoa-goerli-market-order.json"
)


@app.command()
def sell(
    order_file: Optional[str] = typer.Argument(
        None, help="Path to the order definition JSON file."
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Quote, price and plan only; send nothing, sign nothing, post nothing.",
    ),
) -> None:
    """Quote, sign and submit the limit order described in ORDER_FILE."""

    if not order_file:
        typer.echo(USAGE, err=True)
        raise typer.Exit(EXIT_MISSING_ARGUMENT)

    try:
        definition = load_order_definition(order_file)
        network, flow = _build_flow(
            definition, settings, gate=ConfirmationGate(), dry_run=dry_run
        )
        result = flow.run(definition)
    except UserDeclined as exc:
        typer.echo(exc.message)
        raise typer.Exit(EXIT_USER_DECLINED)
    except typer.Abort:
        # Input closed while a confirmation prompt was waiting
        typer.echo("Understood! Have a nice day")
        raise typer.Exit(EXIT_USER_DECLINED)
    except CowsellError as exc:
        log.error("[%s] %s", exc.error_code, exc.message)
        log.debug("failure details", exc_info=True)
        typer.echo("There was some errors. Exiting now!")
        raise typer.Exit(EXIT_ERROR)
    except Exception as exc:
        log.error("unhandled error: %s", exc, exc_info=log.isEnabledFor(logging.DEBUG))
        typer.echo("There was some errors. Exiting now!")
        raise typer.Exit(EXIT_ERROR)

    if result is None:
        typer.echo("Dry run complete. Nothing was sent.")
        return
    if result.pending_signatures:
        log.info(
            "Safe transaction %s awaits %d more signature(s)",
            result.safe_tx_hash,
            result.pending_signatures,
        )
    print_order_submitted(network, result.order_id, result.owner)


__all__ = ["sell"]
