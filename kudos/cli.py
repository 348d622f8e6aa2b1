"""Kudos CLI — give, like and browse compliments from the terminal."""

from functools import wraps

import click
from rich.console import Console
from rich.table import Table

from kudos import __version__
from kudos.config import load_settings
from kudos.errors import LedgerError

console = Console()


def _ledger(ctx: click.Context):
    from kudos.bootstrap import build_ledger

    return build_ledger(ctx.obj["settings"])


def _caller(ctx: click.Context, actor: str | None) -> str:
    caller = actor or ctx.obj["settings"].identity
    if not caller:
        raise click.UsageError("No acting identity: pass --as or set KUDOS_IDENTITY.")
    return caller


def _handle_errors(fn):
    """Print ledger errors in red and exit with status 1."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except LedgerError as e:
            console.print(f"[red]Error ({e.code}):[/] {e.message}")
            raise SystemExit(1)

    return wrapper


def _as_option(fn):
    return click.option("--as", "actor", default=None, help="Acting identity")(fn)


def _print_compliments(title: str, compliments) -> None:
    if not compliments:
        console.print("[yellow]No compliments found.[/]")
        return

    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Likes", justify="right", style="green")
    table.add_column("Message")
    table.add_column("Created")

    for c in compliments:
        table.add_row(
            str(c.id),
            c.giver,
            c.recipient,
            str(c.like_count),
            c.message,
            c.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, envvar="KUDOS_CONFIG",
              type=click.Path(exists=True, dir_okay=False), help="YAML settings file")
@click.pass_context
def main(ctx: click.Context, config_path: str | None):
    """Kudos — a token-incentivized compliment ledger.

    Give compliments, like them, and earn reward units and reputation.
    """
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_settings(config_path)


# ── Actions ──────────────────────────────────────────────────────────


@main.command()
@click.argument("recipient")
@click.argument("message")
@_as_option
@click.pass_context
@_handle_errors
def give(ctx: click.Context, recipient: str, message: str, actor: str | None):
    """Give MESSAGE as a compliment to RECIPIENT."""
    ledger = _ledger(ctx)
    caller = _caller(ctx, actor)
    compliment_id = ledger.give(caller, recipient, message)
    console.print(f"[green]Compliment #{compliment_id} sent to[/] {recipient}")
    console.print(f"  Balance: {ledger.balance_of(caller)}")


@main.command()
@click.argument("compliment_id", type=int)
@_as_option
@click.pass_context
@_handle_errors
def like(ctx: click.Context, compliment_id: int, actor: str | None):
    """Like compliment COMPLIMENT_ID."""
    ledger = _ledger(ctx)
    count = ledger.like(_caller(ctx, actor), compliment_id)
    console.print(f"[green]Liked #{compliment_id}[/] ({count} likes)")


# ── Queries ──────────────────────────────────────────────────────────


@main.command()
@click.option("--limit", "-n", default=10, show_default=True)
@click.pass_context
@_handle_errors
def recent(ctx: click.Context, limit: int):
    """Show the most recent compliments."""
    _print_compliments("Recent compliments", _ledger(ctx).query_recent(limit))


@main.command()
@click.argument("identity")
@click.option("--offset", default=0, show_default=True)
@click.option("--limit", "-n", default=10, show_default=True)
@click.pass_context
@_handle_errors
def given(ctx: click.Context, identity: str, offset: int, limit: int):
    """Show compliments given by IDENTITY."""
    ledger = _ledger(ctx)
    total = ledger.count_by_giver(identity)
    _print_compliments(
        f"Given by {identity} ({total} total)",
        ledger.query_by_giver(identity, offset, limit),
    )


@main.command()
@click.argument("identity")
@click.option("--offset", default=0, show_default=True)
@click.option("--limit", "-n", default=10, show_default=True)
@click.pass_context
@_handle_errors
def received(ctx: click.Context, identity: str, offset: int, limit: int):
    """Show compliments received by IDENTITY."""
    ledger = _ledger(ctx)
    total = ledger.count_by_recipient(identity)
    _print_compliments(
        f"Received by {identity} ({total} total)",
        ledger.query_by_recipient(identity, offset, limit),
    )


@main.command()
@click.argument("identity")
@click.pass_context
def stats(ctx: click.Context, identity: str):
    """Show reputation and counters for IDENTITY."""
    ledger = _ledger(ctx)
    s = ledger.get_user_stats(identity)

    table = Table(title=f"Stats for {identity}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Reputation", str(s.reputation))
    table.add_row("Given", str(s.given))
    table.add_row("Received", str(s.received))
    table.add_row("Balance", str(ledger.balance_of(identity)))
    table.add_row("Moderator", "[green]Y[/]" if s.is_moderator else "N")
    table.add_row("Blacklisted", "[red]Y[/]" if s.is_blacklisted else "N")
    console.print(table)


@main.command()
@click.pass_context
def supply(ctx: click.Context):
    """Show issued supply against the cap."""
    ledger = _ledger(ctx)
    console.print(
        f"Issued: {ledger.total_supply()} / {ledger.settings.max_supply}"
        f"  Compliments: {ledger.get_total_compliments()}"
    )


# ── Tokens ───────────────────────────────────────────────────────────


@main.command()
@click.argument("identity")
@click.pass_context
def balance(ctx: click.Context, identity: str):
    """Show the token balance of IDENTITY."""
    console.print(f"{identity}: {_ledger(ctx).balance_of(identity)}")


@main.command()
@click.argument("recipient")
@click.argument("amount", type=int)
@_as_option
@click.pass_context
@_handle_errors
def transfer(ctx: click.Context, recipient: str, amount: int, actor: str | None):
    """Transfer AMOUNT tokens to RECIPIENT."""
    _ledger(ctx).transfer(_caller(ctx, actor), recipient, amount)
    console.print(f"[green]Sent {amount} to[/] {recipient}")


@main.command()
@click.argument("amount", type=int)
@_as_option
@click.pass_context
@_handle_errors
def burn(ctx: click.Context, amount: int, actor: str | None):
    """Burn AMOUNT of your own tokens."""
    _ledger(ctx).burn(_caller(ctx, actor), amount)
    console.print(f"[green]Burned {amount}[/]")


# ── Administration ───────────────────────────────────────────────────


@main.group()
def admin():
    """Owner and moderator actions."""


@admin.command(name="add-moderator")
@click.argument("identity")
@_as_option
@click.pass_context
@_handle_errors
def add_moderator(ctx: click.Context, identity: str, actor: str | None):
    """Grant moderator rights to IDENTITY (owner only)."""
    _ledger(ctx).add_moderator(_caller(ctx, actor), identity)
    console.print(f"[green]{identity} is now a moderator[/]")


@admin.command(name="remove-moderator")
@click.argument("identity")
@_as_option
@click.pass_context
@_handle_errors
def remove_moderator(ctx: click.Context, identity: str, actor: str | None):
    """Revoke moderator rights from IDENTITY (owner only)."""
    _ledger(ctx).remove_moderator(_caller(ctx, actor), identity)
    console.print(f"[green]{identity} is no longer a moderator[/]")


@admin.command()
@click.argument("identity")
@_as_option
@click.pass_context
@_handle_errors
def blacklist(ctx: click.Context, identity: str, actor: str | None):
    """Block IDENTITY from giving and liking."""
    _ledger(ctx).blacklist_user(_caller(ctx, actor), identity)
    console.print(f"[green]{identity} blacklisted[/]")


@admin.command()
@click.argument("identity")
@_as_option
@click.pass_context
@_handle_errors
def whitelist(ctx: click.Context, identity: str, actor: str | None):
    """Lift the blacklist on IDENTITY."""
    _ledger(ctx).whitelist_user(_caller(ctx, actor), identity)
    console.print(f"[green]{identity} whitelisted[/]")


@admin.command()
@click.argument("compliment_id", type=int)
@_as_option
@click.pass_context
@_handle_errors
def deactivate(ctx: click.Context, compliment_id: int, actor: str | None):
    """Hide compliment COMPLIMENT_ID from every listing."""
    _ledger(ctx).deactivate_compliment(_caller(ctx, actor), compliment_id)
    console.print(f"[green]Compliment #{compliment_id} deactivated[/]")


@admin.command()
@click.argument("recipient")
@click.argument("amount", type=int)
@_as_option
@click.pass_context
@_handle_errors
def mint(ctx: click.Context, recipient: str, amount: int, actor: str | None):
    """Emergency-mint AMOUNT tokens to RECIPIENT (owner only)."""
    _ledger(ctx).emergency_mint(_caller(ctx, actor), recipient, amount)
    console.print(f"[green]Minted {amount} to[/] {recipient}")


@admin.command()
@click.option("--actor", default=None, help="Only actions by this identity")
@click.option("--limit", "-n", default=50, show_default=True)
@click.option("--export", "fmt", type=click.Choice(["json", "csv"]), default=None,
              help="Print the trail in this format instead of a table")
@click.pass_context
def audit(ctx: click.Context, actor: str | None, limit: int, fmt: str | None):
    """Show the administrative audit trail."""
    from kudos.security.audit_log import AuditLogger

    audit_log = AuditLogger(ctx.obj["settings"].home / "audit_logs")
    if fmt:
        click.echo(audit_log.export_events(fmt, actor=actor, limit=limit))
        return

    entries = audit_log.get_events(actor=actor, limit=limit)
    if not entries:
        console.print("[yellow]Audit log is empty.[/]")
        return

    table = Table(title=f"Audit log ({len(entries)} entries)")
    table.add_column("When", style="dim")
    table.add_column("Actor", style="cyan")
    table.add_column("Action")
    table.add_column("Resource")
    for e in entries:
        table.add_row(e.timestamp[:19], e.actor, e.action, f"{e.resource_type}:{e.resource_id}")
    console.print(table)


if __name__ == "__main__":
    main()
