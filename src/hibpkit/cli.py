"""
Command line interface for Have I Been Pwned lookups.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import json
import logging
from dataclasses import replace

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from hibpkit import __version__
from hibpkit.client import HIBPService, is_email
from hibpkit.config import ServiceConfig
from hibpkit.errors import ErrorKind, Result, ServiceError
from hibpkit.models import RiskLevel
from hibpkit.urls import HIBP_BASE_URL, PWNED_PASSWORDS_BASE_URL

console = Console()


def risk_color(risk: RiskLevel) -> str:
    """Get color for risk level."""
    colors = {
        RiskLevel.SAFE: "green",
        RiskLevel.LOW: "yellow",
        RiskLevel.MEDIUM: "orange3",
        RiskLevel.HIGH: "red",
        RiskLevel.CRITICAL: "bold red",
    }
    return colors.get(risk, "white")


def fail(error: ServiceError) -> None:
    """Report a classified error and exit."""
    console.print(f"[red]Error: {error}[/red]")
    if error.kind == ErrorKind.RATE_LIMITED and error.retry_after is None:
        console.print("Rate limit exceeded; wait before trying again.")
    raise SystemExit(1)


def run_query(ctx: click.Context, description: str, query) -> Result:
    """Run one service query with a spinner and return its Result."""
    config: ServiceConfig = ctx.obj["config"]

    async def _run():
        async with HIBPService(config=config) as service:
            return await query(service)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return asyncio.run(_run())


def breach_table(title: str, breaches) -> Table:
    table = Table(title=title)
    table.add_column("Breach", style="cyan")
    table.add_column("Date", style="yellow")
    table.add_column("Accounts", justify="right")
    table.add_column("Domain")
    table.add_column("Data Exposed")
    table.add_column("Verified", justify="center")

    for breach in sorted(breaches, key=lambda b: b.breach_date, reverse=True):
        data_types = ", ".join(breach.data_classes[:3])
        if len(breach.data_classes) > 3:
            data_types += f" (+{len(breach.data_classes) - 3})"

        table.add_row(
            breach.title,
            breach.breach_date.strftime("%Y-%m-%d"),
            f"{breach.pwn_count:,}",
            breach.domain or "-",
            data_types,
            "[green]Yes[/green]" if breach.is_verified else "[dim]No[/dim]",
        )
    return table


@click.group()
@click.version_option(version=__version__, prog_name="hibpkit")
@click.option("--user-agent", envvar="HIBP_USER_AGENT", help="User-Agent sent to the service")
@click.option("--base-url", envvar="HIBP_BASE_URL", help="Alternate host for breach and paste queries")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(
    ctx: click.Context,
    user_agent: str | None,
    base_url: str | None,
    verbose: bool,
) -> None:
    """Have I Been Pwned - breach checking commands.

    Check accounts and passwords against known data breaches.
    Uses the HIBP API (https://haveibeenpwned.com).

    For account and paste lookups, set HIBP_API_KEY environment variable.
    Password checks use k-anonymity and don't require an API key.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    ctx.ensure_object(dict)
    config = ServiceConfig.from_env()
    if user_agent:
        config = replace(config, user_agent=user_agent)
    if base_url:
        config = replace(config, base_url=base_url)
    ctx.obj["config"] = config


def with_api_key(ctx: click.Context, api_key: str | None) -> None:
    if not api_key:
        console.print("[red]HIBP API key required. Set HIBP_API_KEY or use --api-key[/red]")
        console.print("Get a key at: https://haveibeenpwned.com/API/Key")
        raise SystemExit(1)
    ctx.obj["config"] = replace(ctx.obj["config"], api_key=api_key)


# =============================================================================
# Breaches
# =============================================================================

@main.command("breaches")
@click.option("--domain", "-d", help="Filter by domain")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def list_breaches(ctx: click.Context, domain: str | None, json_output: bool) -> None:
    """List breaches in the HIBP database.

    No API key required.

    Example:
        hibpkit breaches
        hibpkit breaches --domain adobe.com
    """
    result = run_query(
        ctx,
        "Fetching breach database...",
        lambda service: service.get_all_breaches(domain),
    )
    if not result.ok:
        fail(result.error)
    breaches = result.value

    if json_output:
        click.echo(json.dumps([b.to_dict() for b in breaches], indent=2))
        return

    if not breaches:
        console.print("[yellow]No breaches found[/yellow]")
        return

    total_accounts = sum(b.pwn_count for b in breaches)
    console.print(f"\n[bold]Total Breaches:[/bold] {len(breaches)}")
    console.print(f"[bold]Total Compromised Accounts:[/bold] {total_accounts:,}\n")
    console.print(breach_table("Known Data Breaches", breaches))


@main.command("account")
@click.argument("account")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.option("--unverified", is_flag=True, help="Include unverified breaches")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_account(
    ctx: click.Context,
    account: str,
    api_key: str | None,
    unverified: bool,
    json_output: bool,
) -> None:
    """Check if an account has been in any data breaches.

    Requires HIBP API key (set HIBP_API_KEY or use --api-key).

    Example:
        hibpkit account user@example.com
    """
    with_api_key(ctx, api_key)

    result = run_query(
        ctx,
        f"Checking {account}...",
        lambda service: service.get_breaches(account, unverified),
    )
    if not result.ok and result.error.kind == ErrorKind.NOT_FOUND:
        result = Result.success([])
    if not result.ok:
        fail(result.error)
    breaches = result.value

    if json_output:
        click.echo(json.dumps([b.to_dict() for b in breaches], indent=2))
        return

    if not breaches:
        console.print(Panel(
            f"[green]Good news![/green] No breaches found for [cyan]{account}[/cyan]",
            title="Breach Check Result"
        ))
        return

    data_types = sorted({dc for b in breaches for dc in b.data_classes})
    console.print(Panel(
        f"[red]Oh no![/red] [cyan]{account}[/cyan] found in [bold red]{len(breaches)}[/bold red] breach(es)\n\n"
        f"Verified breaches: {sum(1 for b in breaches if b.is_verified)}\n"
        f"Sensitive breaches: {sum(1 for b in breaches if b.is_sensitive)}",
        title="Breach Check Result"
    ))
    if data_types:
        console.print("\n[bold]Compromised Data Types:[/bold]")
        console.print(", ".join(data_types))
    console.print(breach_table("\nBreach Details", breaches))


# =============================================================================
# Pastes
# =============================================================================

@main.command("pastes")
@click.argument("email")
@click.option("--api-key", "-k", envvar="HIBP_API_KEY", help="HIBP API key")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_pastes(
    ctx: click.Context,
    email: str,
    api_key: str | None,
    json_output: bool,
) -> None:
    """Check if an email has appeared in any pastes.

    Requires HIBP API key.

    Example:
        hibpkit pastes user@example.com
    """
    if not is_email(email):
        console.print(f"[red]Not an email address: {email}[/red]")
        raise SystemExit(1)
    with_api_key(ctx, api_key)

    result = run_query(
        ctx,
        f"Checking pastes for {email}...",
        lambda service: service.get_pastes(email),
    )
    if not result.ok and result.error.kind == ErrorKind.NOT_FOUND:
        result = Result.success([])
    if not result.ok:
        fail(result.error)
    pastes = result.value

    if json_output:
        click.echo(json.dumps([p.to_dict() for p in pastes], indent=2))
        return

    if not pastes:
        console.print(f"[green]No pastes found for {email}[/green]")
        return

    console.print(f"\n[red]Found in {len(pastes)} paste(s)[/red]\n")

    table = Table(title="Paste Appearances")
    table.add_column("Source", style="cyan")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Date", style="yellow")
    table.add_column("Email Count", justify="right")
    table.add_column("URL")

    for paste in pastes:
        date_str = paste.date.strftime("%Y-%m-%d") if paste.date else "Unknown"
        table.add_row(
            paste.source,
            paste.identifier[:20],
            (paste.title or "Untitled")[:30],
            date_str,
            f"{paste.email_count:,}",
            paste.url or "-",
        )

    console.print(table)


# =============================================================================
# Password Checking
# =============================================================================

@main.command("password")
@click.option("--password", "-p", help="Password to check (or prompts securely)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_password(
    ctx: click.Context,
    password: str | None,
    json_output: bool,
) -> None:
    """Check if a password has been exposed in data breaches.

    Uses k-anonymity - only the first 5 characters of the SHA-1 hash
    are sent to the API. Your password never leaves your system.

    Example:
        hibpkit password
    """
    if password is None:
        password = click.prompt("Password to check", hide_input=True, default="", show_default=False)

    result = run_query(
        ctx,
        "Checking password...",
        lambda service: service.check_password(password),
    )
    if not result.ok:
        fail(result.error)
    occurrences = result.value
    risk = RiskLevel.for_occurrences(occurrences)

    if json_output:
        click.echo(json.dumps({
            "is_pwned": occurrences > 0,
            "occurrences": occurrences,
            "risk_level": risk.value,
        }, indent=2))
        return

    color = risk_color(risk)
    if occurrences == 0:
        console.print(Panel(
            f"[green]Good news![/green] This password has NOT been found in any known data breaches.\n\n"
            f"Risk Level: [{color}]{risk.value.upper()}[/{color}]",
            title="Password Check Result"
        ))
    else:
        console.print(Panel(
            f"[red]Warning![/red] This password has been seen [bold]{occurrences:,}[/bold] times in data breaches!\n\n"
            f"Risk Level: [{color}]{risk.value.upper()}[/{color}]",
            title="Password Check Result"
        ))


# =============================================================================
# Configuration
# =============================================================================

@main.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show HIBP configuration and API key status."""
    config: ServiceConfig = ctx.obj["config"]

    table = Table(title="HIBP Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("User Agent", config.user_agent)
    table.add_row(
        "API Key",
        f"[green]Set ({config.api_key[:8]}...)[/green]" if config.api_key else "[red]Not set[/red]"
    )
    table.add_row("API Base URL", config.base_url or HIBP_BASE_URL)
    table.add_row("Password API URL", PWNED_PASSWORDS_BASE_URL)
    table.add_row("Timeout", f"{config.timeout:g}s")

    console.print(table)

    if not config.api_key:
        console.print("\n[yellow]To enable account and paste lookups:[/yellow]")
        console.print("  export HIBP_API_KEY=your_api_key")
        console.print("  Get a key at: https://haveibeenpwned.com/API/Key")


if __name__ == "__main__":
    main()
