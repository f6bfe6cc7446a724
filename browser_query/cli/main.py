"""
CLI entrypoint.

doctor: print the effective settings.
find:   open a session, navigate, run one ElementQuery and print what matched.
"""

from __future__ import annotations

import asyncio
from enum import Enum

import typer
from rich.console import Console
from rich.table import Table

from ..client.element import WebElement
from ..client.session import WebDriver, default_capabilities
from ..core.errors import QueryError, WebDriverError
from ..core.logging import configure_logging
from ..core.settings import settings
from ..query.locator import By, LocatorKind
from ..query.poller import FixedTimeout, NoWait

app = typer.Typer(help="browser-query CLI")
console = Console()


class Mode(str, Enum):
    first = "first"
    single = "single"
    all = "all"
    all_required = "all_required"
    not_exists = "not_exists"


@app.callback()
def _setup(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="DEBUG, INFO, ..."),
    log_json: bool = typer.Option(settings.log_json, "--log-json/--no-log-json"),
) -> None:
    configure_logging(log_level, json_format=log_json)


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm CLI is usable."""
    console.print("[bold green]browser-query[/] environment")
    console.print(f"- server:   {settings.server_url}")
    console.print(f"- browser:  {settings.browser_name} (headless: {settings.headless})")
    console.print(f"- request timeout: {settings.request_timeout_seconds}s")
    console.print(
        f"- default poller:  timeout={settings.query_timeout_seconds}s "
        f"interval={settings.query_interval_seconds}s"
    )


@app.command("find")
def find(
    url: str = typer.Argument(..., help="Page to open"),
    selector: str = typer.Argument(..., help="Locator query string"),
    by: LocatorKind = typer.Option(LocatorKind.CSS, "--by", help="Locator kind"),
    mode: Mode = typer.Option(Mode.first, "--mode", help="Query terminal"),
    timeout: float = typer.Option(
        settings.query_timeout_seconds, "--timeout", help="Seconds; 0 means a single attempt"
    ),
    interval: float = typer.Option(settings.query_interval_seconds, "--interval"),
    desc: str = typer.Option("", "--desc", help="Description used in error messages"),
    displayed: bool = typer.Option(False, "--displayed", help="Only match displayed elements"),
    server_url: str = typer.Option(settings.server_url, "--server", help="WebDriver server URL"),
) -> None:
    """
    Run one element query against a live WebDriver server.
    Exits 1 when the query itself fails, 2 on protocol/transport errors.
    """

    async def _describe(elements: list[WebElement]) -> list[tuple[str, str, str]]:
        rows = []
        for elem in elements:
            text = await elem.text()
            rows.append(
                (
                    elem.element_id,
                    await elem.tag_name(),
                    (text[:80] + "…") if len(text) > 80 else text,
                )
            )
        return rows

    async def _run() -> list[tuple[str, str, str]]:
        driver = await WebDriver.create(server_url, default_capabilities())
        try:
            await driver.goto(url)
            poller = NoWait() if timeout <= 0 else FixedTimeout(timeout=timeout, interval=interval)
            query = driver.query(By(by, selector)).with_poller(poller).desc(desc)
            if displayed:
                query = query.and_displayed()

            if mode is Mode.first:
                elements = [await query.first()]
            elif mode is Mode.single:
                elements = [await query.single()]
            elif mode is Mode.all:
                elements = await query.all()
            elif mode is Mode.all_required:
                elements = await query.all_required()
            else:
                await query.not_exists()
                elements = []
            # element details must be read while the session is still open
            return await _describe(elements)
        finally:
            await driver.quit()

    try:
        rows = asyncio.run(_run())
    except QueryError as e:
        typer.secho(f"[find] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except WebDriverError as e:
        typer.secho(f"[find] webdriver error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    if mode is Mode.not_exists:
        typer.secho("[find] no element matched", fg=typer.colors.GREEN)
        return

    table = Table(title="Matches", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("element id")
    table.add_column("tag")
    table.add_column("text")
    for i, (element_id, tag, text) in enumerate(rows, start=1):
        table.add_row(str(i), element_id, tag, text)
    console.print(table)
    typer.secho(f"[find] {len(rows)} element(s) matched", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
