# file: phonedial/cli.py
"""
phonedial CLI.

Commands:
  - lookup: parse a number, show its country, display format and local time
  - time: local time and business-hours status for a time zone
  - search / common: browse the country table
  - link: WhatsApp click-to-chat link for a number
  - history: list, show, delete, clear or export past lookups
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import click
from pydantic import ValidationError

from phonedial import __version__
from phonedial.config import PhonedialSettings, load_settings
from phonedial.core.formatter import (
    GroupingTableError,
    NumberFormatter,
    default_formatter,
    load_grouping_table,
)
from phonedial.core.localtime import LocalTimeInfo, report_local_time
from phonedial.core.parser import ParseResult, parse_phone_number
from phonedial.history import HistoryEntry, SQLiteHistoryStore
from phonedial.io.links import whatsapp_link
from phonedial.io.report import export_history_csv, export_json, lookup_report
from phonedial.logging_config import configure_logging
from phonedial.reference import (
    CountryRecord,
    CountryTable,
    ReferenceDataError,
    default_country_table,
    load_country_table,
)

logger = logging.getLogger(__name__)


class _Runtime:
    """Settings plus lazily loaded tables, shared by all commands."""

    def __init__(self, settings: PhonedialSettings) -> None:
        self.settings = settings
        self._table: CountryTable | None = None
        self._formatter: NumberFormatter | None = None

    @property
    def table(self) -> CountryTable:
        if self._table is None:
            path = self.settings.countries_path
            try:
                self._table = load_country_table(path) if path else default_country_table()
            except ReferenceDataError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._table

    @property
    def formatter(self) -> NumberFormatter:
        if self._formatter is None:
            path = self.settings.grouping_path
            try:
                self._formatter = (
                    NumberFormatter(load_grouping_table(path)) if path else default_formatter()
                )
            except GroupingTableError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._formatter

    def history(self) -> SQLiteHistoryStore:
        return SQLiteHistoryStore(
            self.settings.history_path,
            capacity=self.settings.history_capacity,
            table=self.table,
        )

    def local_time(self, tz_name: str) -> LocalTimeInfo:
        return report_local_time(
            tz_name,
            business_start=self.settings.business_start_hour,
            business_end=self.settings.business_end_hour,
        )


@contextmanager
def _history_errors() -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, OSError) as exc:
        raise click.ClickException(f"History database error: {exc}") from exc


@contextmanager
def _write_errors(path: Path) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise click.ClickException(f"Cannot write {path}: {exc}") from exc


def _country_line(c: CountryRecord) -> str:
    return f"{c.flag} {c.code:<3} {c.dial_code:<6} {c.name_en} ({c.name})"


def _human_text(result: ParseResult, time_info: LocalTimeInfo | None, link: str | None) -> str:
    lines: list[str] = []
    country = result.country
    lines.append(f"Number:     {result.display_number}")
    lines.append(f"Canonical:  {result.formatted_number}")
    if country is not None:
        lines.append(f"Country:    {_country_line(country)}")
        lines.append(f"Capital:    {country.capital}")
        lines.append(f"Currency:   {country.currency} ({country.currency_name})")
        lines.append(f"Languages:  {', '.join(country.languages)}")
        lines.append(f"Region:     {country.region}")
    if result.alternates:
        lines.append("Shared dial code:")
        for alt in result.alternates:
            lines.append(f"  - {_country_line(alt)}")
    if not result.plausible_length:
        lines.append(
            f"Note:       national number has an unusual length ({len(result.national_number)})"
        )
    if time_info is not None:
        lines.append("")
        lines.append(f"Time zone:  {time_info.timezone} ({time_info.utc_offset})")
        lines.append(
            f"Local time: {time_info.current_time} {time_info.date} {time_info.day_of_week}"
        )
        lines.append(f"Status:     {time_info.status}")
    if link:
        lines.append("")
        lines.append(f"WhatsApp:   {link}")
    return "\n".join(lines) + "\n"


def _entry_line(entry: HistoryEntry) -> str:
    r = entry.result
    who = r.country.name_en if r.country else ""
    return f"{entry.id}  {r.display_number or entry.input}  {who}"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config path.",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """International phone number lookup."""

    try:
        settings = load_settings(yaml_path=config_path)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    configure_logging(level=settings.log_level, json_logging=settings.json_logging)
    ctx.obj = _Runtime(settings)


@main.command("lookup")
@click.argument("number", type=str)
@click.option("--json", "as_json", is_flag=True, help="Print a JSON report to stdout.")
@click.option("--message", default=None, help="Prefilled WhatsApp message.")
@click.option("--no-history", is_flag=True, help="Do not record this lookup.")
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the JSON report to a file.",
)
@click.pass_obj
def lookup_cmd(
    rt: _Runtime,
    number: str,
    as_json: bool,
    message: str | None,
    no_history: bool,
    report_path: Path | None,
) -> None:
    """Look up a phone number: country, display format, local time, WhatsApp link."""

    result = parse_phone_number(number, table=rt.table, formatter=rt.formatter)
    if not result.success or result.country is None:
        if as_json:
            report = lookup_report(result)
            click.echo(json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False))
        raise click.ClickException(f"{result.error}: {result.original_input!r}")

    time_info = rt.local_time(result.country.timezone)
    link = whatsapp_link(result.formatted_number, message or rt.settings.default_message)

    if rt.settings.history_enabled and not no_history:
        try:
            rt.history().append(result)
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Could not record lookup in history: %s", exc)

    report = lookup_report(result, time_info=time_info, link=link)
    if report_path is not None:
        with _write_errors(report_path):
            export_json(report, report_path)

    if as_json:
        click.echo(json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False))
    else:
        click.echo(_human_text(result, time_info, link), nl=False)


@main.command("time")
@click.argument("timezone_name", metavar="TIMEZONE", type=str)
@click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout.")
@click.pass_obj
def time_cmd(rt: _Runtime, timezone_name: str, as_json: bool) -> None:
    """Show local time and business-hours status for an IANA time zone."""

    info = rt.local_time(timezone_name)
    if not info.available:
        raise click.ClickException(f"Unknown time zone: {timezone_name}")
    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2, sort_keys=True))
        return
    click.echo(f"{info.timezone} ({info.utc_offset})")
    click.echo(f"{info.current_time} {info.date} {info.day_of_week}")
    click.echo(info.status)


def _echo_countries(countries: list[CountryRecord], as_json: bool) -> None:
    if as_json:
        click.echo(
            json.dumps([c.to_dict() for c in countries], indent=2, ensure_ascii=False)
        )
        return
    if not countries:
        click.echo("No matches.")
        return
    for c in countries:
        click.echo(_country_line(c))


@main.command("search")
@click.argument("query", type=str)
@click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout.")
@click.pass_obj
def search_cmd(rt: _Runtime, query: str, as_json: bool) -> None:
    """Search countries by name, English name, dial code or country code."""

    _echo_countries(rt.table.search(query), as_json)


@main.command("common")
@click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout.")
@click.pass_obj
def common_cmd(rt: _Runtime, as_json: bool) -> None:
    """List frequently used trade countries."""

    _echo_countries(rt.table.common(), as_json)


@main.command("link")
@click.argument("number", type=str)
@click.option("--message", default=None, help="Prefilled WhatsApp message.")
@click.pass_obj
def link_cmd(rt: _Runtime, number: str, message: str | None) -> None:
    """Print a WhatsApp click-to-chat link for a number."""

    result = parse_phone_number(number, table=rt.table, formatter=rt.formatter)
    if not result.success:
        raise click.ClickException(f"{result.error}: {result.original_input!r}")
    click.echo(whatsapp_link(result.formatted_number, message or rt.settings.default_message))


@main.group("history")
def history_group() -> None:
    """Inspect or manage past lookups."""


@history_group.command("list")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N entries.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout.")
@click.pass_obj
def history_list_cmd(rt: _Runtime, limit: int | None, as_json: bool) -> None:
    """List past lookups, newest first."""

    with _history_errors():
        entries = rt.history().entries(limit)
    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return
    if not entries:
        click.echo("History is empty.")
        return
    for entry in entries:
        click.echo(_entry_line(entry))


@history_group.command("show")
@click.argument("entry_id", type=str)
@click.pass_obj
def history_show_cmd(rt: _Runtime, entry_id: str) -> None:
    """Show one history entry as JSON."""

    with _history_errors():
        entry = rt.history().get(entry_id)
    if entry is None:
        raise click.ClickException(f"No history entry {entry_id}")
    payload: dict[str, Any] = entry.to_dict()
    click.echo(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


@history_group.command("delete")
@click.argument("entry_id", type=str)
@click.pass_obj
def history_delete_cmd(rt: _Runtime, entry_id: str) -> None:
    """Delete one history entry."""

    with _history_errors():
        removed = rt.history().delete(entry_id)
    if not removed:
        raise click.ClickException(f"No history entry {entry_id}")
    click.echo(f"Deleted {entry_id}")


@history_group.command("clear")
@click.confirmation_option(prompt="Delete all history entries?")
@click.pass_obj
def history_clear_cmd(rt: _Runtime) -> None:
    """Delete every history entry."""

    with _history_errors():
        count = rt.history().clear()
    click.echo(f"Deleted {count} entries")


@history_group.command("export")
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"], case_sensitive=False),
    default="csv",
    show_default=True,
)
@click.pass_obj
def history_export_cmd(rt: _Runtime, output_path: Path, fmt: str) -> None:
    """Export history to CSV or JSON."""

    with _history_errors():
        entries = rt.history().entries()
    with _write_errors(output_path):
        if fmt.lower() == "json":
            export_json([e.to_dict() for e in entries], output_path)
        else:
            export_history_csv(entries, output_path)
    click.echo(str(output_path))
