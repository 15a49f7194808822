import logging
import re
import sys
from pathlib import Path

import click

from .exceptions import FetchError, ParseError, UnsupportedSiteError
from .logging import setup_logging
from .models import ParsedChordSheet
from .registry import get_adapter
from .transposer import AVAILABLE_KEYS, transpose_content


def _slugify(text: str) -> str:
    """Convert a string to a lowercase hyphenated slug suitable for filenames."""
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)   # drop punctuation
    text = re.sub(r"[\s_]+", "-", text)     # spaces/underscores → hyphens
    text = re.sub(r"-{2,}", "-", text)      # collapse multiple hyphens
    return text.strip("-")


def _default_filename(sheet: ParsedChordSheet) -> str:
    parts = [sheet.metadata.performer_or_version, sheet.metadata.title]
    slug = "-".join(_slugify(p) for p in parts if p)
    return f"{slug or 'cifra'}.txt"


def _render(sheet: ParsedChordSheet, sections: bool) -> str:
    """Return the plain-text output: a metadata header, then the content."""
    meta = sheet.metadata
    header = [
        f"{label}: {value}"
        for label, value in (
            ("Title", meta.title),
            ("Artist", meta.performer_or_version),
            ("Key", meta.original_key),
            ("Photo", meta.artist_photo_url),
        )
        if value
    ]

    if sections:
        body = [f"{s.kind.value:<7} {s.label or '(untitled)'} ({len(s.lines)} lines)"
                for s in sheet.sections]
    else:
        body = [sheet.raw_content]

    parts = header + ([""] if header else []) + body
    return "\n".join(parts) + "\n"


def _key_option(name: str, dest: str, help_text: str):
    return click.option(
        name,
        dest,
        required=True,
        metavar="KEY",
        help=f"{help_text} ({', '.join(AVAILABLE_KEYS)}; flats accepted).",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Log parser diagnostics to stderr.")
def main(verbose: bool) -> None:
    """Fetch, clean and transpose chord sheets ("cifras")."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("url")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Output file path (default: <artist>-<title>.txt)")
@click.option("--stdout", is_flag=True, default=False,
              help="Print to stdout instead of writing a file.")
@click.option("--sections", is_flag=True, default=False,
              help="Print the section outline instead of the content.")
def fetch(url: str, output_path: str | None, stdout: bool, sections: bool) -> None:
    """Download a chord sheet and save its plain content.

    \b
    Supported sites:
      - cifraclub.com.br
    """
    # --- Resolve adapter ---
    try:
        adapter = get_adapter(url)
    except UnsupportedSiteError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Supported sites: cifraclub.com.br", err=True)
        sys.exit(1)

    # --- Fetch + parse ---
    try:
        sheet = adapter.scrape(url)
    except FetchError as exc:
        msg = f"Error: Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        click.echo(msg, err=True)
        sys.exit(1)
    except ParseError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Copy and paste the chord sheet manually instead.", err=True)
        sys.exit(1)

    text = _render(sheet, sections)

    # --- Output ---
    if stdout:
        click.echo(text, nl=False)
        return

    dest = Path(output_path) if output_path else Path(_default_filename(sheet))
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}")


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@_key_option("--from", "from_key", "Key the chord sheet is written in")
@_key_option("--to", "to_key", "Key to transpose to")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write to PATH instead of stdout.")
def transpose(source, from_key: str, to_key: str, output_path: str | None) -> None:
    """Transpose a stored chord sheet (use - for stdin).

    The first non-blank line is treated as the title and left as is.
    """
    text = transpose_content(source.read(), from_key, to_key)
    if output_path:
        Path(output_path).write_text(text, encoding="utf-8")
        click.echo(f"Written to {output_path}")
    else:
        click.echo(text, nl=not text.endswith("\n"))


@main.command()
def keys() -> None:
    """List the keys accepted by transpose, in chromatic order."""
    for key in AVAILABLE_KEYS:
        click.echo(key)
