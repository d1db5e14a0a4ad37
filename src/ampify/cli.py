"""Command-line interface for ampify."""

import shutil
from pathlib import Path

import click

from .config import Config

DEFAULT_CONFIG = """\
[sanitizer]
fallback_width = 600
fallback_height = 400
content_max_width = 600
anim_extensions = [".gif"]

[extractor]
enabled = true
timeout = 15.0
max_workers = 4
base_url = ""
cache = true

[embeds]
enabled = ["imgur"]
"""


@click.group()
@click.version_option(package_name="ampify")
def main():
    """ampify - Convert HTML images and embeds to AMP markup."""
    pass


@main.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing config")
def init(force: bool):
    """Create .ampify/config.toml with default settings."""
    config_file = Path.cwd() / ".ampify" / "config.toml"

    if config_file.exists() and not force:
        click.echo("Error: .ampify/config.toml already exists", err=True)
        click.echo("Use --force to overwrite", err=True)
        raise SystemExit(1)

    config_file.parent.mkdir(exist_ok=True)
    config_file.write_text(DEFAULT_CONFIG)
    click.echo(f"Created {config_file}")


@main.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the result here (single input only)",
)
@click.option("--in-place", "-i", is_flag=True, help="Rewrite input files")
@click.option("--no-fetch", is_flag=True, help="Never download images to size them")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def sanitize(
    files: tuple[Path, ...],
    output: Path | None,
    in_place: bool,
    no_fetch: bool,
    verbose: bool,
):
    """Convert <img> tags in HTML files to <amp-img>/<amp-anim>."""
    from .logging import setup_logging
    from .pipeline import build_extractor, process_html_file, sanitize_document

    setup_logging(verbose=verbose)

    if output and in_place:
        click.echo("Error: --output and --in-place are mutually exclusive", err=True)
        raise SystemExit(1)
    if output and len(files) > 1:
        click.echo("Error: --output requires a single input file", err=True)
        raise SystemExit(1)

    config = Config.find_and_load()
    extractor = build_extractor(config, fetch=not no_fetch)

    if in_place or output:
        modified_count = 0
        for html_file in files:
            if process_html_file(html_file, config, extractor, output=output):
                modified_count += 1
        if verbose:
            click.echo(f"{modified_count} of {len(files)} files modified")
        return

    for html_file in files:
        content = html_file.read_text(encoding="utf-8")
        result = sanitize_document(content, config=config, extractor=extractor)
        click.echo(result.html, nl=False)


@main.command()
@click.argument("url")
@click.option("--html", default="", help="oEmbed HTML returned by the provider")
@click.option("--width", type=int, default=None, help="Author width")
@click.option("--height", type=int, default=None, help="Author height")
def embed(url: str, html: str, width: int | None, height: int | None):
    """Rewrite one oEmbed result with the enabled embed handlers."""
    from .pipeline import render_embed

    attributes = {}
    if width:
        attributes["width"] = str(width)
    if height:
        attributes["height"] = str(height)

    config = Config.find_and_load()
    click.echo(render_embed(url, html, attributes, config=config))


@main.command()
def clean():
    """Remove the image dimension cache."""
    cache_dir = Config.find_and_load().get_cache_dir()

    if cache_dir.exists():
        shutil.rmtree(cache_dir)
        click.echo(f"Removed {cache_dir}")
    else:
        click.echo("Nothing to clean")


if __name__ == "__main__":
    main()
