"""
Command-line client for the goto service.

Usage:
    goto <shorturl>                 print and open the target of a short URL
    goto <shorturl> <target>        register a new short URL
    goto -f <shorturl> <target>     register, or replace an existing one

Defaults are read from ~/.goto/config.yml, which is created on first use.
"""

import argparse
import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

import yaml
from pydantic import BaseModel, ValidationError

from . import __version__
from .client import DEFAULT_API_URL, CliError, GotoClient, GotoError


DEFAULT_CONFIG_PATH = Path.home() / ".goto" / "config.yml"


class ClientConfig(BaseModel):
    """Persistent CLI defaults."""

    api_url: Optional[str] = None
    force_replace: Optional[bool] = None
    silent: Optional[bool] = None
    no_browser: Optional[bool] = None


def default_client_config() -> ClientConfig:
    return ClientConfig(
        api_url=DEFAULT_API_URL,
        force_replace=False,
        silent=False,
        no_browser=False,
    )


def open_or_create_config(path: Path) -> ClientConfig:
    """Read the CLI config file, writing defaults into it when empty.

    Raises:
        CliError: If the file cannot be opened, read, written or parsed
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a+", encoding="utf-8") as f:
            f.seek(0)
            content = f.read()
            if not content.strip():
                config = default_client_config()
                f.write(yaml.safe_dump(config.model_dump(), sort_keys=False))
                return config
    except OSError as e:
        raise CliError(f"open config file: {e}") from e

    try:
        return ClientConfig.model_validate(yaml.safe_load(content) or {})
    except (yaml.YAMLError, ValidationError) as e:
        raise CliError(f"parse config data: {e}") from e


@dataclass
class CliOptions:
    """Effective options once flags and config file are merged."""

    shorturl: str
    target: Optional[str]
    always_replace: bool
    verbose: bool
    open_browser: bool

    @classmethod
    def from_args(cls, args: argparse.Namespace, config: ClientConfig) -> "CliOptions":
        # a flag set on either side wins
        return cls(
            shorturl=args.shorturl,
            target=args.target,
            always_replace=args.force_replace or bool(config.force_replace),
            verbose=not (args.silent or bool(config.silent)),
            open_browser=not (args.no_browser or bool(config.no_browser)),
        )


def get_api_url(args: argparse.Namespace, config: ClientConfig) -> str:
    """API URL from flags, then config file, then the built-in default."""
    return args.api_url or config.api_url or DEFAULT_API_URL


def display_location(location: str, verbose: bool, out: TextIO) -> None:
    if verbose:
        out.write(f"redirecting to {location}\n")


def run(options: CliOptions, client: GotoClient, out: TextIO = sys.stdout) -> None:
    """Execute one CLI invocation against the API."""
    if options.target is not None:
        if options.always_replace:
            client.update_url(options.shorturl, options.target)
        else:
            client.create_new(options.shorturl, options.target)
        return

    location = client.get_long_url(options.shorturl)
    display_location(location, options.verbose, out)
    if options.open_browser:
        webbrowser.open(location)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="goto", description="Create shortened URLs")
    parser.add_argument("shorturl", help="Shortened URL")
    parser.add_argument("target", nargs="?", help="URL to shorten")
    parser.add_argument(
        "-f", "--force",
        dest="force_replace",
        action="store_true",
        help="Create the short URL, or if it already exists, update it instead",
    )
    parser.add_argument("--api", dest="api_url", help="Base URL of the goto API")
    parser.add_argument("-s", "--silent", action="store_true", help="Don't print redirections")
    parser.add_argument(
        "-n", "--no-open-browser",
        dest="no_browser",
        action="store_true",
        help="Don't open the browser",
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help=argparse.SUPPRESS)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = open_or_create_config(args.config)
        options = CliOptions.from_args(args, config)
        with GotoClient(get_api_url(args, config)) as client:
            run(options, client)
    except GotoError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
