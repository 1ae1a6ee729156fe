"""
SqueezeCloud CLI entry point.

Resolves track references from the command line.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from squeezecloud import __version__
from squeezecloud.app import SqueezeCloud
from squeezecloud.config import Config, ConfigError, load_config, set_nested
from squeezecloud.errors import ResolverError
from squeezecloud.prefs import PREF_PLAYMETHOD, PreferencesError

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RESOLUTION_ERROR = 2


def setup_logging(level: str = "info") -> None:
    """Configure logging to stdout."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="squeezecloud",
        description="Resolve SoundCloud track references into playable stream URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  squeezecloud soundcloud://123456 --api-key TOKEN
  squeezecloud soundcloud://123456 --playmethod download
  squeezecloud --explode https://soundcloud.com/artist/sets/playlist

Environment Variables:
  SQUEEZECLOUD_API_KEY, SQUEEZECLOUD_PLAYMETHOD, SQUEEZECLOUD_API_BASE
  SQUEEZECLOUD_INSECURE_HTTPS, SQUEEZECLOUD_PREFS_PATH, SQUEEZECLOUD_LOG_LEVEL
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "uri",
        nargs="*",
        help="Track references (soundcloud://<id>)",
    )
    parser.add_argument(
        "--explode",
        action="store_true",
        help="Print playable references for each URI instead of resolving",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("./config.yaml"),
        metavar="PATH",
        help="Path to config file (default: ./config.yaml)",
    )

    catalog_group = parser.add_argument_group("Catalog")
    catalog_group.add_argument(
        "--api-key",
        metavar="TEXT",
        help="SoundCloud OAuth token",
    )
    catalog_group.add_argument(
        "--playmethod",
        choices=["stream", "download"],
        help="Play the stream or the download variant when available",
    )
    catalog_group.add_argument(
        "--api-base",
        metavar="URL",
        help="Catalog API base URL",
    )
    catalog_group.add_argument(
        "--insecure-https",
        action="store_true",
        help="Skip TLS certificate verification",
    )
    catalog_group.add_argument(
        "--prefs",
        type=Path,
        metavar="PATH",
        help="Preferences file (apiKey, playmethod)",
    )

    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        metavar="LEVEL",
        help="Log level: debug, info, warning, error",
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def args_to_dict(args: argparse.Namespace) -> dict:
    """Convert argparse namespace to nested config dict."""
    result: dict = {}

    mappings = {
        "api_key": ("catalog", "api_key"),
        "playmethod": ("catalog", "playmethod"),
        "api_base": ("catalog", "api_base"),
        "insecure_https": ("catalog", "insecure_https"),
        "prefs": ("prefs", "path"),
        "log_level": ("logging", "level"),
    }

    for arg_name, path in mappings.items():
        value = getattr(args, arg_name, None)
        if value is None:
            continue
        # Only set insecure_https if explicitly requested
        if arg_name == "insecure_https" and not value:
            continue
        if isinstance(value, Path):
            value = str(value)
        set_nested(result, path, value)

    return result


def log_config(config: Config) -> None:
    """Log configuration summary (without sensitive data)."""
    logger.info(f"Catalog: {config.catalog.api_base}")
    if config.prefs.path:
        logger.info(f"Preferences: {config.prefs.path}")
    if config.catalog.insecure_https:
        logger.info("TLS verification: disabled")


async def run_resolve(config: Config, uris: list[str], explode: bool) -> int:
    """
    Resolve each URI and print the results as JSON.

    Returns:
        Exit code
    """
    results = []
    exit_code = EXIT_SUCCESS

    async with SqueezeCloud(config) as app:
        logger.info(f"Play method: {app.prefs.get(PREF_PLAYMETHOD)}")
        for uri in uris:
            if explode:
                results.append({"uri": uri, "tracks": await app.explode_playlist(uri)})
                continue
            try:
                resolved = await app.resolve(uri)
            except ResolverError as e:
                results.append(
                    {
                        "uri": uri,
                        "error": e.kind.value,
                        "message": e.host_string,
                        "detail": e.detail,
                    }
                )
                exit_code = EXIT_RESOLUTION_ERROR
                continue
            results.append(
                {
                    "uri": uri,
                    "url": resolved.url,
                    "duration": resolved.duration,
                    "content_type": resolved.content_type,
                    "metadata": resolved.metadata.to_dict(),
                }
            )

    print(json.dumps(results, indent=2))
    return exit_code


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code: 0=success, 1=config error, 2=resolution error
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("warning")

    try:
        config = load_config(args.config, args_to_dict(args))
        setup_logging(config.logging.level)
        log_config(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    if not args.uri:
        parser.print_usage()
        return EXIT_CONFIG_ERROR

    try:
        return asyncio.run(run_resolve(config, args.uri, args.explode))
    except PreferencesError as e:
        logger.error(f"Preferences error: {e}")
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
