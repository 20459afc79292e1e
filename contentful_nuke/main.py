import argparse
import asyncio
import os
import sys
from typing import Mapping, Optional, Sequence

from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ContentfulClient
from .errors import ContentfulNukeError
from .models import DEFAULT_PAGE_SIZE
from .orchestrator import Orchestrator, RunOptions, print_summary
from .progress import Colors

TRUTHY = {"1", "true", "yes", "y", "on"}


def env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in TRUTHY


async def confirm_prompt(message: str) -> bool:
    answer = await asyncio.to_thread(input, f"{message} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def build_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    environ = os.environ if environ is None else environ
    parser = argparse.ArgumentParser(
        prog="contentful-nuke",
        description="Dangerous: delete entries (and optionally content types "
        "and assets) from a Contentful space environment.",
    )
    parser.add_argument(
        "--space-id",
        default=environ.get("SPACE_ID", ""),
        help="Contentful space id (or set SPACE_ID)",
    )
    parser.add_argument(
        "--env",
        default=environ.get("ENV") or "master",
        help="Contentful environment (or set ENV, default: master)",
    )
    parser.add_argument(
        "--accesstoken",
        default=environ.get("ACCESSTOKEN")
        or environ.get("CONTENTFUL_MANAGEMENT_TOKEN", ""),
        help="Contentful management token (or set ACCESSTOKEN)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=environ.get("BATCH_SIZE", str(DEFAULT_PAGE_SIZE)),
        help=f"Number of parallel Contentful requests (default: {DEFAULT_PAGE_SIZE})",
    )
    parser.add_argument(
        "--content-type",
        default=environ.get("CONTENT_TYPE", ""),
        help="Only delete entries of this content type",
    )
    parser.add_argument(
        "--delete-content-types",
        action="store_true",
        default=env_flag(environ, "DELETE_CONTENT_TYPES"),
        help="Delete content types as well",
    )
    parser.add_argument(
        "--assets",
        action="store_true",
        default=env_flag(environ, "ASSETS"),
        help="Delete assets as well",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        default=env_flag(environ, "YES"),
        help="Auto-confirm delete prompts",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=env_flag(environ, "VERBOSE"),
        help="Print every unpublish and delete",
    )
    parser.add_argument(
        "--base-url",
        default=environ.get("CONTENTFUL_BASE_URL", DEFAULT_BASE_URL),
        help=f"API base URL (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds before a single API call is abandoned (default: {DEFAULT_TIMEOUT})",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> RunOptions:
    return RunOptions(
        space_id=args.space_id,
        access_token=args.accesstoken,
        environment_id=args.env or "master",
        batch_size=args.batch_size,
        content_type=args.content_type,
        delete_content_types=args.delete_content_types,
        delete_assets=args.assets,
        yes=args.yes,
        verbose=args.verbose,
        base_url=args.base_url,
        timeout=args.timeout,
    )


async def run_nuke(options: RunOptions) -> int:
    options.validate()
    async with ContentfulClient(
        options.access_token, base_url=options.base_url, timeout=options.timeout
    ) as client:
        report = await Orchestrator(client, options, confirm_prompt).run()

    if report is None:
        return 0
    print_summary(report)
    return 1 if report.any_failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run_nuke(options_from_args(args)))
    except ContentfulNukeError as error:
        print(f"{Colors.RED}Error: {error}{Colors.RESET}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
