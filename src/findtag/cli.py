#!/usr/bin/env python3

import sys
import asyncio
import logging
import argparse
import httpx
from typing import AsyncIterator, TextIO
from findtag.config import Config, Options, build_options
from findtag.exceptions import (
    ConfigurationError,
    FindTagError,
    MissingDigestError,
)
from findtag.matcher import find_matches
from findtag.tags import select_tags
from findtag.utils.oci_api import (
    get_digest,
    get_token,
    list_tags,
    open_client,
)

PROGRAM = "find-tag"
EPILOG = f"""examples:
  $ {PROGRAM} -n traefik -f 1.7
  $ {PROGRAM} -n node -l 40
  $ {PROGRAM} -n jenkins/jenkins:latest-jdk11
"""


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Find other tags pointing at the same image as a tag.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "-n", dest="image_name", metavar="TEXT",
        help="Image name (Required). Example: org/image:tag",
    )
    parser.add_argument(
        "-r", dest="registry", metavar="TEXT",
        help="Registry URL to use. Default: https://index.docker.io/v2",
    )
    parser.add_argument(
        "-a", dest="registry_auth", metavar="TEXT",
        help="Registry AUTH to use. Default: https://auth.docker.io",
    )
    parser.add_argument(
        "-l", dest="tags_limit", metavar="NUMBER",
        help="Tag limit. Defaults to 25.",
    )
    parser.add_argument(
        "-f", dest="tags_filter", metavar="TEXT",
        help="Filter tag to contain this value",
    )
    parser.add_argument(
        "-v", dest="verbosity", action="count", default=0,
        help="Verbose output, repeat for more (-vvv for debug)",
    )
    parser.add_argument(
        "-h", "--help", dest="help", action="store_true",
        help="Show this help message and exit",
    )
    parser.add_argument("leftovers", nargs="*", help=argparse.SUPPRESS)
    return parser


def setup_logging(verbosity: int) -> None:
    if verbosity >= 3:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        stream=sys.stderr,
        format="%(levelname)s: %(message)s",
        level=level,
        force=True,
    )
    if verbosity < 3:
        logging.getLogger("httpx").setLevel(logging.WARNING)


async def find_tag(
    options: Options, client: httpx.AsyncClient
) -> AsyncIterator[str]:
    image = options.image
    logging.info(f"Using IMAGE_NAME: {image}")
    logging.info(f"Using REGISTRY: {options.registry}")

    token = await get_token(
        client,
        options.registry_auth,
        options.registry_service,
        image.repository,
    )

    selection = select_tags(
        await list_tags(client, options.registry, image.repository, token),
        options.tags_filter,
        options.tags_limit,
    )
    logging.info(
        f"Found Total Tags: {selection.total}, filtered: {selection.filtered}."
    )
    logging.info(f"Limiting Tags to: {options.tags_limit}")
    logging.info("Found Tags:\n" + "\n".join(selection.tags))

    if not (
        target_digest := await get_digest(
            client, options.registry, image.repository, image.tag, token
        )
    ):
        raise MissingDigestError(f"{image}: Image digest not found")

    async def fetch_digest(tag: str) -> str | None:
        return await get_digest(
            client,
            options.registry,
            image.repository,
            tag,
            token,
            ignore_404=True,
        )

    logging.info("Checking for image match..")
    async for tag in find_matches(
        target_digest, selection.tags, fetch_digest, options.request_delay
    ):
        yield tag


async def run(options: Options, out: TextIO) -> None:
    async with open_client(options.timeout) as client:
        async for tag in find_tag(options, client):
            print(tag, file=out, flush=True)


def main(argv: list[str] | None = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbosity)

    if args.help:
        parser.print_help(sys.stderr)
        return 0

    logging.debug(
        f"VERBOSE={args.verbosity}, IMAGE_NAME='{args.image_name}',"
        f" Leftovers: {args.leftovers}"
    )

    try:
        options = build_options(
            Config(),
            image_name=args.image_name,
            registry=args.registry,
            registry_auth=args.registry_auth,
            tags_limit=args.tags_limit,
            tags_filter=args.tags_filter,
            verbosity=args.verbosity,
        )
        logging.debug(
            f"ACTUAL_IMAGE_NAME:{options.image.repository},"
            f" IMAGE_TAG:{options.image.tag}"
        )
        asyncio.run(run(options, sys.stdout))
    except FindTagError as e:
        if isinstance(e, ConfigurationError):
            parser.print_usage(sys.stderr)
        logging.error(f"{PROGRAM}: {e}")
        return 1

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
