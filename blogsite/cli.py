"""Command-line interface for blogsite."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from . import __version__
from .build import BuildContext, build_post, build_site
from .config import DEFAULT_CONFIG_PATH, SiteConfig, load_config
from .errors import ConfigError, GatewayError
from .gateway import ContentGateway
from .reading_time import estimate_reading_minutes


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(args: argparse.Namespace) -> SiteConfig:
    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc
    preview_ref = getattr(args, "preview_ref", None)
    if preview_ref:
        config = config.model_copy(update={"preview_ref": preview_ref})
    return config


def _build_context(args: argparse.Namespace, config: SiteConfig) -> BuildContext:
    out_root = Path(args.out) if args.out else Path(config.output_dir)
    return BuildContext(
        config=config,
        out_root=out_root,
        templates_dir=Path(args.templates) if args.templates else None,
        build_label=args.build_label,
    )


def _handle_build(args: argparse.Namespace) -> None:
    config = _load_config(args)
    ctx = _build_context(args, config)
    gateway = ContentGateway.from_config(config)

    try:
        report = build_site(ctx, gateway, max_pages=args.max_pages)
    except GatewayError as exc:
        raise SystemExit(f"Could not load the post listing ({exc.kind}): {exc}") from exc

    listing = report.listing
    not_found = sum(1 for result in report.posts if result.status == "not_found")
    print(
        f"Built {len(report.written)} file(s) for {len(report.posts)} post(s) "
        f"into {ctx.out_root} ({gateway.requests_made} CMS request(s))."
    )
    if not_found:
        print(f"{not_found} listed post(s) could not be found.", file=sys.stderr)
    if listing is not None and listing.error is not None:
        print(
            f"Listing is incomplete after {listing.pages_loaded} page(s): "
            f"{listing.error.kind}: {listing.error.message}",
            file=sys.stderr,
        )
    if report.truncated:
        print(
            f"Listing stopped after {listing.pages_loaded} page(s) (--max-pages); "
            "more posts exist in the CMS.",
            file=sys.stderr,
        )
    if report.failed:
        print(f"Failed posts: {', '.join(report.failed)}", file=sys.stderr)
    if not report.complete and not args.allow_partial:
        raise SystemExit(1)


def _handle_post(args: argparse.Namespace) -> None:
    config = _load_config(args)
    ctx = _build_context(args, config)
    gateway = ContentGateway.from_config(config)

    try:
        result = build_post(ctx, gateway, args.slug)
    except GatewayError as exc:
        raise SystemExit(f"Could not load post {args.slug!r} ({exc.kind}): {exc}") from exc

    if result.status == "not_found":
        print(f"Post {args.slug!r} not found; wrote {result.paths[-1]}.")
        return
    print(f"Rendered {args.slug} ({result.reading_minutes} min) into {result.paths[-1]}.")


def _handle_reading_time(args: argparse.Namespace) -> None:
    config = _load_config(args)
    gateway = ContentGateway.from_config(config)

    try:
        document = gateway.get_by_uid(config.document_type, args.slug)
    except GatewayError as exc:
        raise SystemExit(f"Could not load post {args.slug!r} ({exc.kind}): {exc}") from exc
    if document is None:
        raise SystemExit(f"Post {args.slug!r} not found.")

    try:
        post = document.to_detail()
    except ValidationError as exc:
        raise SystemExit(f"Post {args.slug!r} is malformed: {exc}") from exc
    print(estimate_reading_minutes(post.content, config.words_per_minute))


def _handle_validate_config(args: argparse.Namespace) -> None:
    config = _load_config(args)
    print(
        f"Config OK: {config.api_endpoint} (type={config.document_type}, "
        f"page_size={config.page_size}, preview={'on' if config.preview else 'off'})."
    )


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the site config YAML (default: {DEFAULT_CONFIG_PATH}).",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--out", default=None, help="Output directory (default: output_dir from config).")
    parser.add_argument(
        "--templates",
        default=None,
        help="Directory with templates overriding the bundled ones.",
    )
    parser.add_argument(
        "--preview-ref",
        dest="preview_ref",
        default=None,
        help="Render draft content using this preview ref.",
    )
    parser.add_argument(
        "--build-label",
        dest="build_label",
        default=None,
        help="Label appended to every page as an HTML comment.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blogsite",
        description="Static blog generation from a headless CMS",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"blogsite {__version__}",
        help="Show the blogsite version and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command")

    build_parser = subparsers.add_parser(
        "build",
        help="Build the whole site.",
        description="Render the listing, every listed post and the not-found page.",
    )
    _add_config_argument(build_parser)
    _add_output_arguments(build_parser)
    build_parser.add_argument(
        "--max-pages",
        dest="max_pages",
        type=int,
        default=None,
        help="Stop following listing cursors after this many pages.",
    )
    build_parser.add_argument(
        "--allow-partial",
        dest="allow_partial",
        action="store_true",
        help="Exit successfully even if pages or posts failed to load or the listing was cut short.",
    )
    build_parser.set_defaults(func=_handle_build)

    post_parser = subparsers.add_parser(
        "post",
        help="Render a single post.",
        description="Render post/<slug>/index.html, or the not-found page if the slug is unknown.",
    )
    _add_config_argument(post_parser)
    _add_output_arguments(post_parser)
    post_parser.add_argument("--slug", required=True, help="Post uid.")
    post_parser.set_defaults(func=_handle_post)

    reading_parser = subparsers.add_parser(
        "reading-time",
        help="Print the reading-time estimate of a post.",
        description="Fetch a post and print its reading time in minutes.",
    )
    _add_config_argument(reading_parser)
    reading_parser.add_argument("--slug", required=True, help="Post uid.")
    reading_parser.add_argument(
        "--preview-ref", dest="preview_ref", default=None, help="Use this preview ref."
    )
    reading_parser.set_defaults(func=_handle_reading_time)

    validate_parser = subparsers.add_parser(
        "validate-config",
        help="Validate the site config.",
        description="Load the site config, apply environment overrides and report the result.",
    )
    _add_config_argument(validate_parser)
    validate_parser.set_defaults(func=_handle_validate_config)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _configure_logging(args.verbose)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()


__all__ = ["build_parser", "main"]
