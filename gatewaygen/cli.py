"""CLI entrypoints for gatewaygen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

from .config import ConfigError, GeneratorConfig, load_config, parse_parameter
from .descriptor.packages import InvalidPackageIdentityError
from .generator import Generator, write_files
from .loader import ManifestError, load_manifest
from .logging import configure_logging


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_generation_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("manifest", help="Descriptor manifest (YAML or JSON).")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .gatewaygen.yml (defaults to the manifest's directory).",
    )
    parser.add_argument(
        "--parameter",
        default=None,
        help="Plugin parameter string, e.g. 'separate_package=true,standalone=true'.",
    )
    parser.add_argument(
        "--separate-package",
        action="store_true",
        default=None,
        help="Import RPC stubs from a separate companion package.",
    )
    parser.add_argument(
        "--standalone",
        action="store_true",
        default=None,
        help="Relocate gateways into their own package and leave alias shims behind.",
    )
    parser.add_argument(
        "--omit-package-doc",
        action="store_true",
        default=None,
        help="Do not emit package documentation (deprecation notices are kept).",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip files whose package cannot be resolved instead of failing.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatewaygen",
        description="Generate HTTP-to-gRPC reverse-proxy gateway sources from descriptors.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Render gateway sources into an output directory.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_generation_options(generate_parser)
    generate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory (defaults to output_dir from config, then '.').",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be written without writing them.",
    )

    plan_parser = subparsers.add_parser(
        "plan",
        help="Show the artifacts each file would produce without rendering.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    _add_generation_options(plan_parser)

    return parser


def _resolve_config(args: argparse.Namespace) -> GeneratorConfig:
    manifest_path = Path(args.manifest)
    config_source = Path(args.config) if args.config else manifest_path.parent
    config = load_config(config_source)
    overrides: Dict[str, Any] = parse_parameter(args.parameter)
    flags = {
        "separate_package": args.separate_package,
        "standalone": args.standalone,
        "omit_package_doc": args.omit_package_doc,
    }
    # Unset flags must not mask values that came from --parameter.
    overrides.update({key: value for key, value in flags.items() if value is not None})
    if getattr(args, "output", None):
        overrides["output_dir"] = args.output
    return config.merged(overrides)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gatewaygen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    logger = configure_logging(verbose=bool(args.verbose), log_file=log_file)

    try:
        config = _resolve_config(args)
        files = load_manifest(Path(args.manifest))
    except (ConfigError, ManifestError) as exc:
        parser.exit(1, f"{exc}\n")

    generator = Generator(config=config)
    keep_going = bool(args.keep_going)

    if args.command == "plan":
        try:
            plans = generator.plan(files, keep_going=keep_going)
        except InvalidPackageIdentityError as exc:
            parser.exit(1, f"gatewaygen plan failed: {exc}\n")
        for plan in plans:
            print(f"{plan.file.name}: {plan.outcome.value}")
            for artifact in plan.artifacts:
                kind = "alias" if artifact.is_alias_shim else "gateway"
                print(f"  {kind} {artifact.filename} ({artifact.package.path})")
    elif args.command == "generate":
        try:
            result = generator.run(files, keep_going=keep_going)
        except InvalidPackageIdentityError as exc:
            parser.exit(1, f"gatewaygen generate failed: {exc}\nRun with --verbose for more details.\n")
        output_dir = Path(config.output_dir or ".")
        if getattr(args, "dry_run", False):
            for generated in result.files:
                print(str(output_dir / generated.name))
        else:
            written = write_files(result.files, output_dir)
            logger.info("Wrote %d file(s) under %s", len(written), output_dir)
        if result.failures:
            parser.exit(1, f"Skipped {len(result.failures)} file(s): {', '.join(result.failures)}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
