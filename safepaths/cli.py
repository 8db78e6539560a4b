"""Command-line entry point for inspecting registries and checking fragments."""

import argparse
import sys
from typing import Optional

from safepaths.bootstrap.config import parse_cli_args
from safepaths.bootstrap.logging_setup import configure_logging, scrub_for_log
from safepaths.domain.context_id import (
    component_logger,
    generate_context_id,
    set_context_id,
)
from safepaths.domain.errors import (
    ConfigurationError,
    PathValidationError,
    UnknownPathName,
    UnknownPreset,
)
from safepaths.domain.policy import SanitizationPolicy
from safepaths.presets.loader import default_loader
from safepaths.registry.paths import PathRegistry

CLI_LOGGER = component_logger("cli")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_REJECTED = 2


def build_registry(args: argparse.Namespace) -> PathRegistry:
    """Create the registry described by the parsed arguments."""
    policy = SanitizationPolicy.named(args.policy)
    registry = PathRegistry(args.base, policy=policy, loader=default_loader())
    if args.preset:
        registry = registry.apply_preset(args.preset)
    return registry


def run(args: argparse.Namespace) -> int:
    if args.command == "presets":
        for name, info in default_loader().preset_info().items():
            print(f"{name}\t{info['title']}\t{info['description']}")
        return EXIT_OK

    registry = build_registry(args)

    if args.command == "list":
        for name, path in sorted(registry.all().items()):
            print(f"{name}={path}")
        return EXIT_OK

    if args.command == "get":
        print(registry.get(args.name))
        return EXIT_OK

    try:
        print(registry.resolve(args.name, args.fragment))
    except PathValidationError as exc:
        print(f"rejected [{exc.rule}]: {exc}", file=sys.stderr)
        return EXIT_REJECTED
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Parse arguments, configure logging and run one subcommand."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    set_context_id(generate_context_id())
    configure_logging(args.log_level, args.log_destination, use_json=args.json)
    CLI_LOGGER.debug(
        "Running command",
        extra={
            "event": "cli_command",
            "base_path": args.base,
            "preset": args.preset,
            "policy": args.policy,
        },
    )
    try:
        return run(args)
    except (UnknownPathName, UnknownPreset, ConfigurationError) as exc:
        print(f"error: {scrub_for_log(str(exc))}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
