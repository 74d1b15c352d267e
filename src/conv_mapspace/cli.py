"""
Command-line interface for conv mapspace.
"""

import argparse
import logging
import random
import sys
from pathlib import Path

import yaml

from conv_mapspace.arch import LevelHierarchy
from conv_mapspace.errors import ConfigurationError
from conv_mapspace.mapspace import MapSpace
from conv_mapspace.utils import Timer, format_number, get_prime_factors, validate_mapping
from conv_mapspace.workload import ConvWorkload, LayerRegistry, default_registry

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Conv Mapspace - Indexable mapping spaces for convolution dataflows"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--layers-file",
        help="YAML layer table to use instead of the packaged one"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # =========================================
    # info command
    # =========================================
    info_parser = subparsers.add_parser(
        "info",
        help="Display workload and level information"
    )
    _add_problem_arguments(info_parser)

    # =========================================
    # size command
    # =========================================
    size_parser = subparsers.add_parser(
        "size",
        help="Compute the mapspace cardinality"
    )
    _add_problem_arguments(size_parser)

    # =========================================
    # decode command
    # =========================================
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode one mapping id"
    )
    _add_problem_arguments(decode_parser)
    which = decode_parser.add_mutually_exclusive_group(required=True)
    which.add_argument(
        "--index",
        type=int,
        help="Mapping id in [0, size)"
    )
    which.add_argument(
        "--random",
        action="store_true",
        help="Decode a uniformly drawn mapping id"
    )
    decode_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for --random"
    )
    decode_parser.add_argument(
        "-o", "--output",
        help="Output file for the mapping (YAML format)"
    )

    # =========================================
    # layers command
    # =========================================
    subparsers.add_parser(
        "layers",
        help="List named layers"
    )

    # Parse arguments
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    if args.command is None:
        parser.print_help()
        return 1

    # =========================================
    # Execute command
    # =========================================
    commands = {
        "info": cmd_info,
        "size": cmd_size,
        "decode": cmd_decode,
        "layers": cmd_layers,
    }
    try:
        return commands[args.command](args)
    except (ConfigurationError, FileNotFoundError, IndexError) as e:
        print(f"Error: {e}")
        if args.verbose:
            logger.exception("Command failed")
        return 1


def _add_problem_arguments(subparser):
    subparser.add_argument(
        "-w", "--workload",
        required=True,
        help="Path to workload YAML file, or a named layer"
    )
    subparser.add_argument(
        "-a", "--arch",
        help="Path to level hierarchy YAML file (default: 4-level hierarchy)"
    )
    subparser.add_argument(
        "--no-pad-primes",
        action="store_true",
        help="Keep prime-like extents of named layers unpadded"
    )


def _load_registry(args) -> LayerRegistry:
    if args.layers_file:
        return LayerRegistry.from_yaml(args.layers_file)
    return default_registry()


def _load_problem(args) -> tuple[ConvWorkload, LevelHierarchy]:
    registry = _load_registry(args)
    if Path(args.workload).exists():
        workload = ConvWorkload.from_yaml(args.workload, registry=registry)
    else:
        workload = ConvWorkload.from_layer(args.workload, pad_primes=not args.no_pad_primes, registry=registry)

    if args.arch:
        hierarchy = LevelHierarchy.from_yaml(args.arch)
    else:
        hierarchy = LevelHierarchy.default()
    return workload, hierarchy


def cmd_info(args) -> int:
    """Execute info command."""
    workload, hierarchy = _load_problem(args)

    print("Workload Information")
    print("=" * 60)
    print(workload.summary())

    print("\nDivisors:")
    for dim_name, bound, divs in zip(workload.dim_names, workload.bounds, workload.divisors):
        primes = " x ".join(str(p) for p in get_prime_factors(bound)) or "1"
        print(f"  {dim_name}: {divs} ({primes})")

    print("\nLevel Information")
    print("=" * 60)
    print(hierarchy.summary())
    return 0


def cmd_size(args) -> int:
    """Execute size command."""
    workload, hierarchy = _load_problem(args)

    timer = Timer()
    timer.start("init")
    mapspace = MapSpace(workload, hierarchy)
    timer.stop("init")

    print(mapspace.summary())
    if args.verbose:
        print(timer.report())
    return 0


def cmd_decode(args) -> int:
    """Execute decode command."""
    workload, hierarchy = _load_problem(args)
    mapspace = MapSpace(workload, hierarchy)

    if args.random:
        mapping_id = random.Random(args.seed).randrange(mapspace.size())
    else:
        mapping_id = args.index

    mapping = mapspace.decode(mapping_id)
    print(f"Mapspace size: {format_number(mapspace.size())}")
    print(mapping.pretty_print())

    errors = validate_mapping(mapping, workload)
    for error in errors:
        logger.error(error)

    if args.output:
        with open(args.output, "w") as f:
            yaml.safe_dump(mapping.to_dict(), f, default_flow_style=False)
        print(f"\nMapping saved to: {args.output}")

    return 0 if not errors else 1


def cmd_layers(args) -> int:
    """Execute layers command."""
    registry = _load_registry(args)
    for name in registry.names():
        print(name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
