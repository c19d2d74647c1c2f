"""CLI entry point for kriskogram scene computation."""

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from kriskogram.config import Config, load_config
from kriskogram.models import Dataset
from kriskogram.pipeline import compute, prepare_dataset
from kriskogram.stats import describe_dataset

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """Raised for unreadable or invalid input files."""


def read_dataset(path: Path) -> Dataset:
    try:
        text = path.read_text()
    except OSError as e:
        raise CLIError(f"Cannot read dataset {path}: {e}") from e
    try:
        return Dataset.model_validate_json(text)
    except ValidationError as e:
        raise CLIError(f"Invalid dataset {path}:\n{e}") from e


def read_config(path: Path | None) -> Config:
    if path is not None and not path.exists():
        raise CLIError(f"Config file not found: {path}")
    try:
        return load_config(path)
    except ValidationError as e:
        raise CLIError(f"Invalid config {path}:\n{e}") from e
    except (OSError, yaml.YAMLError) as e:
        raise CLIError(f"Cannot load config {path}: {e}") from e


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Kriskogram scene builder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # compute command
    compute_parser = sub.add_parser("compute", help="Resolve one year of a dataset into a scene")
    compute_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    compute_parser.add_argument("dataset", help="Dataset JSON file")
    compute_parser.add_argument("-c", "--config", default=None, help="Config YAML file")
    compute_parser.add_argument(
        "--year", type=int, default=None,
        help="Year to render (defaults to the config year, then the first year)",
    )
    compute_parser.add_argument("-o", "--output", default=None, help="Write scene JSON here instead of stdout")

    # stats command
    stats_parser = sub.add_parser("stats", help="Summarize dataset properties and value ranges")
    stats_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    stats_parser.add_argument("dataset", help="Dataset JSON file")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "compute":
            dataset = read_dataset(Path(args.dataset))
            config = read_config(Path(args.config) if args.config else None)
            if args.year is not None:
                config = config.model_copy(update={"year": args.year})

            scene = compute(dataset, config)
            payload = scene.model_dump_json(indent=2)
            if args.output:
                Path(args.output).write_text(payload)
                print(
                    f"Scene {scene.status.year}: {len(scene.nodes)} nodes, "
                    f"{len(scene.edges)} edges -> {args.output}"
                )
            else:
                print(payload)
            for warning in scene.status.warnings:
                print(f"  warning: {warning}", file=sys.stderr)

        elif args.command == "stats":
            dataset = read_dataset(Path(args.dataset))
            prepared, _warnings = prepare_dataset(dataset)
            metadata = describe_dataset(list(prepared.values()))
            print(metadata.model_dump_json(indent=2))

        else:
            parser.print_help()
    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
