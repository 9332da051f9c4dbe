"""Command line for inspecting and maintaining progression state.

Usage:
    progression-engine rule "Barbell Back Squat"
    progression-engine validate-catalog [--path FILE]
    progression-engine generate-rules seeds.json ProgressionRules.json
    progression-engine migrate
    progression-engine targets [--mesocycle UUID]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from progression_engine.catalog.catalog import RuleCatalog, read_rule_records
from progression_engine.catalog.generator import generate_rules_file
from progression_engine.catalog.validator import validate_records
from progression_engine.config import (
    BUNDLED_RULES_PATH,
    GENERATED_RULES_PATH,
    LOG_LEVEL,
    STORE_DIR,
)
from progression_engine.engine import resolve_kind
from progression_engine.exceptions import CatalogLoadError
from progression_engine.storage.backend import FileBackend
from progression_engine.storage.codec import encode_target
from progression_engine.storage.target_store import TargetStore

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def cmd_rule(args: argparse.Namespace) -> int:
    """Print the rule an exercise resolves to and where it came from."""
    catalog = RuleCatalog.from_config()
    rule = catalog.rule_for(args.name)
    origin = catalog.source if args.name in catalog else "name heuristics"
    payload = {
        "exercise": args.name,
        "source": origin,
        "kind": resolve_kind(rule, args.name).name.lower(),
        "rule": rule.to_record(),
    }
    print(json.dumps(payload, indent=2))
    return 0


def cmd_validate_catalog(args: argparse.Namespace) -> int:
    """Print validator warnings; exit status 1 if there are any."""
    path = Path(args.path) if args.path else _first_existing(GENERATED_RULES_PATH, BUNDLED_RULES_PATH)
    if path is None:
        logger.error("No rule file found at %s or %s", GENERATED_RULES_PATH, BUNDLED_RULES_PATH)
        return 2
    try:
        records = read_rule_records(path)
    except CatalogLoadError as exc:
        logger.error("%s", exc)
        return 2

    warnings = validate_records(records)
    for warning in warnings:
        print(warning)
    logger.info("Checked %d rules in %s: %d warning(s)", len(records), path, len(warnings))
    return 1 if warnings else 0


def cmd_generate_rules(args: argparse.Namespace) -> int:
    try:
        generate_rules_file(args.seed, args.out)
    except CatalogLoadError as exc:
        logger.error("%s", exc)
        return 2
    return 0


async def _migrate(store_dir: Path) -> int:
    store = await TargetStore.open(FileBackend(store_dir))
    migrated = await store.migrate_legacy_if_needed()
    await store.flush()
    return migrated


def cmd_migrate(args: argparse.Namespace) -> int:
    migrated = asyncio.run(_migrate(Path(args.store_dir)))
    print(f"Migrated {migrated} legacy target(s)")
    return 0


async def _targets(store_dir: Path, mesocycle: str | None) -> dict[str, dict]:
    store = await TargetStore.open(FileBackend(store_dir))
    snapshot = await store.snapshot()
    return {
        key: encode_target(target)
        for key, target in sorted(snapshot.items())
        if mesocycle is None or key.startswith(f"{mesocycle}::")
    }


def cmd_targets(args: argparse.Namespace) -> int:
    """Dump stored targets as JSON."""
    targets = asyncio.run(_targets(Path(args.store_dir), args.mesocycle))
    print(json.dumps(targets, indent=2))
    return 0


def _first_existing(*paths: Path) -> Path | None:
    for path in paths:
        if path.exists():
            return path
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="progression-engine",
        description="Workout progression rules and stored next-session targets",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_rule = sub.add_parser("rule", help="Show the rule an exercise resolves to")
    p_rule.add_argument("name", help="Exercise display name")
    p_rule.set_defaults(func=cmd_rule)

    p_validate = sub.add_parser("validate-catalog", help="Check a rule file for problems")
    p_validate.add_argument("--path", help="Rule file (default: generated, then bundled)")
    p_validate.set_defaults(func=cmd_validate_catalog)

    p_generate = sub.add_parser("generate-rules", help="Write a rule file from an exercise seed list")
    p_generate.add_argument("seed", help="JSON array of {name, type, ...}")
    p_generate.add_argument("out", help="Rule file to write")
    p_generate.set_defaults(func=cmd_generate_rules)

    for name, func, help_text in (
        ("migrate", cmd_migrate, "Import the legacy target cache once"),
        ("targets", cmd_targets, "Print stored next-session targets"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--store-dir", default=str(STORE_DIR), help="Key-value store directory")
        if name == "targets":
            p.add_argument("--mesocycle", help="Only this mesocycle's targets")
        p.set_defaults(func=func)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
