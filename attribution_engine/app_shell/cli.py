import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from attribution_engine.adapters.memory_storage import InMemoryKeyValueStore
from attribution_engine.adapters.sqlite_storage import SQLiteKeyValueStore
from attribution_engine.components.attribution import build_classifier_config
from attribution_engine.components.session_gate import (
    GATE_SCOPES,
    Gate,
    SessionState,
    build_storage_keys,
)
from attribution_engine.core.ports.storage import StorageScope
from attribution_engine.core.services.classifier import (
    ChannelClassifier,
    parse_query_params,
    parse_utm_params,
)
from attribution_engine.rules.loader import DEFAULT_RULES_PATH, load_rules
from attribution_engine.rules.models import Rules

logger = logging.getLogger("cli")


def get_rules(path: Path) -> Rules:
    if not path.exists():
        logger.error(f"Rules file {path} not found.")
        sys.exit(1)

    try:
        return load_rules(path)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)


def get_state(rules: Rules, db_path: str | None) -> SessionState:
    long_lived = SQLiteKeyValueStore(db_path or rules.storage.long_lived_db_path)
    # The session scope never outlives a CLI run
    session = InMemoryKeyValueStore(StorageScope.SESSION)
    return SessionState(long_lived, session, build_storage_keys(rules))


def handle_classify(rules: Rules, args: argparse.Namespace) -> None:
    classifier = ChannelClassifier(build_classifier_config(rules))
    channel = classifier.classify(args.url, args.referrer)
    utm = parse_utm_params(parse_query_params(args.url))

    output = {
        "source": channel.source,
        "medium": channel.medium,
        "click_ids": classifier.click_ids(args.url),
        "utm": {k: v for k, v in asdict(utm).items() if v is not None},
    }
    print(json.dumps(output, indent=2, sort_keys=True))


def handle_show(rules: Rules, args: argparse.Namespace) -> None:
    state = get_state(rules, args.db)
    record, result = state.read_record()
    if not result.ok:
        logger.error(f"Storage unavailable: {result.error}")
        sys.exit(1)

    snapshot = state.snapshot()
    output = {
        "record": record.to_storage() if record else None,
        "gates": {
            gate.value: getattr(snapshot, gate.value)
            for gate in Gate
            if GATE_SCOPES[gate] == StorageScope.LONG_LIVED
        },
        "auth_user_id": state.get_auth_user_id(),
        "locale": state.get_locale(),
    }
    print(json.dumps(output, indent=2, sort_keys=True))


def handle_reset_gates(rules: Rules, args: argparse.Namespace) -> None:
    state = get_state(rules, args.db)
    failed = False
    for gate in Gate:
        if GATE_SCOPES[gate] != StorageScope.LONG_LIVED:
            continue
        result = state.reset(gate)
        if result.ok:
            print(f"Reset gate '{gate.value}'.")
        else:
            logger.error(f"Could not reset {gate.value}: {result.error}")
            failed = True

    if failed:
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Attribution Engine CLI")
    parser.add_argument(
        "--rules", default=str(DEFAULT_RULES_PATH), help="Path to rules.yaml"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # classify
    classify_parser = subparsers.add_parser("classify", help="Classify a landing URL")
    classify_parser.add_argument("--url", required=True, help="Full landing page URL")
    classify_parser.add_argument("--referrer", help="Referrer URL, if any")

    # show
    show_parser = subparsers.add_parser("show", help="Show stored attribution and gates")
    show_parser.add_argument("--db", help="Override the long-lived store path")

    # reset-gates
    reset_parser = subparsers.add_parser("reset-gates", help="Clear long-lived gates")
    reset_parser.add_argument("--db", help="Override the long-lived store path")

    args = parser.parse_args(argv)

    rules = get_rules(Path(args.rules))

    if args.command == "classify":
        handle_classify(rules, args)
    elif args.command == "show":
        handle_show(rules, args)
    elif args.command == "reset-gates":
        handle_reset_gates(rules, args)


if __name__ == "__main__":
    main()
