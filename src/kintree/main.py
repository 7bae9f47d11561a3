"""
1) Load a family tree JSON document and validate it into a relationship store.
2) Optionally persist the tree to SQLite.
3) Lay out the tree and derive the connecting lines.
4) Plan placeholder slots around a focused person.
5) Scan the tree for suggested corrections.
6) Write the derived structures for a renderer.
"""

import argparse
import json
import logging
from contextlib import closing
from pathlib import Path

from kintree.config import settings
from kintree.database import create_database, store_tree
from kintree.errors import FamilyTreeError
from kintree.layout import compute_layout
from kintree.links import compute_links
from kintree.parsing import dump_derived, load_tree
from kintree.placeholders import compute_placeholders
from kintree.suggestions import compute_suggestions

logger = logging.getLogger("kintree")

MAX_LISTED = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kintree", description="Lay out a family tree and suggest corrections."
    )
    parser.add_argument("tree", type=Path, help="Tree JSON document")
    parser.add_argument("--root", help="Person whose family is laid out first")
    parser.add_argument("--focus", help="Person to plan placeholder slots for")
    parser.add_argument("--db", type=Path, help="Also store the tree in this SQLite file")
    parser.add_argument("--output", type=Path, help="Write nodes, links and suggestions here")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print(f"Loading tree: {args.tree}")
    try:
        store = load_tree(args.tree)
    except FamilyTreeError as e:
        print(f"  Invalid tree ({e.kind}): {e}")
        return 1
    people, edges = store.people, store.edges
    print(f"  Found {len(people)} persons and {len(edges)} relationships")

    if args.db:
        print(f"Storing tree in SQLite: {args.db}")
        with closing(create_database(args.db)) as conn:
            store_tree(conn, store)

    print("Computing layout...")
    layout = settings.layout
    nodes = compute_layout(people, edges, layout, root_id=args.root)
    links = compute_links(nodes, edges, layout)
    print(f"  Positioned {len(nodes)} people with {len(links)} links")

    placeholders = []
    if args.focus:
        placeholders = compute_placeholders(args.focus, people, edges, nodes, layout)
        offered = ", ".join(p.slot.value for p in placeholders) or "none"
        print(f"  Open slots for {args.focus}: {offered}")

    print("Checking tree...")
    suggestions = compute_suggestions(people, edges, settings.suggestions)
    if suggestions:
        print(f"  Found {len(suggestions)} suggestions:")
        for s in suggestions[:MAX_LISTED]:
            print(f"    - [{s.priority.value}] {s.person_id}: {s.message}")
        if len(suggestions) > MAX_LISTED:
            print(f"    ... and {len(suggestions) - MAX_LISTED} more")
    else:
        print("  No suggestions")

    if args.output:
        print(f"Writing derived tree to: {args.output}")
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(dump_derived(nodes, links, suggestions, placeholders), f, indent=2)

    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
