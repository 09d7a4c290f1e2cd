"""Maintenance commands for the key database: list or remove one donor's keys."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from keybot.store import GameKey, load_db, save_db

DEFAULT_DB_FILE = "keys.db"


def print_keys(path: str | Path, author: str) -> list[GameKey]:
    """Print every key donated by an author and return them."""
    db = load_db(path)
    found = [key for keys in db.values() for key in keys if key.author == author]
    for key in found:
        print(f"Game: {key.game_name}")
        print(f"Key: {key.serial}")
        print("\n")
    return found


def delete_author(path: str | Path, author: str) -> int:
    """Remove every key donated by an author; return how many were removed."""
    db = load_db(path)
    if not db:
        return 0
    removed = 0
    for name in list(db):
        kept = []
        for key in db[name]:
            if key.author == author:
                print(f"Saw game from {author} :{key.game_name}")
                removed += 1
            else:
                kept.append(key)
        if kept:
            db[name] = kept
        else:
            del db[name]
    save_db(path, db)
    return removed


def main(argv: list[str] | None = None) -> int:
    """List (-p) and/or delete (-d) the keys of the author named by -author."""
    parser = argparse.ArgumentParser(
        prog="keybot-dbtools", description="Inspect or prune the game key database."
    )
    parser.add_argument("-p", dest="printout", action="store_true", help="print keys for author")
    parser.add_argument(
        "-d", dest="delete", action="store_true", help="delete keys from author"
    )
    parser.add_argument("-author", dest="author", default="", help="-author=authorname")
    parser.add_argument("-db", dest="db", default=DEFAULT_DB_FILE, help="database file")
    args = parser.parse_args(argv)

    if not args.author:
        return 0
    try:
        if args.printout:
            print_keys(args.db, args.author)
        if args.delete:
            delete_author(args.db, args.author)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())