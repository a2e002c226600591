"""
Copy the SRS card collection from one backend to another.

One-off script for moving a deck, e.g. from the local SQLite file to
Postgres or MongoDB. The target's existing collection is replaced.

Usage:
    python -m scripts.migrate_store --to-url postgresql://user:pw@host/srs
    python -m scripts.migrate_store --from-url sqlite:///old.sqlite --to-mongo

This will:
1. Read the stored collection from the source (DATABASE_URL unless --from-url)
2. Validate it and write it unchanged to the target
3. Reload the target and check that the card counts match
"""

from __future__ import annotations

import argparse
import sys

from vocab_srs import CardStore, MongoBackend, SqlAlchemyBackend, SrsSettings
from vocab_srs.exceptions import PersistenceError
from vocab_srs.storage import parse_cards


def main():
    parser = argparse.ArgumentParser(description="Copy SRS cards between backends")
    parser.add_argument("--from-url", default=None, help="Source database URL (default: DATABASE_URL)")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--to-url", help="Target database URL")
    target.add_argument("--to-mongo", action="store_true", help="Target MONGO_URI")
    args = parser.parse_args()

    settings = SrsSettings.from_env()
    key = settings.storage_key

    if args.to_mongo and not settings.mongo_uri:
        print("MONGO_URI not found in environment variables")
        sys.exit(1)

    try:
        source = SqlAlchemyBackend(args.from_url or settings.database_url)
        data = source.get(key) or "[]"
        source_count = len(parse_cards(data))
        print(f"Source: {source_count} cards")

        if args.to_mongo:
            target_backend = MongoBackend.from_uri(settings.mongo_uri, settings.mongo_db, settings.mongo_collection)
        else:
            target_backend = SqlAlchemyBackend(args.to_url)
        target_backend.set(key, data)
    except (PersistenceError, ValueError) as e:
        print(f"Migration failed: {e}")
        sys.exit(1)

    target_count = CardStore(target_backend, storage_key=key).load()
    print(f"Target: {target_count} cards")

    if target_count != source_count:
        print(f"Migration validation failed! source={source_count}, target={target_count}")
        sys.exit(1)
    print("Migration completed successfully!")


if __name__ == "__main__":
    main()
