"""
Reset the SRS card store.

DANGEROUS: This deletes every card of every user!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_srs_store
    python -m scripts.maintenance.reset_srs_store --yes   # no prompt
"""

import argparse

from vocab_srs import build_scheduler


def main():
    parser = argparse.ArgumentParser(description="Delete all SRS cards")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args()

    print("=" * 60)
    print("WARNING: Reset SRS Store")
    print("=" * 60)
    print()
    print("This will DELETE all cards:")
    print("  - Scheduling state (ease factor, interval, repetitions)")
    print("  - Usage statistics (times seen, correct/incorrect counts)")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    store = build_scheduler().store
    count = len(store)
    print("\nResetting store...")
    store.clear_all()
    print(f"Store reset complete! {count} card(s) removed.")


if __name__ == "__main__":
    main()
