"""
Generate sample vocabulary and exercise the scheduler end to end.

Adds five culture-themed words for a user, randomly reviews some of them,
then prints the deck statistics, due cards, a dashboard and every analytics
event that was fired.

Usage:
    python -m scripts.demo.generate_sample_data
    python -m scripts.demo.generate_sample_data --user-id u1 --seed 7
    python -m scripts.demo.generate_sample_data --keep   # don't clear first
"""

from __future__ import annotations

import argparse
import json
import random

from vocab_srs import (
    BufferedAnalyticsSink,
    ReviewQuality,
    SrsSettings,
    build_deck_dashboard,
    build_scheduler,
)
from vocab_srs.logging_config import configure_logging

SAMPLE_WORDS = [
    {
        "label": "dumpling",
        "term": "饺子",
        "pronunciation": "jiǎozi",
        "note": "Made during Chinese New Year, each fold is a wish for prosperity. "
                "Shaped like ancient gold ingots to invite wealth.",
    },
    {
        "label": "chopsticks",
        "term": "筷子",
        "pronunciation": "kuàizi",
        "note": "Used for over 3000 years. Never stick them upright in rice, "
                "that is reserved for funeral rites.",
    },
    {
        "label": "tea",
        "term": "茶",
        "pronunciation": "chá",
        "note": "Served to show respect and hospitality. The tea ceremony is an "
                "art form dating back thousands of years.",
    },
    {
        "label": "red envelope",
        "term": "红包",
        "pronunciation": "hóngbāo",
        "note": "Given during holidays and celebrations. Red symbolizes good luck "
                "and wards off evil spirits.",
    },
    {
        "label": "dragon",
        "term": "龙",
        "pronunciation": "lóng",
        "note": "Symbol of power, strength and good luck. Appears in festivals "
                "and celebrations.",
    },
]


def main():
    parser = argparse.ArgumentParser(description="Generate sample SRS data")
    parser.add_argument("--user-id", default=None, help="User to create cards for (default: DEFAULT_USER_ID)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for simulated reviews")
    parser.add_argument("--keep", action="store_true", help="Keep existing cards instead of clearing")
    args = parser.parse_args()

    settings = SrsSettings.from_env()
    configure_logging(settings.log_level, "text")
    user_id = args.user_id or settings.default_user_id
    rng = random.Random(args.seed)

    sink = BufferedAnalyticsSink()
    scheduler = build_scheduler(settings, sink=sink)
    store = scheduler.store

    print("Testing SRS system...\n")
    if not args.keep:
        store.clear_all()

    print("Adding sample vocabulary...\n")
    for word in SAMPLE_WORDS:
        card = store.find_or_create(
            user_id,
            word["label"],
            word["term"],
            word["pronunciation"],
            word["note"]
        )
        print(f"  + {card.term} ({card.label})")

        # Simulate some review history
        if rng.random() > 0.5:
            card = scheduler.review_card(card.id, ReviewQuality.GOOD)
            print(f"    reviewed GOOD -> next in {card.interval} day(s)")

    print("\nCurrent statistics:\n")
    print(json.dumps(scheduler.get_stats(user_id).to_dict(), indent=2))

    due_cards = scheduler.get_due_cards(user_id)
    print(f"\n{len(due_cards)} cards due for review")
    for card in due_cards:
        print(f"  - {card.term} ({card.label})")

    dashboard = build_deck_dashboard(store, user_id)
    print("\nPhases:")
    for phase, count in dashboard.phase_counts.items():
        print(f"  {phase.value:<9} {count}")
    print("\nDue forecast:")
    for day, count in dashboard.due_forecast.items():
        print(f"  {day.date()}  {count}")

    events = sink.get_event_buffer()
    print(f"\nAnalytics events fired: {len(events)}")
    for event in events:
        print(f"  {event.event_name}: {event.properties}")


if __name__ == "__main__":
    main()
