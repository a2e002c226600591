import logging
import threading
from datetime import timedelta

import pytest

from vocab_srs import (
    CardNotFoundError,
    CardPhase,
    CardStore,
    InvalidQualityError,
    ReviewQuality,
    Scheduler,
    card_phase,
)
from vocab_srs.sm2.constants import ANCHOR_MIDNIGHT, AnalyticsEvents
from vocab_srs.sm2.scheduler import coerce_quality

DAY = timedelta(days=1)


class ExplodingSink:
    def notify(self, event_name, user_id, properties):
        raise RuntimeError('analytics down')


def test_dumpling_progression(scheduler, dumpling, t0):
    first = scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)
    assert first.repetitions == 1
    assert first.interval == 1
    assert first.ease_factor == pytest.approx(2.5)
    assert first.next_review == t0 + DAY

    second = scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0 + DAY)
    assert second.repetitions == 2
    assert second.interval == 6
    assert second.next_review == t0 + 7 * DAY

    third = scheduler.review_card(dumpling.id, ReviewQuality.EASY, timestamp=t0 + 7 * DAY)
    assert third.repetitions == 3
    assert third.ease_factor == pytest.approx(2.6)
    assert third.interval == 16
    assert third.next_review == t0 + 23 * DAY
    assert third.last_review == t0 + 7 * DAY
    assert third.correct_count == 3
    assert third.incorrect_count == 0


def test_review_is_persisted(scheduler, store, dumpling, t0):
    reviewed = scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)
    assert store.get_by_id(dumpling.id) == reviewed


def test_lapse_resets_progress(scheduler, dumpling, t0):
    for day in range(3):
        scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0 + day * DAY)

    lapsed = scheduler.review_card(dumpling.id, ReviewQuality.AGAIN, timestamp=t0 + 30 * DAY)
    assert lapsed.repetitions == 0
    assert lapsed.interval == 1
    assert lapsed.ease_factor == pytest.approx(2.18)
    assert lapsed.next_review == t0 + 31 * DAY
    assert lapsed.incorrect_count == 1
    assert card_phase(lapsed) == CardPhase.LAPSED


def test_hard_counts_as_lapse(scheduler, dumpling, t0):
    card = scheduler.review_card(dumpling.id, ReviewQuality.HARD, timestamp=t0)
    assert card.repetitions == 0
    assert card.interval == 1
    assert card.ease_factor == pytest.approx(2.36)
    assert card.incorrect_count == 1


def test_ease_never_drops_below_floor(scheduler, dumpling, t0):
    for day in range(10):
        card = scheduler.review_card(dumpling.id, ReviewQuality.AGAIN, timestamp=t0 + day * DAY)
    assert card.ease_factor == 1.3
    assert card.incorrect_count == 10


def test_review_unknown_card(scheduler):
    with pytest.raises(CardNotFoundError):
        scheduler.review_card('nope', ReviewQuality.GOOD)


@pytest.mark.parametrize('quality', [5, -1, 4, 'perfect', True, 2.5, None])
def test_invalid_quality_rejected(scheduler, store, dumpling, quality):
    with pytest.raises(InvalidQualityError):
        scheduler.review_card(dumpling.id, quality)
    assert store.get_by_id(dumpling.id) == dumpling


@pytest.mark.parametrize('quality, expected', [
    (ReviewQuality.HARD, ReviewQuality.HARD),
    (2, ReviewQuality.GOOD),
    ('good', ReviewQuality.GOOD),
    (' Easy ', ReviewQuality.EASY),
    ('AGAIN', ReviewQuality.AGAIN),
])
def test_coerce_quality(quality, expected):
    assert coerce_quality(quality) is expected


def test_invalid_quality_is_a_value_error():
    with pytest.raises(ValueError):
        coerce_quality(7)


def test_unknown_anchor_or_rounding(store):
    with pytest.raises(ValueError):
        Scheduler(store, anchor='noon')
    with pytest.raises(ValueError):
        Scheduler(store, rounding='banker')


def test_midnight_anchor(store, t0):
    scheduler = Scheduler(store, anchor=ANCHOR_MIDNIGHT)
    card = store.find_or_create('u1', 'tea', '茶', timestamp=t0)
    card = scheduler.review_card(card.id, ReviewQuality.GOOD, timestamp=t0)
    assert card.next_review == t0.replace(hour=0, minute=0) + DAY


def test_preview_does_not_mutate(scheduler, store, dumpling):
    update = scheduler.preview(dumpling.id, 'good')
    assert (update.ease_factor, update.interval, update.repetitions) == (2.5, 1, 1)
    assert store.get_by_id(dumpling.id) == dumpling


def test_new_card_is_due_immediately(scheduler, dumpling, t0):
    assert [c.id for c in scheduler.get_due_cards('u1', as_of=t0)] == [dumpling.id]
    assert scheduler.get_due_cards('u1', as_of=t0 - timedelta(seconds=1)) == []


def test_reviewed_card_leaves_due_set(scheduler, dumpling, t0):
    scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)
    assert scheduler.get_due_cards('u1', as_of=t0 + timedelta(hours=23)) == []
    assert len(scheduler.get_due_cards('u1', as_of=t0 + DAY)) == 1


def test_due_cards_most_overdue_first(scheduler, store, t0):
    late = store.find_or_create('u1', 'tea', '茶', timestamp=t0 + 2 * DAY)
    early = store.find_or_create('u1', 'rice', '米饭', timestamp=t0)
    middle = store.find_or_create('u1', 'noodles', '面条', timestamp=t0 + DAY)
    store.find_or_create('u1', 'moon', '月亮', timestamp=t0 + 10 * DAY)
    store.find_or_create('u2', 'bread', '面包', timestamp=t0)

    due = scheduler.get_due_cards('u1', as_of=t0 + 3 * DAY)
    assert [c.id for c in due] == [early.id, middle.id, late.id]


def test_due_query_is_repeatable(scheduler, store, t0):
    for label, term in [('a', '一'), ('b', '二'), ('c', '三')]:
        store.find_or_create('u1', label, term, timestamp=t0)

    as_of = t0 + DAY
    first = scheduler.get_due_cards('u1', as_of=as_of)
    second = scheduler.get_due_cards('u1', as_of=as_of)
    assert [c.id for c in first] == [c.id for c in second]
    assert [c.id for c in first] == sorted(c.id for c in first)


def test_due_event(scheduler, sink, dumpling, t0):
    sink.clear_buffer()
    scheduler.get_due_cards('u1', as_of=t0 - DAY)
    assert sink.get_event_buffer() == []

    scheduler.get_due_cards('u1', as_of=t0)
    events = sink.events_named(AnalyticsEvents.SRS_CARD_DUE)
    assert [e.properties for e in events] == [{'count': 1}]


def test_stats_without_reviews(scheduler, dumpling, t0):
    stats = scheduler.get_stats('u1', as_of=t0)
    assert stats.total_cards == 1
    assert stats.due_cards == 1
    assert stats.total_reviews == 0
    assert stats.accuracy == 0


def test_stats_accuracy(scheduler, store, dumpling, t0):
    scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)
    scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0 + DAY)
    scheduler.review_card(dumpling.id, ReviewQuality.AGAIN, timestamp=t0 + 7 * DAY)
    store.find_or_create('u1', 'tea', '茶', timestamp=t0 + 7 * DAY)

    stats = scheduler.get_stats('u1', as_of=t0 + 7 * DAY)
    assert stats.total_cards == 2
    assert stats.due_cards == 1
    assert stats.total_reviews == 3
    assert stats.accuracy == pytest.approx(200 / 3)
    assert stats.to_dict() == {
        'totalCards': 2,
        'dueCards': 1,
        'totalReviews': 3,
        'accuracy': pytest.approx(66.6667, rel=1e-4),
    }


def test_stats_for_unknown_user(scheduler):
    stats = scheduler.get_stats('ghost')
    assert (stats.total_cards, stats.due_cards, stats.total_reviews, stats.accuracy) == (0, 0, 0, 0.0)


def test_user_cards_most_recent_first(scheduler, store, t0):
    old = store.find_or_create('u1', 'tea', '茶', timestamp=t0)
    new = store.find_or_create('u1', 'rice', '米饭', timestamp=t0 + DAY)
    assert [c.id for c in scheduler.get_user_cards('u1')] == [new.id, old.id]

    scheduler.review_card(old.id, ReviewQuality.GOOD, timestamp=t0 + 2 * DAY)
    assert [c.id for c in scheduler.get_user_cards('u1')] == [old.id, new.id]


def test_answer_event(scheduler, sink, dumpling, t0):
    sink.clear_buffer()
    scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)

    answered = sink.events_named(AnalyticsEvents.SRS_CARD_ANSWERED)
    assert len(answered) == 1
    assert answered[0].user_id == 'u1'
    assert answered[0].properties == {
        'word': '饺子',
        'quality': 'GOOD',
        'nextInterval': 1,
        'easeFactor': '2.50',
    }


def test_level_up_events(scheduler, sink, dumpling, t0):
    sink.clear_buffer()
    for day in range(3):
        scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0 + day * DAY)

    level_ups = sink.events_named(AnalyticsEvents.SRS_LEVEL_UP)
    assert [(e.properties['fromPhase'], e.properties['toPhase']) for e in level_ups] == [
        ('new', 'learning'),
        ('learning', 'mature'),
    ]


def test_failing_sink_does_not_break_review(store, dumpling, t0, caplog):
    scheduler = Scheduler(store, sink=ExplodingSink())
    with caplog.at_level(logging.WARNING, logger='vocab_srs.events'):
        card = scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)
        due = scheduler.get_due_cards('u1', as_of=t0 + DAY)
    assert card.interval == 1
    assert [c.id for c in due] == [dumpling.id]
    assert 'analytics_notification_failed' in caplog.text


def test_concurrent_reviews_of_one_card(scheduler, store, dumpling, t0):
    barrier = threading.Barrier(10)

    def grade():
        barrier.wait()
        scheduler.review_card(dumpling.id, ReviewQuality.GOOD, timestamp=t0)

    threads = [threading.Thread(target=grade) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    card = store.get_by_id(dumpling.id)
    assert card.repetitions == 10
    assert card.correct_count == 10


class RediscoveringStore(CardStore):
    """Starts a rediscovery of the card while a review is being applied."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.workers = []

    def modify(self, card_id, change):
        def change_then_rediscover(card):
            change(card)
            worker = threading.Thread(
                target=self.find_or_create,
                args=(card.user_id, card.label, card.term),
                kwargs={'timestamp': card.last_review + timedelta(hours=1)},
            )
            worker.start()
            worker.join(timeout=0.2)
            self.workers.append(worker)

        return super().modify(card_id, change_then_rediscover)


def test_rediscovery_during_review_is_kept(backend, t0):
    store = RediscoveringStore(backend)
    card = store.find_or_create('u1', 'tea', '茶', timestamp=t0)

    reviewed = Scheduler(store).review_card(card.id, ReviewQuality.GOOD, timestamp=t0)
    for worker in store.workers:
        worker.join()

    stored = store.get_by_id(card.id)
    assert reviewed.repetitions == 1
    assert stored.repetitions == 1
    assert stored.interval == 1
    assert stored.times_seen_count == 2
    assert stored.last_review == t0 + timedelta(hours=1)


def test_drifted_ease_reaches_exact_half_interval(scheduler, store, dumpling, t0):
    day = t0
    for quality in ['again', 'again', 'easy', 'easy', 'good', 'good', 'good']:
        card = scheduler.review_card(dumpling.id, quality, timestamp=day)
        day = card.next_review
    assert card.ease_factor == 2.06
    assert card.interval == 52


def test_missing_card_review_leaves_no_scheduler_state(scheduler):
    before = dict(vars(scheduler))
    for n in range(5):
        with pytest.raises(CardNotFoundError):
            scheduler.review_card(f'missing-{n}', ReviewQuality.GOOD)
    assert vars(scheduler) == before
