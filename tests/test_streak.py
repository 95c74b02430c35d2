from datetime import date, datetime, timedelta

from gamification import calculate_streak

TODAY = date(2024, 7, 20)


def entry(day, completed=True, is_extra=False):
    return {"date": day.isoformat(), "completed": completed, "is_extra": is_extra}


def run_ending_today(days, skip=None):
    """N días seguidos terminando hoy, opcionalmente saltándose uno"""
    entries = []
    for offset in range(days):
        day = TODAY - timedelta(days=offset)
        if day != skip:
            entries.append(entry(day))
    return entries


def test_no_completed_entries_means_no_streak():
    entries = [entry(TODAY, completed=False), entry(TODAY - timedelta(days=1), completed=False)]
    assert calculate_streak(entries, TODAY) == {"count": 0, "just_increased": False}


def test_empty_or_missing_entries():
    assert calculate_streak([], TODAY)["count"] == 0
    assert calculate_streak(None, TODAY)["count"] == 0


def test_last_completion_older_than_yesterday_breaks_the_streak():
    entries = run_ending_today(10)
    two_days_later = TODAY + timedelta(days=2)
    # Vista desde dos días después, la racha de 10 ya no cuenta
    assert calculate_streak(entries, two_days_later)["count"] == 0


def test_consecutive_run_ending_today():
    assert calculate_streak(run_ending_today(5), TODAY)["count"] == 5


def test_skipped_day_truncates_to_the_run_ending_today():
    skip = TODAY - timedelta(days=3)
    assert calculate_streak(run_ending_today(8, skip=skip), TODAY)["count"] == 3


def test_streak_ending_yesterday_is_still_alive():
    entries = [entry(TODAY - timedelta(days=1)), entry(TODAY - timedelta(days=2))]
    result = calculate_streak(entries, TODAY)
    assert result == {"count": 2, "just_increased": False}


def test_broken_run_scenario():
    entries = [
        {"date": "2024-07-17", "completed": True},
        {"date": "2024-07-18", "completed": False},
        {"date": "2024-07-19", "completed": True},
        {"date": "2024-07-20", "completed": True},
    ]
    assert calculate_streak(entries, date(2024, 7, 20)) == {"count": 2, "just_increased": True}


def test_single_day_after_a_break_is_not_an_increase():
    entries = [entry(TODAY), entry(TODAY - timedelta(days=5))]
    assert calculate_streak(entries, TODAY) == {"count": 1, "just_increased": False}


def test_extra_entry_counts_towards_the_streak():
    entries = [
        entry(TODAY - timedelta(days=1), completed=False),
        entry(TODAY - timedelta(days=1), completed=True, is_extra=True),
        entry(TODAY),
    ]
    assert calculate_streak(entries, TODAY)["count"] == 2


def test_same_day_entries_count_once():
    entries = [entry(TODAY), entry(TODAY, is_extra=True), entry(TODAY - timedelta(days=1))]
    assert calculate_streak(entries, TODAY)["count"] == 2


def test_future_entries_are_ignored():
    entries = [entry(TODAY + timedelta(days=1)), entry(TODAY)]
    assert calculate_streak(entries, TODAY)["count"] == 1


def test_unparseable_dates_are_ignored():
    entries = [{"date": "ayer", "completed": True}, {"completed": True}, entry(TODAY)]
    assert calculate_streak(entries, TODAY)["count"] == 1


def test_now_can_be_a_datetime_and_input_order_does_not_matter():
    entries = list(reversed(run_ending_today(4)))
    now = datetime(2024, 7, 20, 23, 59)
    assert calculate_streak(entries, now)["count"] == 4


def test_is_pure():
    entries = run_ending_today(3)
    snapshot = [dict(e) for e in entries]
    first = calculate_streak(entries, TODAY)
    assert calculate_streak(entries, TODAY) == first
    assert entries == snapshot


def test_wrong_type_entries_count_as_empty():
    for entries in (5, "2024-07-20", {"date": "2024-07-20", "completed": True}):
        assert calculate_streak(entries, TODAY) == {"count": 0, "just_increased": False}
