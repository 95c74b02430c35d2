from datetime import date

from reports import build_report

NOW = date(2024, 7, 20)


def make_habits():
    return [
        {
            "name": "Leer",
            "category": "Crecimiento Personal",
            "duration": 2,
            "entries": [
                {"date": "2024-07-18", "completed": True, "is_extra": False},
                {"date": "2024-07-19", "completed": False, "is_extra": False},
                {"date": "2024-07-19", "completed": True, "is_extra": True},
                {"date": "2024-07-20", "completed": True, "is_extra": False},
            ],
        },
        {
            "name": "Correr",
            "category": "Salud",
            "duration": 30,
            "entries": [
                {"date": "2024-06-01", "completed": True, "is_extra": False},
            ],
        },
    ]


def test_report_for_range():
    report = build_report(make_habits(), date(2024, 7, 1), date(2024, 7, 20), NOW)

    assert report["total_entries"] == 4
    assert report["completed_entries"] == 3
    assert report["completion_rate"] == 75.0
    assert report["habits_breakdown"] == [{"name": "Leer", "completed": 3, "total": 4}]
    assert report["category_breakdown"] == [{"name": "Crecimiento Personal", "value": 1}]
    assert report["longest_streak"] == 3
    assert report["activity_by_day"] == {"2024-07-18": 1, "2024-07-19": 1, "2024-07-20": 1}


def test_range_edges_are_included_and_reversed_range_is_fixed():
    report = build_report(make_habits(), date(2024, 7, 20), date(2024, 7, 18), NOW)
    assert report["start"] == date(2024, 7, 18)
    assert report["end"] == date(2024, 7, 20)
    assert report["total_entries"] == 4


def test_empty_report():
    report = build_report([], date(2024, 7, 1), date(2024, 7, 31), NOW)
    assert report["total_entries"] == 0
    assert report["completion_rate"] == 0
    assert report["habits_breakdown"] == []
    assert report["longest_streak"] == 0
