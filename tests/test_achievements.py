from datetime import date, timedelta

from gamification import ACHIEVEMENTS, Achievement, evaluate_achievements

TODAY = date(2024, 7, 20)


def streak_habit(days, name="Meditar", category="Bienestar", duration=60):
    return {
        "name": name,
        "category": category,
        "duration": duration,
        "entries": [
            {"date": (TODAY - timedelta(days=i)).isoformat(), "completed": True, "is_extra": False}
            for i in range(days)
        ],
    }


def suggestion_message(name, category, role="assistant"):
    return {
        "role": role,
        "content": "Prueba esto:",
        "suggestions": [{"name": name, "category": category, "description": "", "duration": 21}],
    }


def test_catalog_ids_are_stable():
    assert [a.id for a in ACHIEVEMENTS] == [
        "first_step", "streak_3_days", "streak_7_days", "streak_21_days",
        "first_habit_completed", "five_habits_completed",
        "health_adept", "personal_growth_adept", "wellness_adept",
        "ai_coach_consult", "ai_habit_added",
    ]
    assert [a.id for a in ACHIEVEMENTS if a.is_secret] == ["ai_habit_added"]


def test_three_day_streak_unlocks():
    result = evaluate_achievements([streak_habit(3)], [], [], TODAY)
    assert "streak_3_days" in result["newly_unlocked"]
    assert "first_step" in result["newly_unlocked"]
    assert "streak_7_days" not in result["newly_unlocked"]


def test_idempotent():
    habits = [streak_habit(7)]
    chat = [{"role": "user", "content": "Hola"}]
    first = evaluate_achievements(habits, chat, [], TODAY)
    second = evaluate_achievements(habits, chat, first["all_unlocked"], TODAY)
    assert second["newly_unlocked"] == []
    assert second["all_unlocked"] == first["all_unlocked"]


def test_unlocked_are_never_lost_and_order_is_preserved():
    result = evaluate_achievements([streak_habit(3)], [], ["wellness_adept", "first_step"], TODAY)
    assert result["all_unlocked"][:2] == ["wellness_adept", "first_step"]
    assert result["newly_unlocked"] == ["streak_3_days"]
    assert result["all_unlocked"] == ["wellness_adept", "first_step", "streak_3_days"]


def test_category_adept_needs_two_completed_habits():
    habits = [
        streak_habit(2, name="Correr", category="Salud", duration=2),
        streak_habit(1, name="Nadar", category="Salud", duration=1),
    ]
    result = evaluate_achievements(habits, [], [], TODAY)
    assert "health_adept" in result["newly_unlocked"]
    assert "first_habit_completed" in result["newly_unlocked"]
    assert "five_habits_completed" not in result["newly_unlocked"]


def test_coach_consult_needs_a_user_message():
    assistant_only = [{"role": "assistant", "content": "¡Hola!"}]
    assert "ai_coach_consult" not in evaluate_achievements([], assistant_only, [], TODAY)["newly_unlocked"]
    with_user = assistant_only + [{"role": "user", "content": "Ayúdame"}]
    assert "ai_coach_consult" in evaluate_achievements([], with_user, [], TODAY)["newly_unlocked"]


def test_suggested_habit_matches_name_and_category_exactly():
    chat = [suggestion_message("Caminata de 30 minutos", "Salud")]

    added = [{"name": "Caminata de 30 minutos", "category": "Salud", "duration": 21, "entries": []}]
    assert "ai_habit_added" in evaluate_achievements(added, chat, [], TODAY)["newly_unlocked"]

    other_category = [{"name": "Caminata de 30 minutos", "category": "Bienestar", "duration": 21}]
    assert "ai_habit_added" not in evaluate_achievements(other_category, chat, [], TODAY)["newly_unlocked"]


def test_suggestions_in_user_messages_do_not_count():
    chat = [suggestion_message("Caminata de 30 minutos", "Salud", role="user")]
    habits = [{"name": "Caminata de 30 minutos", "category": "Salud", "duration": 21}]
    assert "ai_habit_added" not in evaluate_achievements(habits, chat, [], TODAY)["newly_unlocked"]


def test_missing_inputs_unlock_nothing():
    assert evaluate_achievements(None, None, None, TODAY) == {"newly_unlocked": [], "all_unlocked": []}


def test_custom_catalog():
    always = Achievement("always", "Siempre", "", "✨", lambda ctx: True)
    never = Achievement("never", "Nunca", "", "✨", lambda ctx: False)
    result = evaluate_achievements([], [], [], TODAY, catalog=[always, never])
    assert result == {"newly_unlocked": ["always"], "all_unlocked": ["always"]}


def test_wrong_type_fields_do_not_raise():
    habits = [
        {"name": "Correr", "category": ["Salud"], "duration": 1, "entries": 5},
        streak_habit(1, name="Caminata de 30 minutos", category="Salud"),
    ]
    chat = [
        {"role": "assistant", "content": "", "suggestions": 3},
        {"role": "assistant", "content": "", "suggestions": [{"name": "Correr", "category": ["Salud"]}]},
        suggestion_message("Caminata de 30 minutos", "Salud"),
    ]
    result = evaluate_achievements(habits, chat, [], TODAY)
    assert "ai_habit_added" in result["newly_unlocked"]
    assert "first_step" in result["newly_unlocked"]
