import asyncio
from datetime import date, datetime
from types import SimpleNamespace

import pytz

import scheduler
from models import Habit, HabitEntry, User
from scheduler import check_reminders, pending_habits, reminder_text, user_now

UTC_NOW = datetime(2024, 7, 20, 17, 0, tzinfo=pytz.utc)  # 19:00 en Madrid (verano)


def test_user_now_uses_the_user_timezone():
    madrid = user_now(SimpleNamespace(timezone="Europe/Madrid"), UTC_NOW)
    new_york = user_now(SimpleNamespace(timezone="America/New_York"), UTC_NOW)
    assert madrid.strftime("%H:%M") == "19:00"
    assert new_york.strftime("%H:%M") == "13:00"


def test_user_now_falls_back_on_unknown_timezone():
    local = user_now(SimpleNamespace(timezone="Marte/Olympus"), UTC_NOW)
    assert local.strftime("%H:%M") == "19:00"


def test_pending_habits():
    today = date(2024, 7, 20)
    done = {"name": "Leer", "entries": [{"date": "2024-07-20", "completed": True}]}
    logged_not_done = {"name": "Correr", "entries": [{"date": "2024-07-20", "completed": False}]}
    done_yesterday = {"name": "Meditar", "entries": [{"date": "2024-07-19", "completed": True}]}
    pending = pending_habits([done, logged_not_done, done_yesterday], today)
    assert [h["name"] for h in pending] == ["Correr", "Meditar"]


def test_reminder_text():
    assert reminder_text("Leer") == '¡No te olvides de tu reto!\nAún no has completado: "Leer". ¡Tú puedes!'


def test_check_reminders_sends_one_message_per_pending_habit(db, monkeypatch):
    sent = []

    async def fake_send(telegram_id, text):
        sent.append((telegram_id, text))
        return True

    monkeypatch.setattr(scheduler, "send_telegram_message", fake_send)

    user = User(email="ana@example.com", password_hash="x", display_name="Ana",
                notifications_enabled=True, telegram_id="12345", reminder_time="19:00",
                timezone="Europe/Madrid")
    done = Habit(name="Leer", category="Crecimiento Personal", duration=30)
    done.entries.append(HabitEntry(date=date(2024, 7, 20), completed=True))
    user.habits.extend([done, Habit(name="Correr", category="Salud", duration=21)])

    muted = User(email="luis@example.com", password_hash="x", display_name="Luis",
                 notifications_enabled=False, telegram_id="999", reminder_time="19:00")
    muted.habits.append(Habit(name="Nadar", category="Salud", duration=10))

    db.add_all([user, muted])
    db.commit()

    assert asyncio.run(check_reminders(UTC_NOW)) == 1
    assert sent == [("12345", reminder_text("Correr"))]


def test_check_reminders_outside_reminder_time(db, monkeypatch):
    sent = []

    async def fake_send(telegram_id, text):
        sent.append(text)
        return True

    monkeypatch.setattr(scheduler, "send_telegram_message", fake_send)

    user = User(email="ana@example.com", password_hash="x", display_name="Ana",
                notifications_enabled=True, telegram_id="12345", reminder_time="08:30")
    user.habits.append(Habit(name="Correr", category="Salud", duration=21))
    db.add(user)
    db.commit()

    assert asyncio.run(check_reminders(UTC_NOW)) == 0
    assert sent == []


def test_send_without_bot_returns_false(monkeypatch):
    monkeypatch.setattr(scheduler, "bot_instance", None)
    assert asyncio.run(scheduler.send_telegram_message("1", "hola")) is False
