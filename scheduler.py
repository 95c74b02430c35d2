"""
=============================================================================
SCHEDULER.PY — Recordatorios Diarios
=============================================================================
Si el usuario activa las notificaciones y vincula su Telegram, a su hora de
recordatorio (por defecto 19:00, en SU zona horaria) le avisamos de cada
reto que aún no ha completado hoy.

Usa APScheduler con CronTrigger:
  - Cada MINUTO se ejecuta check_reminders()
  - Compara la hora local de cada usuario con su reminder_time
  - Si coincide → un mensaje de Telegram por reto pendiente
"""

import logging
from datetime import date, datetime
from typing import Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from telegram import Bot

from database import SessionLocal
from gamification import as_day, as_list, entries_of, read_field
from models import User

logger = logging.getLogger("habitica.scheduler")

DEFAULT_TIMEZONE = "Europe/Madrid"
DEFAULT_REMINDER_TIME = "19:00"

# Referencias globales (se asignan al arrancar)
bot_instance: Optional[Bot] = None
scheduler: Optional[AsyncIOScheduler] = None


def user_now(user, utc_now: Optional[datetime] = None) -> datetime:
    """Hora actual en la zona horaria del usuario"""
    try:
        tz = pytz.timezone(user.timezone or DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        tz = pytz.timezone(DEFAULT_TIMEZONE)
    utc_now = utc_now or datetime.now(pytz.utc)
    return utc_now.astimezone(tz)


def pending_habits(habits, today: date) -> list:
    """Retos sin ninguna entrada completada hoy"""
    pending = []
    for habit in as_list(habits):
        done_today = any(
            as_day(read_field(e, "date")) == today and read_field(e, "completed", False)
            for e in entries_of(habit)
        )
        if not done_today:
            pending.append(habit)
    return pending


def reminder_text(habit_name: str) -> str:
    return f'¡No te olvides de tu reto!\nAún no has completado: "{habit_name}". ¡Tú puedes!'


# =============================================================================
# ===================== ENVÍO DE MENSAJES =====================================
# =============================================================================

async def send_telegram_message(telegram_id: str, text: str) -> bool:
    """Envía un mensaje por Telegram. Los fallos se registran y no se propagan."""
    if not bot_instance:
        logger.warning("Bot no inicializado, no se puede enviar mensaje")
        return False

    try:
        await bot_instance.send_message(chat_id=telegram_id, text=text)
        return True
    except Exception as e:
        logger.error(f"Error enviando mensaje a {telegram_id}: {e}")
        return False


# =============================================================================
# ===================== VERIFICAR RECORDATORIOS ===============================
# =============================================================================

async def check_reminders(utc_now: Optional[datetime] = None) -> int:
    """
    Se ejecuta cada minuto. Devuelve cuántos recordatorios se han enviado.
    """
    sent = 0
    db = SessionLocal()

    try:
        users = db.query(User).filter(
            User.notifications_enabled == True,
            User.telegram_id != None,
        ).all()

        for user in users:
            try:
                local_now = user_now(user, utc_now)
                if local_now.strftime("%H:%M") != (user.reminder_time or DEFAULT_REMINDER_TIME):
                    continue

                for habit in pending_habits(user.habits, local_now.date()):
                    if await send_telegram_message(user.telegram_id, reminder_text(habit.name)):
                        sent += 1

            except Exception as e:
                logger.error(f"Error procesando recordatorios de {user.display_name}: {e}")

    finally:
        db.close()

    if sent:
        logger.info(f"🔔 {sent} recordatorios enviados")
    return sent


# =============================================================================
# ===================== INICIALIZAR SCHEDULER =================================
# =============================================================================

def create_scheduler(bot: Bot) -> AsyncIOScheduler:
    """Crea el scheduler con la tarea de recordatorios (cada minuto)"""
    global bot_instance, scheduler
    bot_instance = bot

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        check_reminders,
        CronTrigger(second=0),
        id="check_reminders",
        name="Verificar recordatorios",
        replace_existing=True
    )

    logger.info("⏰ Scheduler configurado: recordatorios cada minuto")
    return scheduler


def start_scheduler():
    if scheduler and not scheduler.running:
        scheduler.start()
        logger.info("⏰ Scheduler arrancado")


def stop_scheduler():
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("⏰ Scheduler parado")
