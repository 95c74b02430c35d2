"""
=============================================================================
MODELS.PY — Modelos (Tablas) de la Base de Datos
=============================================================================
Cada clase = una tabla. Cada atributo = una columna.

RELACIONES:
  USER
  ├── habits[] ──→ entries[]      (retos y su registro diario)
  ├── chat_messages[]             (conversación con el coach)
  └── public_profile              (ficha en el ranking, solo si es público)

Los logros NO tienen tabla: el catálogo vive en gamification.py y el usuario
guarda solo la lista de ids desbloqueados (unlocked_achievements).
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, Date, DateTime,
    ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship
from database import Base
import enum


# =============================================================================
# ===================== ENUMS =================================================
# =============================================================================

class UserRole(str, enum.Enum):
    """Rol del usuario en la plataforma"""
    user = "user"
    admin = "admin"

class Theme(str, enum.Enum):
    light = "light"
    dark = "dark"

class ChatRole(str, enum.Enum):
    """Quién escribió el mensaje del chat"""
    user = "user"
    assistant = "assistant"


# =============================================================================
# ===================== TABLA 1: USERS ========================================
# =============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── Datos básicos ──
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=False)
    photo_url = Column(String(500), nullable=True)
    gender = Column(String(30), nullable=True)

    # ── Configuración ──
    role = Column(String(20), default=UserRole.user.value)
    theme = Column(String(10), default=Theme.light.value)
    timezone = Column(String(50), default="Europe/Madrid")
    is_public = Column(Boolean, default=False)
    # is_public → aparece en el ranking de la comunidad

    # ── Recordatorios ──
    notifications_enabled = Column(Boolean, default=False)
    reminder_time = Column(String(5), default="19:00")
    telegram_id = Column(String(50), nullable=True)
    # Los recordatorios se envían por Telegram si hay un chat vinculado

    # ── Gamificación ──
    xp = Column(Integer, default=0)
    unlocked_achievements = Column(JSON, default=list)
    # unlocked_achievements → ["first_step", "streak_3_days", ...] (solo crece)

    created_at = Column(DateTime, default=datetime.utcnow)

    # ── Relaciones ──
    habits = relationship("Habit", back_populates="user", cascade="all, delete-orphan",
                          order_by="Habit.id")
    chat_messages = relationship("ChatMessage", back_populates="user", cascade="all, delete-orphan",
                                 order_by="ChatMessage.id")
    public_profile = relationship("PublicProfile", back_populates="user", uselist=False,
                                  cascade="all, delete-orphan")


# =============================================================================
# ===================== TABLA 2: HABITS (RETOS) ===============================
# =============================================================================

class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    name = Column(String(100), nullable=False)
    category = Column(String(60), nullable=False)
    # category → texto libre: "Salud", "Crecimiento Personal", "Bienestar"...
    description = Column(Text, default="")
    duration = Column(Integer, nullable=False)
    # duration → días principales necesarios para superar el reto

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="habits")
    entries = relationship("HabitEntry", back_populates="habit", cascade="all, delete-orphan",
                           order_by="HabitEntry.id")


# =============================================================================
# ===================== TABLA 3: HABIT_ENTRIES ================================
# =============================================================================
# Registro diario de un reto. Una entrada PRINCIPAL por día y tantas
# entradas EXTRA como el usuario quiera ese mismo día.

class HabitEntry(Base):
    __tablename__ = "habit_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False)

    date = Column(Date, nullable=False)
    completed = Column(Boolean, default=False)
    journal = Column(Text, default="")
    is_extra = Column(Boolean, default=False)
    # is_extra → avance adicional del mismo día (no cuenta para la duración)

    created_at = Column(DateTime, default=datetime.utcnow)

    habit = relationship("Habit", back_populates="entries")


# Una sola entrada principal por reto y día
Index(
    "uq_habit_main_entry_per_day",
    HabitEntry.habit_id, HabitEntry.date,
    unique=True,
    sqlite_where=HabitEntry.is_extra.is_(False),
    postgresql_where=HabitEntry.is_extra.is_(False),
)


# =============================================================================
# ===================== TABLA 4: CHAT_MESSAGES ================================
# =============================================================================

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    suggestions = Column(JSON, nullable=True)
    # suggestions → [{"name", "category", "description", "duration"}, ...]

    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="chat_messages")


# =============================================================================
# ===================== TABLA 5: PUBLIC_PROFILES ==============================
# =============================================================================
# Copia mínima y pública del usuario para el ranking. Solo existe mientras
# el usuario tenga is_public=True.

class PublicProfile(Base):
    __tablename__ = "public_profiles"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    display_name = Column(String(100), nullable=False)
    photo_url = Column(String(500), nullable=True)
    rank_name = Column(String(50), nullable=False)
    completed_habits = Column(Integer, default=0, index=True)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="public_profile")
