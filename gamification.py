"""
=============================================================================
GAMIFICATION.PY — Motor de Gamificación
=============================================================================
Gestiona:
  - Rachas (días consecutivos completando un reto)
  - Retos superados por categoría
  - Rangos (Novato → Leyenda)
  - Logros (catálogo fijo de insignias)
  - XP por día completado

Todo aquí son funciones PURAS: reciben los retos, el chat y "ahora" como
argumentos y devuelven resultados nuevos. Nada de BD ni de reloj del sistema.
Así main.py decide cuándo guardar y los tests deciden qué día es hoy.

Los retos y entradas pueden ser modelos SQLAlchemy, esquemas Pydantic o
diccionarios: se leen con read_field() y cualquier campo ausente o roto se trata
como vacío en lugar de lanzar una excepción.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import cached_property
from typing import Callable, Optional


# =============================================================================
# ===================== LECTURA DE CAMPOS =====================================
# =============================================================================

def read_field(obj, name: str, default=None):
    """Lee un campo de un modelo, esquema o dict. Si no existe → default."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def as_day(value) -> Optional[date]:
    """Convierte datetime / date / 'YYYY-MM-DD' en date. Si no se puede → None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def as_list(value) -> list:
    """Listas y tuplas tal cual; cualquier otra cosa cuenta como vacía"""
    return list(value) if isinstance(value, (list, tuple)) else []


def entries_of(habit) -> list:
    return as_list(read_field(habit, "entries"))


def is_main_entry(entry) -> bool:
    """Entrada principal del día (no extra)"""
    return not read_field(entry, "is_extra", False)


# =============================================================================
# ===================== RACHAS ================================================
# =============================================================================

def calculate_streak(entries, now) -> dict:
    """
    Calcula la racha actual de un reto.

    Reglas:
      - Se ignoran las entradas con fecha posterior a hoy.
      - La racha solo está "viva" si la última entrada completada es de hoy
        o de ayer. Si no, la racha es 0.
      - Desde esa fecha se cuentan días hacia atrás mientras cada día tenga
        una entrada completada. Varias entradas el mismo día cuentan una vez.
      - just_increased → hoy está completado y la entrada inmediatamente
        anterior en la lista ordenada es de ayer y también está completada.

    Retorna:
      {"count": 2, "just_increased": True}
    """
    today = as_day(now)
    broken = {"count": 0, "just_increased": False}
    if today is None:
        return broken

    dated = []
    for entry in as_list(entries):
        day = as_day(read_field(entry, "date"))
        if day is None or day > today:
            continue
        dated.append((day, bool(read_field(entry, "completed", False))))

    # sort() es estable: las entradas del mismo día conservan su orden
    dated.sort(key=lambda item: item[0], reverse=True)

    last_completed = next((day for day, done in dated if done), None)
    if last_completed is None:
        return broken

    yesterday = today - timedelta(days=1)
    if last_completed not in (today, yesterday):
        return broken

    completed_days = {day for day, done in dated if done}
    count = 0
    expected = last_completed
    while expected in completed_days:
        count += 1
        expected -= timedelta(days=1)

    just_increased = (
        last_completed == today
        and len(dated) > 1
        and dated[1] == (yesterday, True)
    )

    return {"count": count, "just_increased": just_increased}


# =============================================================================
# ===================== RETOS SUPERADOS =======================================
# =============================================================================

def is_habit_completed(habit) -> bool:
    """
    Un reto está superado cuando tiene tantas entradas PRINCIPALES como su
    duración. Cuenta todas las principales, completadas o no.
    """
    duration = read_field(habit, "duration")
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        return False
    main_entries = sum(1 for e in entries_of(habit) if is_main_entry(e))
    return main_entries >= duration


def aggregate_completions(habits) -> dict:
    """
    Cuenta los retos superados por categoría.

    Retorna:
      {"Salud": 2, "Bienestar": 1, "total": 3}

    Las categorías sin retos superados no aparecen.
    """
    counts = {}
    total = 0
    for habit in as_list(habits):
        if not is_habit_completed(habit):
            continue
        total += 1
        category = read_field(habit, "category")
        if isinstance(category, str):
            counts[category] = counts.get(category, 0) + 1
    return {**counts, "total": total}


# =============================================================================
# ===================== RANGOS ================================================
# =============================================================================
# Ordenados de menor a mayor dificultad. El primero no pide nada para que
# siempre haya un rango que devolver.

@dataclass(frozen=True)
class Rank:
    name: str
    icon: str
    description: str
    requirements: dict = field(default_factory=dict)


RANKS = [
    Rank("Novato", "🌱", "Todo gran viaje empieza con un primer paso."),
    Rank("Aprendiz", "📘", "Has superado tu primer reto de salud.",
         {"Salud": 1}),
    Rank("Explorador", "🧭", "Cuerpo y mente en marcha.",
         {"Salud": 1, "Crecimiento Personal": 1}),
    Rank("Constante", "🔥", "La constancia empieza a notarse.",
         {"Salud": 2, "Crecimiento Personal": 2, "Bienestar": 1}),
    Rank("Maestro", "🏅", "Dominas el arte de formar hábitos.",
         {"Salud": 3, "Crecimiento Personal": 3, "Bienestar": 3}),
    Rank("Leyenda", "👑", "Pocos llegan hasta aquí.",
         {"Salud": 5, "Crecimiento Personal": 5, "Bienestar": 5}),
]


def rank_requirements_met(rank: Rank, category_completions) -> bool:
    completions = category_completions or {}
    return all(
        (completions.get(category) or 0) >= required
        for category, required in rank.requirements.items()
    )


def resolve_rank(category_completions, ranks=RANKS) -> Optional[Rank]:
    """Devuelve el rango más alto cuyos requisitos se cumplen (o el primero)"""
    if not ranks:
        return None
    for rank in reversed(ranks):
        if rank_requirements_met(rank, category_completions):
            return rank
    return ranks[0]


# =============================================================================
# ===================== LOGROS ================================================
# =============================================================================

@dataclass
class AchievementContext:
    """Lo que un logro puede mirar: retos, chat y el momento de la evaluación"""
    habits: list
    chat_history: list
    now: datetime

    @cached_property
    def completions(self) -> dict:
        return aggregate_completions(self.habits)

    @cached_property
    def best_streak(self) -> int:
        return max(
            (calculate_streak(entries_of(h), self.now)["count"] for h in self.habits),
            default=0,
        )

    @cached_property
    def suggestions(self) -> list:
        """Sugerencias que el coach ha hecho en algún mensaje"""
        found = []
        for message in self.chat_history:
            if read_field(message, "role") != "assistant":
                continue
            found.extend(as_list(read_field(message, "suggestions")))
        return found


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    checker: Callable[[AchievementContext], bool]
    is_secret: bool = False


def _any_completed_entry(ctx: AchievementContext) -> bool:
    return any(
        read_field(e, "completed", False) for h in ctx.habits for e in entries_of(h)
    )


def _streak_at_least(days: int):
    return lambda ctx: ctx.best_streak >= days


def _completed_at_least(count: int, category: str = "total"):
    return lambda ctx: (ctx.completions.get(category) or 0) >= count


def _consulted_coach(ctx: AchievementContext) -> bool:
    return any(read_field(m, "role") == "user" for m in ctx.chat_history)


def _name_and_category(item):
    """(name, category) si ambos son texto; si no, None"""
    pair = (read_field(item, "name"), read_field(item, "category"))
    return pair if all(isinstance(v, str) for v in pair) else None


def _added_suggested_habit(ctx: AchievementContext) -> bool:
    suggested = {_name_and_category(s) for s in ctx.suggestions} - {None}
    return any(_name_and_category(h) in suggested for h in ctx.habits)


ACHIEVEMENTS = [
    # ── Constancia y rachas ──
    Achievement("first_step", "Primer Paso",
                "Completa tu primer día de cualquier reto.", "🌅",
                _any_completed_entry),
    Achievement("streak_3_days", "¡En Racha!",
                "Mantén una racha de 3 días en cualquier reto.", "🔥",
                _streak_at_least(3)),
    Achievement("streak_7_days", "Semana Perfecta",
                "Mantén una racha de 7 días en cualquier reto.", "⚡",
                _streak_at_least(7)),
    Achievement("streak_21_days", "Hábito Forjado",
                "Mantén una racha de 21 días. ¡Esto ya es un hábito!", "🎯",
                _streak_at_least(21)),

    # ── Retos superados ──
    Achievement("first_habit_completed", "Reto Superado",
                "Completa tu primer reto (alcanza la duración total).", "🏆",
                _completed_at_least(1)),
    Achievement("five_habits_completed", "Coleccionista de Hábitos",
                "Completa 5 retos en total.", "👑",
                _completed_at_least(5)),

    # ── Especialización por categoría ──
    Achievement("health_adept", "Cuerpo Activo",
                'Completa 2 retos en la categoría "Salud".', "💪",
                _completed_at_least(2, "Salud")),
    Achievement("personal_growth_adept", "Mente Curiosa",
                'Completa 2 retos en la categoría "Crecimiento Personal".', "📚",
                _completed_at_least(2, "Crecimiento Personal")),
    Achievement("wellness_adept", "Paz Interior",
                'Completa 2 retos en la categoría "Bienestar".', "🪶",
                _completed_at_least(2, "Bienestar")),

    # ── Coach IA ──
    Achievement("ai_coach_consult", "Buscando Guía",
                "Pide tu primera sugerencia al Coach IA.", "🤖",
                _consulted_coach),
    Achievement("ai_habit_added", "Plan en Marcha",
                "Añade un reto sugerido directamente por el Coach IA.", "➕",
                _added_suggested_habit, is_secret=True),
]

ACHIEVEMENTS_BY_ID = {a.id: a for a in ACHIEVEMENTS}


def evaluate_achievements(habits, chat_history, unlocked, now, catalog=ACHIEVEMENTS) -> dict:
    """
    Evalúa el catálogo y devuelve los logros recién desbloqueados.

    Un logro ya desbloqueado nunca se vuelve a evaluar ni se pierde, así que
    llamar dos veces seguidas con el resultado anterior no desbloquea nada.

    Retorna:
      {"newly_unlocked": ["streak_3_days"],
       "all_unlocked": ["first_step", "streak_3_days"]}
    """
    already = list(unlocked or [])
    already_set = set(already)
    ctx = AchievementContext(
        habits=as_list(habits),
        chat_history=as_list(chat_history),
        now=now,
    )

    newly_unlocked = [
        achievement.id
        for achievement in catalog
        if achievement.id not in already_set and achievement.checker(ctx)
    ]

    all_unlocked = list(dict.fromkeys(already + newly_unlocked))
    return {"newly_unlocked": newly_unlocked, "all_unlocked": all_unlocked}


# =============================================================================
# ===================== XP ====================================================
# =============================================================================

XP_REWARDS = {
    "entry_complete": 1,   # Completar la entrada principal de un día
}


def xp_for_entry_update(was_completed: bool, is_completed: bool, is_extra: bool) -> int:
    """
    XP por actualizar una entrada. Solo puntúa una entrada PRINCIPAL que pasa
    de pendiente a completada. Las extra no dan XP.
    """
    if is_completed and not was_completed and not is_extra:
        return XP_REWARDS["entry_complete"]
    return 0
