"""
=============================================================================
REPORTS.PY — Informe de Rendimiento
=============================================================================
Resume la actividad de un usuario en un rango de fechas:
  - Entradas registradas y completadas (tasa de cumplimiento)
  - Días completados por reto
  - Retos superados por categoría
  - Mejor racha actual
  - Calendario de actividad (entradas completadas por día)

Función pura, igual que el motor de gamificación: main.py carga los retos
y le pasa el rango y "ahora".
"""

from datetime import date

from gamification import as_day, as_list, calculate_streak, entries_of, is_habit_completed, read_field


def build_report(habits, start: date, end: date, now) -> dict:
    """
    Genera el informe del rango [start, end], ambos incluidos.

    Solo entran en el desglose los retos con alguna entrada dentro del rango.
    La mejor racha mira todos los retos.
    """
    if end < start:
        start, end = end, start

    total_entries = 0
    completed_entries = 0
    longest_streak = 0
    habits_breakdown = []
    category_counts = {}
    activity_by_day = {}

    for habit in as_list(habits):
        entries = entries_of(habit)
        longest_streak = max(longest_streak, calculate_streak(entries, now)["count"])

        in_range = []
        for entry in entries:
            day = as_day(read_field(entry, "date"))
            if day is not None and start <= day <= end:
                in_range.append((day, entry))
        if not in_range:
            continue

        completed_in_range = [(day, e) for day, e in in_range if read_field(e, "completed", False)]
        total_entries += len(in_range)
        completed_entries += len(completed_in_range)

        habits_breakdown.append({
            "name": read_field(habit, "name", ""),
            "completed": len(completed_in_range),
            "total": len(in_range),
        })

        for day, _ in completed_in_range:
            key = day.isoformat()
            activity_by_day[key] = activity_by_day.get(key, 0) + 1

        if is_habit_completed(habit):
            category = read_field(habit, "category", "")
            category_counts[category] = category_counts.get(category, 0) + 1

    return {
        "start": start,
        "end": end,
        "total_entries": total_entries,
        "completed_entries": completed_entries,
        "completion_rate": round(completed_entries / total_entries * 100, 1) if total_entries > 0 else 0,
        "habits_breakdown": habits_breakdown,
        "category_breakdown": [{"name": k, "value": v} for k, v in category_counts.items()],
        "longest_streak": longest_streak,
        "activity_by_day": activity_by_day,
    }
