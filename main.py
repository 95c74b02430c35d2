"""
=============================================================================
MAIN.PY — La API de Habitica
=============================================================================
Este archivo define TODOS los endpoints de la API REST.

Organización por secciones:
  1. AUTH          → Registro, login, perfil, ajustes
  2. HABITS        → Crear, listar y borrar retos
  3. ENTRIES       → Registrar el avance del día, marcar, escribir el diario
  4. GAMIFICATION  → Perfil (XP + rango), logros, rangos
  5. LEADERBOARD   → Ranking público
  6. COACH         → Chat con el coach IA
  7. REPORTS       → Informe de rendimiento
  8. ADMIN         → Usuarios, roles, datos de prueba

Después de cada cambio en retos, entradas o chat se vuelve a evaluar el
catálogo de logros (_refresh_gamification) y, si el usuario es público,
se actualiza su ficha del ranking.
"""

import os
import logging
import traceback
from datetime import datetime, date, timedelta
from contextlib import asynccontextmanager
from typing import Optional

import anyio
import pytz
from fastapi import FastAPI, Depends, HTTPException, status, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db, init_db
from models import User, Habit, HabitEntry, ChatMessage, PublicProfile, UserRole
from schemas import *
from auth import (
    hash_password, verify_password, create_access_token, initial_role,
    get_current_user, require_admin
)
from gamification import (
    ACHIEVEMENTS, ACHIEVEMENTS_BY_ID, RANKS,
    calculate_streak, aggregate_completions, resolve_rank, rank_requirements_met,
    evaluate_achievements, is_habit_completed, is_main_entry, xp_for_entry_update
)
from coach import ask_coach, CoachError, CoachUnavailable, FALLBACK_ANSWER
from reports import build_report
from scheduler import user_now

# ─────────────────────────────────────────────────────────────────────────────
# LOGGING
# ─────────────────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s"
)
logger = logging.getLogger("habitica.api")

TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
DEFAULT_PHOTO_URL = "https://i.pravatar.cc/150?u={user_id}"
LEADERBOARD_LIMIT = 50
CLEARABLE_USER_FIELDS = {"photo_url", "gender", "telegram_id"}

# ─────────────────────────────────────────────────────────────────────────────
# INICIALIZACIÓN TEMPRANA DE LA BD
# ─────────────────────────────────────────────────────────────────────────────

try:
    init_db()
    logger.info("✅ Base de datos inicializada (startup)")
except Exception as e:
    logger.error(f"❌ Error inicializando BD: {e}")


# ─────────────────────────────────────────────────────────────────────────────
# LIFESPAN (Arranque y apagado)
# ─────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Arranque:
      1. Crear tablas si no existen
      2. Arrancar el scheduler de recordatorios (solo con TELEGRAM_BOT_TOKEN)
    Apagado:
      - Parar el scheduler
    """
    logger.info("🚀 Arrancando Habitica...")
    init_db()

    reminders_on = False
    if TELEGRAM_BOT_TOKEN:
        from telegram import Bot
        from scheduler import create_scheduler, start_scheduler
        create_scheduler(Bot(TELEGRAM_BOT_TOKEN))
        start_scheduler()
        reminders_on = True
    else:
        logger.warning("⚠️ Recordatorios desactivados (sin TELEGRAM_BOT_TOKEN)")

    logger.info("🎉 Habitica operativo")

    yield

    logger.info("🛑 Apagando Habitica...")
    if reminders_on:
        from scheduler import stop_scheduler
        stop_scheduler()
    logger.info("👋 Apagado completo")


# ─────────────────────────────────────────────────────────────────────────────
# APLICACIÓN FASTAPI
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Habitica API",
    description="Retos de hábitos gamificados con coach IA",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Captura errores no manejados y devuelve detalles útiles"""
    error_msg = str(exc)
    error_trace = traceback.format_exc()
    logger.error(f"❌ Error no manejado en {request.url}: {error_msg}\n{error_trace}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": error_msg,
            "type": type(exc).__name__,
            "path": str(request.url)
        }
    )


def get_now() -> datetime:
    """Momento actual (UTC). Es una dependencia para poder fijarlo en los tests."""
    return datetime.now(pytz.utc)


# =============================================================================
# ===================== HELPERS ===============================================
# =============================================================================

def _habit_response(habit: Habit, now: datetime) -> HabitResponse:
    return HabitResponse(
        id=habit.id,
        name=habit.name,
        category=habit.category,
        description=habit.description or "",
        duration=habit.duration,
        created_at=habit.created_at,
        entries=[HabitEntryResponse.model_validate(e) for e in habit.entries],
        streak=StreakInfo(**calculate_streak(habit.entries, now)),
        main_entries=sum(1 for e in habit.entries if is_main_entry(e)),
        completed=is_habit_completed(habit),
    )


def _achievement_response(achievement, unlocked: bool) -> AchievementResponse:
    """Los logros secretos no enseñan nombre ni descripción hasta desbloquearse"""
    hidden = achievement.is_secret and not unlocked
    return AchievementResponse(
        id=achievement.id,
        name="Logro secreto" if hidden else achievement.name,
        description="???" if hidden else achievement.description,
        icon="🔒" if hidden else achievement.icon,
        is_secret=achievement.is_secret,
        unlocked=unlocked,
    )


def _rank_response(rank, completions: dict, current) -> RankResponse:
    return RankResponse(
        name=rank.name,
        icon=rank.icon,
        description=rank.description,
        requirements=dict(rank.requirements),
        achieved=rank_requirements_met(rank, completions),
        current=current is not None and rank.name == current.name,
    )


def _publish_profile(db: Session, user: User):
    """Crea o actualiza la ficha pública del usuario para el ranking"""
    completions = aggregate_completions(user.habits)
    rank = resolve_rank(completions, RANKS)

    profile = user.public_profile
    if profile is None:
        profile = PublicProfile(user_id=user.id)
        db.add(profile)
        user.public_profile = profile

    profile.display_name = user.display_name
    profile.photo_url = user.photo_url or DEFAULT_PHOTO_URL.format(user_id=user.id)
    profile.rank_name = rank.name
    profile.completed_habits = completions["total"]


def _refresh_gamification(db: Session, user: User, now: datetime) -> list[AchievementResponse]:
    """
    Vuelve a evaluar los logros tras un cambio y guarda los nuevos.
    No hace commit: lo hace el endpoint que la llama.
    """
    result = evaluate_achievements(
        user.habits, user.chat_messages, user.unlocked_achievements or [], now
    )

    if result["newly_unlocked"]:
        user.unlocked_achievements = result["all_unlocked"]
        for achievement_id in result["newly_unlocked"]:
            logger.info(f"🏆 {user.display_name} desbloqueó: {ACHIEVEMENTS_BY_ID[achievement_id].name}")

    if user.is_public:
        _publish_profile(db, user)

    return [
        _achievement_response(ACHIEVEMENTS_BY_ID[a], True) for a in result["newly_unlocked"]
    ]


def _get_user_habit(db: Session, user: User, habit_id: int) -> Habit:
    habit = db.query(Habit).filter(
        Habit.id == habit_id, Habit.user_id == user.id
    ).first()
    if not habit:
        raise HTTPException(status_code=404, detail="Reto no encontrado")
    return habit


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


# =============================================================================
# ===================== HEALTH CHECK ==========================================
# =============================================================================

@app.get("/", tags=["Health"])
def health_check():
    """Verifica que la API está viva"""
    return {
        "status": "ok",
        "app": "Habitica",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat()
    }


# =============================================================================
# ===================== SECCIÓN 1: AUTH =======================================
# =============================================================================

@app.post("/auth/register", response_model=TokenResponse, tags=["Auth"])
def register(data: UserRegister, db: Session = Depends(get_db)):
    """Registra un usuario nuevo y devuelve su token"""
    existing = db.query(User).filter(User.email == data.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Ya existe una cuenta con este email"
        )

    user = User(
        email=data.email,
        password_hash=hash_password(data.password),
        display_name=data.display_name,
        role=initial_role(data.email),
        unlocked_achievements=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    token = create_access_token(user.id, user.email)
    logger.info(f"👤 Nuevo usuario registrado: {user.display_name} ({user.email})")

    return TokenResponse(access_token=token, user_id=user.id, display_name=user.display_name)


@app.post("/auth/login", response_model=TokenResponse, tags=["Auth"])
def login(data: UserLogin, db: Session = Depends(get_db)):
    """Inicia sesión con email y contraseña"""
    user = db.query(User).filter(User.email == data.email).first()

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos"
        )

    token = create_access_token(user.id, user.email)
    return TokenResponse(access_token=token, user_id=user.id, display_name=user.display_name)


@app.get("/auth/me", response_model=UserResponse, tags=["Auth"])
def get_me(user: User = Depends(get_current_user)):
    """Devuelve los datos del usuario autenticado"""
    return user


@app.patch("/auth/me", response_model=UserResponse, tags=["Auth"])
def update_me(data: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Actualiza el perfil y los ajustes del usuario"""
    if data.timezone is not None and data.timezone not in pytz.all_timezones_set:
        raise HTTPException(status_code=422, detail="Zona horaria desconocida")

    for key, value in data.model_dump(exclude_unset=True).items():
        # null solo borra los campos opcionales; en el resto se ignora
        if value is None and key not in CLEARABLE_USER_FIELDS:
            continue
        setattr(user, key, value)

    # El ranking muestra el nombre y la foto: mantenerlos al día
    if user.is_public:
        _publish_profile(db, user)

    db.commit()
    db.refresh(user)
    return user


@app.delete("/auth/me", tags=["Auth"])
def delete_account(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Borra la cuenta y TODOS los datos del usuario (irreversible)"""
    email = user.email
    db.delete(user)
    db.commit()
    logger.info(f"🗑️ Cuenta borrada: {email}")
    return {"message": "Cuenta y todos los datos eliminados correctamente"}


@app.put("/settings/public", response_model=UserResponse, tags=["Auth"])
def set_public_visibility(
    data: PublicVisibilityUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Activa o desactiva la aparición en el ranking.
      - Activar → se publica nombre, foto, rango y retos superados
      - Desactivar → se borra la ficha pública
    """
    user.is_public = data.is_public

    if data.is_public:
        _publish_profile(db, user)
    else:
        user.public_profile = None

    db.commit()
    db.refresh(user)
    logger.info(f"🌍 {user.display_name} {'ahora es público' if data.is_public else 'ya no es público'}")
    return user


# =============================================================================
# ===================== SECCIÓN 2: HABITS (RETOS) =============================
# =============================================================================

@app.post("/habits", response_model=HabitMutationResponse, tags=["Habits"])
def create_habit(
    data: HabitCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    """Crea un reto (desde el formulario o aceptando una sugerencia del coach)"""
    habit = Habit(
        name=data.name,
        category=data.category,
        description=data.description,
        duration=data.duration,
    )
    user.habits.append(habit)

    local_now = user_now(user, now)
    new_achievements = _refresh_gamification(db, user, local_now)
    db.commit()
    db.refresh(habit)

    logger.info(f"➕ Reto creado: {habit.name} (user: {user.display_name})")
    return HabitMutationResponse(
        habit=_habit_response(habit, local_now),
        xp=user.xp or 0,
        new_achievements=new_achievements,
    )


@app.get("/habits", response_model=list[HabitResponse], tags=["Habits"])
def list_habits(
    user: User = Depends(get_current_user),
    now: datetime = Depends(get_now)
):
    """Lista los retos del usuario con su racha actual"""
    local_now = user_now(user, now)
    return [_habit_response(h, local_now) for h in user.habits]


@app.get("/habits/{habit_id}", response_model=HabitResponse, tags=["Habits"])
def get_habit(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    habit = _get_user_habit(db, user, habit_id)
    return _habit_response(habit, user_now(user, now))


@app.delete("/habits/{habit_id}", tags=["Habits"])
def delete_habit(habit_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Elimina un reto y todas sus entradas"""
    habit = _get_user_habit(db, user, habit_id)
    user.habits.remove(habit)

    if user.is_public:
        _publish_profile(db, user)

    db.commit()
    return {"message": f"Reto '{habit.name}' eliminado"}


# =============================================================================
# ===================== SECCIÓN 3: ENTRIES ====================================
# =============================================================================

@app.post("/habits/{habit_id}/entries", response_model=HabitMutationResponse, tags=["Entries"])
def log_today(
    habit_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    """
    Registra el avance de hoy.

      - Si hoy todavía no hay entrada principal → se crea la principal
      - Si ya la hay → se añade una entrada extra del mismo día
    Ambas empiezan sin completar y con el diario vacío.
    """
    habit = _get_user_habit(db, user, habit_id)
    local_now = user_now(user, now)
    today = local_now.date()

    has_main_today = any(e.date == today and is_main_entry(e) for e in habit.entries)
    entry = HabitEntry(date=today, completed=False, journal="", is_extra=has_main_today)
    habit.entries.append(entry)

    new_achievements = _refresh_gamification(db, user, local_now)
    db.commit()
    db.refresh(habit)

    kind = "extra" if entry.is_extra else "principal"
    logger.info(f"📝 Entrada {kind} en '{habit.name}' ({today.isoformat()})")
    return HabitMutationResponse(
        habit=_habit_response(habit, local_now),
        xp=user.xp or 0,
        new_achievements=new_achievements,
    )


@app.patch("/habits/{habit_id}/entries/{entry_id}", response_model=HabitMutationResponse, tags=["Entries"])
def update_entry(
    habit_id: int,
    entry_id: int,
    data: HabitEntryUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    """
    Marca/desmarca una entrada o edita su diario.
    +1 XP cuando una entrada principal pasa de pendiente a completada.
    """
    habit = _get_user_habit(db, user, habit_id)
    entry = next((e for e in habit.entries if e.id == entry_id), None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entrada no encontrada")

    was_completed = bool(entry.completed)
    if data.completed is not None:
        entry.completed = data.completed
    if data.journal is not None:
        entry.journal = data.journal

    xp_gained = xp_for_entry_update(was_completed, bool(entry.completed), bool(entry.is_extra))
    user.xp = (user.xp or 0) + xp_gained

    local_now = user_now(user, now)
    new_achievements = _refresh_gamification(db, user, local_now)
    db.commit()
    db.refresh(habit)

    return HabitMutationResponse(
        habit=_habit_response(habit, local_now),
        xp_gained=xp_gained,
        xp=user.xp,
        new_achievements=new_achievements,
    )


# =============================================================================
# ===================== SECCIÓN 4: GAMIFICATION ===============================
# =============================================================================

@app.get("/gamification/profile", response_model=ProfileResponse, tags=["Gamification"])
def get_profile(user: User = Depends(get_current_user)):
    """XP, rango actual y retos superados por categoría"""
    completions = aggregate_completions(user.habits)
    rank = resolve_rank(completions, RANKS)
    unlocked = set(user.unlocked_achievements or [])

    return ProfileResponse(
        display_name=user.display_name,
        xp=user.xp or 0,
        rank=_rank_response(rank, completions, rank),
        completions={k: v for k, v in completions.items() if k != "total"},
        total_completed=completions["total"],
        achievements_unlocked=sum(1 for a in ACHIEVEMENTS if a.id in unlocked),
        achievements_total=len(ACHIEVEMENTS),
    )


@app.get("/gamification/achievements", response_model=list[AchievementResponse], tags=["Gamification"])
def list_achievements(user: User = Depends(get_current_user)):
    """Todos los logros del catálogo, marcando los desbloqueados"""
    unlocked = set(user.unlocked_achievements or [])
    return [_achievement_response(a, a.id in unlocked) for a in ACHIEVEMENTS]


@app.get("/gamification/ranks", response_model=list[RankResponse], tags=["Gamification"])
def list_ranks(user: User = Depends(get_current_user)):
    """Todos los rangos, con los alcanzados y el actual"""
    completions = aggregate_completions(user.habits)
    current = resolve_rank(completions, RANKS)
    return [_rank_response(r, completions, current) for r in RANKS]


# =============================================================================
# ===================== SECCIÓN 5: LEADERBOARD ================================
# =============================================================================

@app.get("/leaderboard", response_model=list[PublicProfileResponse], tags=["Leaderboard"])
def get_leaderboard(
    limit: int = Query(default=LEADERBOARD_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Ranking público por retos superados (no requiere autenticación)"""
    return db.query(PublicProfile).order_by(
        PublicProfile.completed_habits.desc(), PublicProfile.display_name
    ).limit(limit).all()


# =============================================================================
# ===================== SECCIÓN 6: COACH ======================================
# =============================================================================

@app.post("/coach/chat", response_model=ChatResponse, tags=["Coach"])
def chat_with_coach(
    data: ChatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    """
    Envía un mensaje al coach.

    Flujo:
      1. Guardar el mensaje del usuario
      2. Mandar TODO el historial al coach
      3. Guardar su respuesta (con las sugerencias de retos)
      4. Evaluar logros
    Si el coach falla se guarda un mensaje de disculpa y se devuelve 502/503.

    El endpoint corre en el threadpool como el resto; solo la llamada HTTP
    al coach vuelve al event loop (anyio.from_thread).
    """
    user.chat_messages.append(ChatMessage(role="user", content=data.message))
    local_now = user_now(user, now)

    try:
        reply = anyio.from_thread.run(ask_coach, list(user.chat_messages))
    except CoachError as e:
        user.chat_messages.append(ChatMessage(role="assistant", content=FALLBACK_ANSWER))
        _refresh_gamification(db, user, local_now)
        db.commit()
        if isinstance(e, CoachUnavailable):
            raise HTTPException(status_code=503, detail="El coach no está disponible")
        raise HTTPException(status_code=502, detail="No se pudo obtener respuesta del coach")

    suggestions = [s.model_dump() for s in reply.suggestions or []]
    user.chat_messages.append(ChatMessage(
        role="assistant",
        content=reply.answer,
        suggestions=suggestions or None,
    ))

    new_achievements = _refresh_gamification(db, user, local_now)
    db.commit()

    return ChatResponse(
        answer=reply.answer,
        suggestions=reply.suggestions or [],
        new_achievements=new_achievements,
    )


@app.get("/coach/history", response_model=list[ChatMessageResponse], tags=["Coach"])
def get_chat_history(user: User = Depends(get_current_user)):
    return user.chat_messages


@app.delete("/coach/history", tags=["Coach"])
def clear_chat_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Borra la conversación. Los logros ya ganados se conservan."""
    user.chat_messages.clear()
    db.commit()
    return {"message": "Conversación borrada"}


# =============================================================================
# ===================== SECCIÓN 7: REPORTS ====================================
# =============================================================================

@app.get("/reports", response_model=ReportResponse, tags=["Reports"])
def get_report(
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: User = Depends(get_current_user),
    now: datetime = Depends(get_now)
):
    """Informe de rendimiento. Por defecto, los últimos 30 días."""
    local_now = user_now(user, now)
    end = end or local_now.date()
    start = start or end - timedelta(days=30)
    return build_report(user.habits, start, end, local_now)


# =============================================================================
# ===================== SECCIÓN 8: ADMIN ======================================
# =============================================================================

SAMPLE_HABIT = {
    "name": "Leer 20 páginas al día",
    "category": "Crecimiento Personal",
    "description": "Leer al menos 20 páginas de un libro de no ficción para expandir conocimientos.",
    "duration": 30,
}

# (días hacia atrás desde hoy, completado, diario)
SAMPLE_ENTRIES = [
    (3, True, "Terminé el capítulo 3."),
    (2, False, "No tuve tiempo hoy."),
    (1, True, ""),
    (0, True, "Leí sobre arquitectura limpia. Muy interesante."),
]

SAMPLE_CHAT = [
    {"role": "user", "content": "Quiero ser más saludable"},
    {
        "role": "assistant",
        "content": "¡Claro! Aquí tienes un par de ideas para empezar:",
        "suggestions": [
            {"name": "Caminata de 30 minutos", "category": "Salud",
             "description": "Realizar una caminata a paso ligero cada mañana.", "duration": 21},
            {"name": "Beber 2L de agua al día", "category": "Salud",
             "description": "Mantente hidratado durante todo el día para mejorar tu energía.", "duration": 14},
        ],
    },
]


@app.get("/admin/users", response_model=list[AdminUserSummary], tags=["Admin"])
def admin_list_users(
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Lista todos los usuarios, opcionalmente filtrando por nombre o email"""
    query = db.query(User)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(or_(
            func.lower(User.display_name).like(pattern),
            func.lower(User.email).like(pattern),
        ))

    return [
        AdminUserSummary(
            id=u.id,
            email=u.email,
            display_name=u.display_name,
            role=u.role,
            habits_count=len(u.habits),
            xp=u.xp or 0,
        )
        for u in query.order_by(User.id).all()
    ]


@app.get("/admin/stats", response_model=AdminStats, tags=["Admin"])
def admin_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return AdminStats(
        total_users=db.query(User).count(),
        total_habits=db.query(Habit).count(),
        admins=db.query(User).filter(User.role == UserRole.admin.value).count(),
    )


@app.patch("/admin/users/{user_id}/role", response_model=AdminUserSummary, tags=["Admin"])
def admin_update_role(
    user_id: int,
    data: RoleUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    target = _get_user_or_404(db, user_id)
    target.role = data.role
    db.commit()
    db.refresh(target)

    logger.info(f"🛡️ {admin.display_name} cambió el rol de {target.email} a {data.role}")
    return AdminUserSummary(
        id=target.id,
        email=target.email,
        display_name=target.display_name,
        role=target.role,
        habits_count=len(target.habits),
        xp=target.xp or 0,
    )


@app.delete("/admin/users/{user_id}/habits/{habit_id}", tags=["Admin"])
def admin_delete_habit(
    user_id: int,
    habit_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Elimina un reto de cualquier usuario"""
    target = _get_user_or_404(db, user_id)
    habit = _get_user_habit(db, target, habit_id)
    target.habits.remove(habit)

    if target.is_public:
        _publish_profile(db, target)

    db.commit()
    logger.info(f"🗑️ {admin.display_name} eliminó el reto '{habit.name}' de {target.email}")
    return {"message": f"Reto '{habit.name}' eliminado"}


@app.post("/admin/users/{user_id}/seed", tags=["Admin"])
def admin_seed_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now)
):
    """
    Carga datos de prueba en un usuario:
      - El reto de ejemplo con 4 días de historial terminando hoy
      - Una conversación de ejemplo con el coach
    """
    target = _get_user_or_404(db, user_id)
    local_now = user_now(target, now)
    today = local_now.date()

    habit = Habit(**SAMPLE_HABIT)
    for days_ago, completed, journal in SAMPLE_ENTRIES:
        habit.entries.append(HabitEntry(
            date=today - timedelta(days=days_ago),
            completed=completed,
            journal=journal,
            is_extra=False,
        ))
    target.habits.append(habit)

    for message in SAMPLE_CHAT:
        target.chat_messages.append(ChatMessage(**message))

    new_achievements = _refresh_gamification(db, target, local_now)
    db.commit()

    logger.info(f"🌱 Datos de prueba cargados en {target.email}")
    return {
        "message": "Datos de prueba cargados",
        "habit_id": habit.id,
        "new_achievements": [a.id for a in new_achievements],
    }
