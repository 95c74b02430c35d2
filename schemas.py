"""
=============================================================================
SCHEMAS.PY — Esquemas de Validación (Pydantic)
=============================================================================
  - Models (SQLAlchemy) → definen las TABLAS de la BD
  - Schemas (Pydantic)  → definen qué DATOS acepta/devuelve la API

Convención de nombres:
  XxxCreate   → para crear algo nuevo (POST)
  XxxUpdate   → para actualizar algo (PATCH/PUT)
  XxxResponse → lo que devuelve la API (GET)
"""

from pydantic import BaseModel, Field, EmailStr
from datetime import date, datetime
from typing import Literal, Optional


# =============================================================================
# ===================== AUTH ==================================================
# =============================================================================

class UserRegister(BaseModel):
    """Datos para registrar un usuario nuevo"""
    email: EmailStr
    password: str = Field(min_length=6, description="Mínimo 6 caracteres")
    display_name: str = Field(min_length=1, max_length=100)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    """Respuesta con el token JWT"""
    access_token: str
    token_type: str = "bearer"
    user_id: int
    display_name: str

class UserResponse(BaseModel):
    id: int
    email: str
    display_name: str
    photo_url: Optional[str] = None
    gender: Optional[str] = None
    role: str
    theme: str
    timezone: str
    is_public: bool
    notifications_enabled: bool
    reminder_time: str
    telegram_id: Optional[str] = None
    xp: int
    unlocked_achievements: list[str] = []
    created_at: datetime
    model_config = {"from_attributes": True}

class UserUpdate(BaseModel):
    """Campos actualizables desde Ajustes"""
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    photo_url: Optional[str] = None
    gender: Optional[str] = None
    theme: Optional[Literal["light", "dark"]] = None
    timezone: Optional[str] = None
    notifications_enabled: Optional[bool] = None
    reminder_time: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    telegram_id: Optional[str] = None

class PublicVisibilityUpdate(BaseModel):
    is_public: bool


# =============================================================================
# ===================== HABITS (RETOS) ========================================
# =============================================================================

class HabitCreate(BaseModel):
    """Nuevo reto, desde el formulario o desde una sugerencia del coach"""
    name: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1, max_length=60)
    description: str = ""
    duration: int = Field(gt=0, description="Días principales para superar el reto")

class HabitEntryResponse(BaseModel):
    id: int
    date: date
    completed: bool
    journal: Optional[str] = ""
    is_extra: bool
    model_config = {"from_attributes": True}

class HabitEntryUpdate(BaseModel):
    completed: Optional[bool] = None
    journal: Optional[str] = None

class StreakInfo(BaseModel):
    count: int
    just_increased: bool

class HabitResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = ""
    duration: int
    created_at: datetime
    entries: list[HabitEntryResponse]
    streak: StreakInfo
    main_entries: int
    completed: bool


# =============================================================================
# ===================== GAMIFICATION ==========================================
# =============================================================================

class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    is_secret: bool = False
    unlocked: bool = False

class RankResponse(BaseModel):
    name: str
    icon: str
    description: str
    requirements: dict[str, int]
    achieved: bool = False
    current: bool = False

class ProfileResponse(BaseModel):
    display_name: str
    xp: int
    rank: RankResponse
    completions: dict[str, int]
    # completions → retos superados por categoría (sin la clave "total")
    total_completed: int
    achievements_unlocked: int
    achievements_total: int

class HabitMutationResponse(BaseModel):
    """Resultado de crear un reto o tocar una entrada"""
    habit: HabitResponse
    xp_gained: int = 0
    xp: int
    new_achievements: list[AchievementResponse] = []

class PublicProfileResponse(BaseModel):
    display_name: str
    photo_url: Optional[str] = None
    rank_name: str
    completed_habits: int
    model_config = {"from_attributes": True}


# =============================================================================
# ===================== COACH =================================================
# =============================================================================

class HabitSuggestion(BaseModel):
    """Reto propuesto por el coach (todavía no es un reto del usuario)"""
    name: str
    category: str
    description: str
    duration: int

class ChatMessageResponse(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    suggestions: Optional[list[HabitSuggestion]] = None
    model_config = {"from_attributes": True}

class CoachReply(BaseModel):
    """Lo que devuelve el coach: texto + sugerencias opcionales"""
    answer: str
    suggestions: Optional[list[HabitSuggestion]] = None

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)

class ChatResponse(BaseModel):
    answer: str
    suggestions: list[HabitSuggestion] = []
    new_achievements: list[AchievementResponse] = []


# =============================================================================
# ===================== REPORTS ===============================================
# =============================================================================

class HabitBreakdown(BaseModel):
    name: str
    completed: int
    total: int

class CategoryBreakdown(BaseModel):
    name: str
    value: int

class ReportResponse(BaseModel):
    start: date
    end: date
    total_entries: int
    completed_entries: int
    completion_rate: float
    habits_breakdown: list[HabitBreakdown]
    category_breakdown: list[CategoryBreakdown]
    longest_streak: int
    activity_by_day: dict[str, int]


# =============================================================================
# ===================== ADMIN =================================================
# =============================================================================

class AdminUserSummary(BaseModel):
    id: int
    email: str
    display_name: str
    role: str
    habits_count: int
    xp: int

class AdminStats(BaseModel):
    total_users: int
    total_habits: int
    admins: int

class RoleUpdate(BaseModel):
    role: Literal["user", "admin"]
