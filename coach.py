"""
=============================================================================
COACH.PY — Coach IA de Hábitos
=============================================================================
El coach es una función sin estado:
  historial del chat  →  {"answer": "...", "suggestions": [retos propuestos]}

Usa la API de Google Gemini (generateContent) por HTTP con httpx y le pide
la respuesta en JSON. La respuesta se valida con Pydantic (CoachReply): si
el modelo devuelve algo que no encaja, se lanza CoachError y main.py decide
qué contestar al usuario.

Las sugerencias NO son retos: el usuario las convierte en reto con el
endpoint normal de crear retos.
"""

import json
import logging
import os
from typing import Optional

import httpx
from pydantic import ValidationError

from schemas import CoachReply

logger = logging.getLogger("habitica.coach")

# ─────────────────────────────────────────────────────────────────────────────
# CONFIGURACIÓN
# ─────────────────────────────────────────────────────────────────────────────

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
REQUEST_TIMEOUT = 30.0

FALLBACK_ANSWER = "Lo siento, tuve un problema. Inténtalo de nuevo."


class CoachError(Exception):
    """El coach no ha podido responder (red, API o respuesta inválida)"""


class CoachUnavailable(CoachError):
    """No hay API key configurada"""


# =============================================================================
# ===================== PROMPT ================================================
# =============================================================================

COACH_PROMPT = """Eres Habitica, un coach de hábitos. Eres amigable, muy directo y te enfocas en la acción. Usas frases cortas y evitas la conversación trivial.

Tu único objetivo es ayudar a los usuarios a definir y crear "retos" para formar hábitos, basándote en sus metas.

**Instrucciones clave:**
1.  **Analiza la Petición:** Si el usuario menciona una meta específica (ej. "leer 'Cien Años de Soledad'", "aprender a tocar guitarra") y un plazo (ej. "en 2 meses", "en 30 días"), DEBES usar esa información para crear los retos.
2.  **Sugerencias Concretas:** Genera de 1 a 3 retos claros y accionables.
3.  **Formato del Reto:** Cada reto debe tener:
    *   **name:** Específico y relacionado con la meta del usuario. Si menciona un libro, úsalo en el nombre.
    *   **category:** Una categoría relevante (ej. Crecimiento Personal, Salud, Bienestar, Creatividad).
    *   **description:** Una acción diaria o semanal, motivadora y concreta. Si es posible, calcula el paso diario (ej. "Leer 10 páginas al día para terminar en 60 días.").
    *   **duration:** Si el usuario da un plazo, conviértelo a días ("2 meses" -> 60, "1 mes" -> 30). Si no, sugiere duraciones estándar (7, 21, 30).

Historial de la conversación:
{history}

Responde SOLO con un objeto JSON con esta forma:
{{"answer": "texto breve para el usuario", "suggestions": [{{"name": "...", "category": "...", "description": "...", "duration": 30}}]}}
"""


def _message_field(message, name: str):
    if isinstance(message, dict):
        return message.get(name)
    return getattr(message, name, None)


def build_prompt(history) -> str:
    """Convierte el historial en el prompt del coach"""
    lines = []
    for message in history or []:
        speaker = "Usuario" if _message_field(message, "role") == "user" else "Tú"
        lines.append(f"  {speaker}: {_message_field(message, 'content') or ''}")
    return COACH_PROMPT.format(history="\n".join(lines))


def parse_reply(text: str) -> CoachReply:
    """Valida el JSON devuelto por el modelo"""
    try:
        return CoachReply.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise CoachError(f"Respuesta del coach con formato inválido: {e}") from e


# =============================================================================
# ===================== LLAMADA AL MODELO =====================================
# =============================================================================

async def ask_coach(history, client: Optional[httpx.AsyncClient] = None,
                    api_key: Optional[str] = None) -> CoachReply:
    """
    Envía el historial completo al modelo y devuelve su respuesta validada.

    client → se puede inyectar (tests); si no, se crea uno para esta llamada.
    """
    api_key = api_key or GEMINI_API_KEY
    if not api_key:
        raise CoachUnavailable("GEMINI_API_KEY no configurada")

    payload = {
        "contents": [{"role": "user", "parts": [{"text": build_prompt(history)}]}],
        "generationConfig": {"responseMimeType": "application/json"},
    }
    url = GEMINI_URL.format(model=GEMINI_MODEL)

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)

    try:
        response = await client.post(url, params={"key": api_key}, json=payload)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"❌ Error llamando al coach: {e}")
        raise CoachError(str(e)) from e
    finally:
        if owns_client:
            await client.aclose()

    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise CoachError("Respuesta del coach sin contenido") from e

    reply = parse_reply(text)
    logger.info(f"🤖 Coach respondió con {len(reply.suggestions or [])} sugerencias")
    return reply
