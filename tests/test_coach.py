import asyncio
import json

import httpx
import pytest

import coach
from coach import CoachError, CoachUnavailable, ask_coach, build_prompt, parse_reply

HISTORY = [
    {"role": "user", "content": "Quiero leer más"},
    {"role": "assistant", "content": "¿Cuánto tiempo tienes?"},
    {"role": "user", "content": "Un mes"},
]

REPLY = {
    "answer": "¡Vamos allá!",
    "suggestions": [{
        "name": "Leer 10 páginas al día",
        "category": "Crecimiento Personal",
        "description": "Diez páginas cada noche.",
        "duration": 30,
    }],
}


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def call(handler, api_key="clave-test"):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await ask_coach(HISTORY, client=client, api_key=api_key)
    return asyncio.run(run())


def test_prompt_includes_the_whole_history():
    prompt = build_prompt(HISTORY)
    assert "  Usuario: Quiero leer más" in prompt
    assert "  Tú: ¿Cuánto tiempo tienes?" in prompt
    assert "  Usuario: Un mes" in prompt
    assert '{"answer"' in prompt


def test_ask_coach_returns_validated_reply():
    seen = {}

    def handler(request):
        seen["key"] = request.url.params["key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_body(json.dumps(REPLY)))

    reply = call(handler)

    assert reply.answer == "¡Vamos allá!"
    assert reply.suggestions[0].duration == 30
    assert seen["key"] == "clave-test"
    assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"
    assert "Un mes" in seen["body"]["contents"][0]["parts"][0]["text"]


def test_reply_without_suggestions():
    reply = call(lambda request: httpx.Response(200, json=gemini_body('{"answer": "Hola"}')))
    assert reply.answer == "Hola"
    assert reply.suggestions is None


def test_http_error_raises_coach_error():
    with pytest.raises(CoachError):
        call(lambda request: httpx.Response(500, json={"error": "boom"}))


def test_empty_candidates_raise_coach_error():
    with pytest.raises(CoachError):
        call(lambda request: httpx.Response(200, json={"candidates": []}))


def test_invalid_model_output_raises_coach_error():
    with pytest.raises(CoachError):
        parse_reply("esto no es JSON")
    with pytest.raises(CoachError):
        parse_reply('{"suggestions": []}')


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(coach, "GEMINI_API_KEY", None)
    with pytest.raises(CoachUnavailable):
        asyncio.run(ask_coach(HISTORY))
