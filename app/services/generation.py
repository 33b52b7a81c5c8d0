"""Generación de chatflows en background.

El endpoint de generación crea un chatflow placeholder (schema ``{}``) y agenda
``generate_chatflow_background``; el cliente consulta el estado por polling.
El progreso queda persistido en ``chatflows.generation_status``:

    PENDING -> RUNNING -> COMPLETED | FAILED

Un fallo nunca llega al request original: se loguea y queda en
``generation_error`` para que el polling lo vea.
"""
import json
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict

from openai import AsyncOpenAI
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.models.chatflow import (
    Chatflow,
    GENERATION_COMPLETED,
    GENERATION_FAILED,
    GENERATION_RUNNING,
)
from app.schemas.chatflow import ChatflowSchema
from app.utils.ids import new_id

logger = logging.getLogger(__name__)

SchemaGenerator = Callable[[str], Awaitable[Dict[str, Any]]]

SYSTEM_PROMPT = """You design conversational data-collection forms ("chatflows").
Given a description, answer ONLY with a JSON object of this shape:
{
  "name": "short title for the chatflow",
  "fields": [
    {
      "id": "unique id",
      "type": "text|email|phone|url|textarea|number|date|select|boolean|file",
      "label": "question shown to the user",
      "name": "snake_case key for the answer",
      "required": true,
      "placeholder": "optional",
      "helperText": "optional",
      "options": ["only for select"],
      "validation": {"min": 0, "max": 100, "pattern": "optional regex", "message": "optional"}
    }
  ],
  "settings": {"theme": "light", "submitButtonText": "Submit", "successMessage": "Thanks!"}
}
Use between 3 and 12 fields. Ask only what the description needs."""

MAX_ERROR_CHARS = 500


class GenerationError(Exception):
    """El modelo devolvió algo que no es un schema utilizable."""


@lru_cache(maxsize=1)
def _client() -> AsyncOpenAI:
    return AsyncOpenAI(api_key=settings.openai_api_key or None)


def normalize_generated_schema(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Valida la salida del modelo y completa ids faltantes. Devuelve {name, fields, settings?}."""
    if not isinstance(raw, dict):
        raise GenerationError("Model output is not a JSON object")

    fields = raw.get("fields")
    if not isinstance(fields, list) or not fields:
        raise GenerationError("Model output has no fields")

    for field in fields:
        if isinstance(field, dict) and not field.get("id"):
            field["id"] = new_id()

    try:
        data = {"fields": fields}
        if raw.get("settings") is not None:
            data["settings"] = raw["settings"]
        schema = ChatflowSchema.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Invalid chatflow schema: {e.error_count()} errors") from e

    out = schema.model_dump(by_alias=True, exclude_none=True)
    out["name"] = (raw.get("name") or "").strip() or "Untitled Chatflow"
    return out


async def build_chatflow_schema(description: str) -> Dict[str, Any]:
    """Pide al LLM el schema del chatflow a partir de la descripción."""
    resp = await _client().chat.completions.create(
        model=settings.generation_model,
        temperature=settings.generation_temperature,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": description},
        ],
    )
    content = (resp.choices[0].message.content or "").strip()
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise GenerationError("Model output is not valid JSON") from e
    return normalize_generated_schema(raw)


def get_schema_generator() -> SchemaGenerator:
    return build_chatflow_schema


async def _set_state(session: AsyncSession, chatflow_id: str, **values: Any) -> None:
    chatflow = await session.get(Chatflow, chatflow_id)
    if not chatflow:
        raise GenerationError(f"Chatflow {chatflow_id} no longer exists")
    for key, value in values.items():
        setattr(chatflow, key, value)
    await session.commit()


async def generate_chatflow_background(
    session_factory: async_sessionmaker[AsyncSession],
    chatflow_id: str,
    description: str,
    generator: SchemaGenerator = build_chatflow_schema,
) -> None:
    # Sesión propia: la del request ya se cerró cuando corre esta tarea
    async with session_factory() as session:
        try:
            logger.info("[GENERATE] chatflow %s: start", chatflow_id)
            await _set_state(session, chatflow_id, generation_status=GENERATION_RUNNING)

            result = dict(await generator(description))
            name = result.pop("name", None) or "Untitled Chatflow"

            await _set_state(
                session, chatflow_id,
                name=name,
                schema=result,
                generation_status=GENERATION_COMPLETED,
                generation_error=None,
            )
            logger.info("[GENERATE] chatflow %s: completed (%d fields)", chatflow_id, len(result.get("fields", [])))
        except Exception as e:
            logger.exception("[GENERATE] chatflow %s: failed", chatflow_id)
            await session.rollback()
            try:
                await _set_state(
                    session, chatflow_id,
                    generation_status=GENERATION_FAILED,
                    generation_error=str(e)[:MAX_ERROR_CHARS] or e.__class__.__name__,
                )
            except Exception:
                logger.exception("[GENERATE] chatflow %s: could not persist failure", chatflow_id)
