# app/schemas/chatflow.py
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError
from pydantic.alias_generators import to_camel

FieldType = Literal[
    "text", "email", "phone", "url", "textarea",
    "number", "date", "select", "boolean", "file",
]
ChatflowStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]

class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# === Estructura del formulario ===
# Sólo se chequean las claves que necesita el runtime (id, type, label, name, required);
# placeholder, helperText, options, validation y settings pasan tal cual.
class ChatflowField(BaseModel):
    model_config = ConfigDict(extra="allow")

    # Strict*: "true" no es un bool, 1 no es un str
    id: StrictStr
    type: FieldType
    label: StrictStr
    name: StrictStr
    required: StrictBool

class ChatflowSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    fields: List[ChatflowField]

def is_chatflow_schema(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    try:
        ChatflowSchema.model_validate(obj)
    except ValidationError:
        return False
    return True

def is_generated(schema: Any) -> bool:
    """Un schema vacío, inválido o sin campos sigue 'en generación'."""
    return bool(schema) and is_chatflow_schema(schema) and len(schema["fields"]) > 0

# === Requests ===
class GenerateIn(_Camel):
    description: str = Field(min_length=10)
    workspace_slug: str = Field(min_length=1)

class GenerateOut(_Camel):
    workflow_id: str

class PublishSchemaIn(BaseModel):
    # los campos se aceptan tal cual los arma el editor
    fields: List[Dict[str, Any]]

class PublishIn(_Camel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    workspace_slug: str = Field(min_length=1)
    form_schema: PublishSchemaIn = Field(alias="schema")

class ChatflowUpdate(_Camel):
    name: Optional[str] = None
    description: Optional[str] = None
    form_schema: Optional[ChatflowSchema] = Field(default=None, alias="schema")
    status: Optional[ChatflowStatus] = None

# === Responses ===
class ChatflowOut(_Camel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    form_schema: Dict[str, Any] = Field(alias="schema")
    status: str
    share_url: str
    workspace_id: str
    generation_status: Optional[str] = None
    generation_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
