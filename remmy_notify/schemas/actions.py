# remmy_notify/schemas/actions.py
# Acciones rápidas de un reminder (tabla reminder_actions).
# action_value es JSONB libre en la BD; aquí se decodifica UNA vez a un
# modelo por tipo (union discriminada por action_type).

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

# Solo estos tipos generan botones en la notificación
ACTIONABLE_TYPES = ("call", "link", "location", "email")


class CallAction(BaseModel):
    action_type: Literal["call"] = "call"
    phone: str
    label: Optional[str] = None


class LinkAction(BaseModel):
    action_type: Literal["link"] = "link"
    url: str
    label: Optional[str] = None


class EmailAction(BaseModel):
    action_type: Literal["email"] = "email"
    email: str
    subject: str = ""
    body: str = ""
    label: Optional[str] = None


class LocationAction(BaseModel):
    action_type: Literal["location"] = "location"
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    label: Optional[str] = None

    @model_validator(mode="after")
    def _needs_place(self):
        if not self.address and (self.lat is None or self.lng is None):
            raise ValueError("location requires address or lat/lng")
        return self


class NoteAction(BaseModel):
    action_type: Literal["note"] = "note"
    text: str


class AssignAction(BaseModel):
    action_type: Literal["assign"] = "assign"
    users: List[str] = Field(default_factory=list)


class _MediaAction(BaseModel):
    url: Optional[str] = None
    path: Optional[str] = None

    @model_validator(mode="after")
    def _needs_source(self):
        if not self.url and not self.path:
            raise ValueError(f"{self.action_type} requires url or path")
        return self


class PhotoAction(_MediaAction):
    action_type: Literal["photo"] = "photo"


class VoiceAction(_MediaAction):
    action_type: Literal["voice"] = "voice"
    duration: Optional[float] = None  # segundos


class SubtaskItem(BaseModel):
    text: str
    done: bool = False


class SubtasksAction(BaseModel):
    action_type: Literal["subtasks"] = "subtasks"
    items: List[SubtaskItem] = Field(default_factory=list)


ReminderAction = Annotated[
    Union[
        CallAction,
        LinkAction,
        EmailAction,
        LocationAction,
        NoteAction,
        AssignAction,
        PhotoAction,
        VoiceAction,
        SubtasksAction,
    ],
    Field(discriminator="action_type"),
]

_adapter = TypeAdapter(ReminderAction)

# La app a veces guarda el valor "pelado" (p.ej. solo el teléfono)
_SHORTHAND_FIELD = {"call": "phone", "link": "url", "email": "email", "note": "text"}


def parse_action(row: Dict[str, Any]) -> ReminderAction:
    """
    Decodifica una fila {action_type, action_value} de reminder_actions.
    Lanza pydantic.ValidationError si el valor no corresponde al tipo.
    """
    action_type = row.get("action_type")
    value = row.get("action_value")
    if isinstance(value, str) and action_type in _SHORTHAND_FIELD:
        value = {_SHORTHAND_FIELD[action_type]: value}
    payload = dict(value or {}) if isinstance(value, dict) else {}
    payload["action_type"] = action_type
    return _adapter.validate_python(payload)


def action_label(action: ReminderAction) -> str:
    if isinstance(action, CallAction):
        return action.label or action.phone or "Call"
    if isinstance(action, LinkAction):
        return action.label or "Open Link"
    if isinstance(action, EmailAction):
        return action.label or action.email or "Send Email"
    if isinstance(action, LocationAction):
        return action.label or action.address or "View Location"
    if isinstance(action, NoteAction):
        return "View Note"
    if isinstance(action, AssignAction):
        return f"Shared with {len(action.users)} people"
    if isinstance(action, PhotoAction):
        return "View Photo"
    if isinstance(action, VoiceAction):
        return "Play Voice Note"
    if isinstance(action, SubtasksAction):
        done = sum(1 for item in action.items if item.done)
        return f"{done}/{len(action.items)} subtasks"
    return "Action"


def category_id_for(actions: List[ReminderAction]) -> str:
    """
    Id de categoría que la app registra para los botones de la notificación:
    'reminder_default' o 'actions_<tipos ordenados>' (p.ej. actions_call_link).
    """
    types = sorted(a.action_type for a in actions if a.action_type in ACTIONABLE_TYPES)
    if not types:
        return "reminder_default"
    return "actions_" + "_".join(types)
