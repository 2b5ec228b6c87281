"""Tests for the reminder action union."""

import pytest
from pydantic import ValidationError

from remmy_notify.schemas.actions import (
    AssignAction,
    CallAction,
    EmailAction,
    LocationAction,
    SubtasksAction,
    VoiceAction,
    action_label,
    category_id_for,
    parse_action,
)


def test_parse_call_shorthand():
    action = parse_action({"action_type": "call", "action_value": "+34 600 000 000"})
    assert isinstance(action, CallAction)
    assert action.phone == "+34 600 000 000"


def test_parse_email_with_fields():
    action = parse_action({
        "action_type": "email",
        "action_value": {"email": "ana@example.com", "subject": "Invoice"},
    })
    assert isinstance(action, EmailAction)
    assert action.subject == "Invoice"
    assert action.body == ""


def test_parse_location_with_coordinates():
    action = parse_action({"action_type": "location", "action_value": {"lat": 40.4, "lng": -3.7}})
    assert isinstance(action, LocationAction)


def test_location_requires_place():
    with pytest.raises(ValidationError):
        parse_action({"action_type": "location", "action_value": {"label": "somewhere"}})


def test_voice_requires_source():
    with pytest.raises(ValidationError):
        parse_action({"action_type": "voice", "action_value": {"duration": 3}})
    action = parse_action({"action_type": "voice", "action_value": {"path": "u1/memo.m4a", "duration": 3}})
    assert isinstance(action, VoiceAction)


def test_unknown_action_type_is_rejected():
    with pytest.raises(ValidationError):
        parse_action({"action_type": "fax", "action_value": {}})


def test_action_labels():
    assert action_label(CallAction(phone="123")) == "123"
    assert action_label(CallAction(phone="123", label="Mom")) == "Mom"
    assert action_label(AssignAction(users=["a", "b"])) == "Shared with 2 people"
    subtasks = parse_action({
        "action_type": "subtasks",
        "action_value": {"items": [{"text": "a", "done": True}, {"text": "b"}]},
    })
    assert isinstance(subtasks, SubtasksAction)
    assert action_label(subtasks) == "1/2 subtasks"


def test_category_id_uses_actionable_types_sorted():
    actions = [
        parse_action({"action_type": "note", "action_value": {"text": "x"}}),
        parse_action({"action_type": "link", "action_value": "https://remmy.app"}),
        parse_action({"action_type": "call", "action_value": "123"}),
    ]
    assert category_id_for(actions) == "actions_call_link"
    assert category_id_for([]) == "reminder_default"
    assert category_id_for(actions[:1]) == "reminder_default"
