"""Run request and run result data models.

The run result is produced by the agent daemon and is only loosely typed:
any field may be missing, null, or of an unexpected shape. Every nested
record here is optional and malformed values degrade to ``None`` instead of
failing validation, so rendering never depends on the daemon being tidy.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _mapping_or_none(value: Any) -> Any:
    return value if isinstance(value, dict) else None


def _record(value: Any) -> Any:
    # A bare truthy value still marks the record as present, just empty.
    if value is None or isinstance(value, dict):
        return value
    return {} if value else None


def _list_or_none(value: Any) -> Any:
    return value if isinstance(value, list) else None


class _Partial(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RunRequest(BaseModel):
    """Payload for ``POST /run/start``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    prompt: str = Field(min_length=1)
    context_notes: str = Field(default="", alias="contextNotes")
    critic_key: Optional[str] = Field(default=None, alias="criticKey")
    assistant_key: Optional[str] = Field(default=None, alias="assistantKey")
    assistant_id: Optional[str] = Field(default=None, alias="assistantId")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class TargetHints(_Partial):
    text_exact: Optional[list[Any]] = None
    text_partial: Any = None
    text_contains: Optional[list[Any]] = None

    @field_validator("text_exact", "text_contains", mode="before")
    @classmethod
    def _hint_lists(cls, value: Any) -> Any:
        return _list_or_none(value)


class DecisionTarget(_Partial):
    reason: Any = None
    hints: Optional[TargetHints] = None

    @field_validator("hints", mode="before")
    @classmethod
    def _hints_mapping(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class Decision(_Partial):
    action: Any = None
    reason: Any = None
    summary: Any = None
    target: Optional[DecisionTarget] = None

    @field_validator("target", mode="before")
    @classmethod
    def _target_mapping(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class ClickedElement(_Partial):
    name: Any = None
    id: Any = None
    hit_state: Any = None


class StepResult(_Partial):
    next: Any = None
    reason: Any = None
    clicked: Optional[ClickedElement] = None

    @field_validator("clicked", mode="before")
    @classmethod
    def _clicked_record(cls, value: Any) -> Any:
        return _record(value)


class AssistantOutput(_Partial):
    parsed: Any = None
    raw: Any = None


class TimelineEntry(_Partial):
    iteration: Any = None
    decision: Optional[Decision] = None
    result: Optional[StepResult] = None
    assistant: Optional[AssistantOutput] = None

    @field_validator("decision", "result", mode="before")
    @classmethod
    def _drop_malformed(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @field_validator("assistant", mode="before")
    @classmethod
    def _assistant_record(cls, value: Any) -> Any:
        return _record(value)


class AgentRef(_Partial):
    id: Any = None


class RunResult(_Partial):
    status: Any = None
    ok: Any = None
    iterations: Any = None
    agent: Optional[AgentRef] = None
    timeline: list[TimelineEntry] = []
    complete_history: Optional[list[Any]] = Field(default=None, alias="completeHistory")

    @field_validator("agent", mode="before")
    @classmethod
    def _agent_mapping(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @field_validator("timeline", mode="before")
    @classmethod
    def _timeline_entries(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [entry if isinstance(entry, dict) else {} for entry in value]

    @field_validator("complete_history", mode="before")
    @classmethod
    def _history_list(cls, value: Any) -> Any:
        return _list_or_none(value)
