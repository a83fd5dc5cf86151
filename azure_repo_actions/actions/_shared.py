"""Template action plumbing: input validation and lifecycle events.

Each action run emits:
- action.start (input keys only, never values)
- action.ok with the duration
- action.error with a structured error payload, after which the error is
  re-raised to the host

The structured payload is attached as a compact JSON string under
``extra["action_json"]`` so formatters don't have to render nested dicts.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import jsonschema

from ..config import ACTIONS_LOGGER
from ..errors import _summarize_exception, structured_action_error
from ..exceptions import ActionInputError


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def _extract_context(args: Mapping[str, Any]) -> Dict[str, Any]:
    keys = sorted(k for k in args.keys() if k not in {"token"})
    return {"input_keys": keys, "input_count": len(keys)}


def _log_action_event(payload: Mapping[str, Any]) -> None:
    """Emit one readable line plus the full payload as JSON."""

    safe = {k: _jsonable(v) for k, v in payload.items()}
    status = safe.get("status", "")
    action_id = safe.get("action_id", "")
    dur = safe.get("duration_ms")
    dur_s = f" {int(dur)}ms" if isinstance(dur, (int, float)) else ""
    msg = f"[action] {action_id} {status}{dur_s} ({safe.get('event', 'action')})"

    action_json = json.dumps(safe, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    level = logging.ERROR if status == "error" else logging.INFO
    ACTIONS_LOGGER.log(
        level,
        msg,
        extra={"event": "action_json", "action_json": action_json, "action_id": action_id},
    )


def _missing_or_extra_field(error: jsonschema.ValidationError) -> Optional[str]:
    if error.path:
        return str(list(error.path)[0])
    instance = error.instance if isinstance(error.instance, Mapping) else {}
    if error.validator == "required":
        for name in error.validator_value:
            if name not in instance:
                return name
    if error.validator == "additionalProperties":
        allowed = set((error.schema or {}).get("properties", {}))
        for name in instance:
            if name not in allowed:
                return name
    return None


@dataclass
class ActionContext:
    """What the host hands an action for one run."""

    workspace_path: str
    input: Dict[str, Any]
    logger: logging.Logger = field(default_factory=lambda: ACTIONS_LOGGER)
    output: Callable[[str, Any], None] = field(default=lambda name, value: None)
    outputs: Dict[str, Any] = field(default_factory=dict)

    def set_output(self, name: str, value: Any) -> None:
        self.outputs[name] = value
        self.output(name, value)


Handler = Callable[[ActionContext], Awaitable[None]]


class TemplateAction:
    def __init__(
        self,
        id: str,
        description: str,
        schema: Mapping[str, Any],
        handler: Handler,
    ) -> None:
        jsonschema.Draft7Validator.check_schema(schema)
        self.id = id
        self.description = description
        self.schema = schema
        self._validator = jsonschema.Draft7Validator(schema)
        self._handler = handler

    def __repr__(self) -> str:
        return f"TemplateAction(id={self.id!r})"

    def validate_input(self, data: Mapping[str, Any]) -> None:
        error = jsonschema.exceptions.best_match(self._validator.iter_errors(data))
        if error is not None:
            raise ActionInputError(
                self.id, _summarize_exception(error), field=_missing_or_extra_field(error)
            ) from error

    async def execute(self, ctx: ActionContext) -> Dict[str, Any]:
        """Validate ``ctx.input``, run the handler and return the outputs."""

        call_id = str(uuid.uuid4())
        start = time.perf_counter()
        _log_action_event(
            {
                "event": "action.start",
                "status": "start",
                "action_id": self.id,
                "call_id": call_id,
                **_extract_context(ctx.input),
            }
        )
        try:
            self.validate_input(ctx.input)
            await self._handler(ctx)
        except Exception as exc:
            _log_action_event(
                {
                    "event": "action.error",
                    "status": "error",
                    "action_id": self.id,
                    "call_id": call_id,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "error": structured_action_error(exc, context=self.id),
                }
            )
            raise

        _log_action_event(
            {
                "event": "action.ok",
                "status": "ok",
                "action_id": self.id,
                "call_id": call_id,
                "duration_ms": int((time.perf_counter() - start) * 1000),
                "outputs": sorted(ctx.outputs),
            }
        )
        return dict(ctx.outputs)


def input_with_default(data: Mapping[str, Any], key: str, default: Any) -> Any:
    """Return ``data[key]`` when present and non-empty, else ``default``."""

    value = data.get(key)
    if value is None or value == "":
        return default
    return value


COMMON_PROPERTIES: Dict[str, Any] = {
    "server": {
        "type": "string",
        "title": "Server hostname",
        "description": "The hostname of the Azure DevOps service. Defaults to dev.azure.com",
    },
    "token": {
        "type": "string",
        "title": "Authentication Token",
        "description": "The token to use for authorization.",
    },
}


__all__ = [
    "ActionContext",
    "COMMON_PROPERTIES",
    "TemplateAction",
    "input_with_default",
]
