"""Helpers for the workflow CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

import yaml

from ..workflow import StateSet, WorkflowState


def _parse_context_pairs(pairs: Iterable[str]) -> Dict[str, Any]:
    """Turn ``key=value`` strings into a context map.

    Values are read as YAML scalars/collections, so ``count=3`` yields an
    integer and ``tags=[a, b]`` a list; anything unparseable stays a string.
    """
    context: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            context[key] = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            context[key] = raw
    return context


def _load_definition(path: Path) -> Tuple[StateSet, Dict[str, Any]]:
    """Read a workflow definition from a YAML or JSON file.

    The file holds ``states`` (a list, or an object with a ``states`` list)
    and an optional ``predefined_context`` mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    states = data.get("states", [])
    if isinstance(states, list):
        states = {"states": states}
    return StateSet.model_validate(states), dict(data.get("predefined_context") or {})


def _format_state(state: WorkflowState, show_internal: bool = False) -> str:
    context = state.context if show_internal else state.visible_context
    lines = [
        f"Session {state.session_id}: {state.current_state} ({state.state_type.value})",
        f"Workflow: {state.workflow_id or '-'}",
    ]
    if state.is_error:
        lines.append("Error state reached")
    if context:
        lines.append(f"Context: {json.dumps(context, default=str, ensure_ascii=False)}")
    if state.screen is not None:
        lines.append(f"Screen: {state.screen.title or '(untitled)'}")
        for button in state.screen.buttons or []:
            lines.append(f"  [{button.label}] -> event '{button.event}'")
    return "\n".join(lines)
