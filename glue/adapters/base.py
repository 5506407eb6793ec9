"""Adapter capability interface and shared helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Protocol, runtime_checkable

import httpx
import typer

from ..exceptions import AdapterActionError

AdapterOptions = Dict[str, Any]
ActionCallable = Callable[[AdapterOptions], Awaitable[None]]


@dataclass(frozen=True)
class AdapterAction:
    """A named operation an adapter can perform."""

    name: str
    execute: ActionCallable


@runtime_checkable
class Adapter(Protocol):
    """Minimal capability interface every adapter provides.

    Adapters may additionally define ``async initialize()`` and
    ``async authenticate()``. Those hooks are driven by the CLI, never by the
    workflow engine.
    """

    name: str
    actions: Mapping[str, AdapterAction]


def action_table(*actions: AdapterAction) -> Dict[str, AdapterAction]:
    """Index ``actions`` by name."""
    return {action.name: action for action in actions}


def _quote_names(names: tuple[str, ...]) -> str:
    quoted = [f'"{n}"' for n in names]
    if len(quoted) == 1:
        return quoted[0]
    if len(quoted) == 2:
        return f"{quoted[0]} and {quoted[1]}"
    return ", ".join(quoted[:-1]) + f", and {quoted[-1]}"


def require_options(options: Mapping[str, Any], label: str, *names: str) -> None:
    """Raise unless every option in ``names`` is present and non-empty."""
    if any(not options.get(name) for name in names):
        noun = "option" if len(names) == 1 else "options"
        raise AdapterActionError(f"{label} requires {_quote_names(names)} {noun}")


def json_body(response: httpx.Response, failure: str) -> Dict[str, Any]:
    """Decode a JSON object response, raising ``failure`` when it is not one."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as exc:
        raise AdapterActionError(f"{failure}: invalid JSON response") from exc
    if not isinstance(data, dict):
        raise AdapterActionError(f"{failure}: unexpected response")
    return data


def prompt(question: str, hidden: bool = False) -> str:
    """Ask the operator for a value, hiding the input for secrets."""
    answer = typer.prompt(
        question, default="", show_default=False, hide_input=hidden
    )
    return answer.strip()


def info(message: str) -> None:
    typer.secho(message, fg=typer.colors.BRIGHT_BLACK)
