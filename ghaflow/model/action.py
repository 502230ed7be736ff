"""Action metadata files (action.yml / action.yaml)."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, IO

import yaml

from .step import Step, _scalar_text, _string_map


class ActionRunsUsing(str, enum.Enum):
    """Runner type of an action."""

    NODE12 = "node12"
    NODE16 = "node16"
    DOCKER = "docker"
    COMPOSITE = "composite"

    def __str__(self) -> str:
        return self.value


_USING_ORDER = (
    ActionRunsUsing.COMPOSITE,
    ActionRunsUsing.DOCKER,
    ActionRunsUsing.NODE12,
    ActionRunsUsing.NODE16,
)


def parse_runs_using(value: Any) -> ActionRunsUsing:
    """Parse ``runs.using`` case-insensitively; raise ValueError if unknown."""
    text = _scalar_text(value, "runs.using").lower()
    try:
        return ActionRunsUsing(text)
    except ValueError:
        allowed = " ".join(u.value for u in _USING_ORDER)
        raise ValueError(
            f"The runs.using key in action.yml must be one of: [{allowed}], got {text}"
        ) from None


@dataclass
class ActionRuns:
    """The ``runs`` section of an action."""

    using: ActionRunsUsing | None = None
    env: dict[str, str] = field(default_factory=dict)
    main: str = ""
    pre: str = ""
    pre_if: str = ""
    post: str = ""
    post_if: str = ""
    image: str = ""
    entrypoint: str = ""
    args: list[str] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)


@dataclass
class Branding:
    color: str = ""
    icon: str = ""


@dataclass
class Input:
    """An input parameter an action expects."""

    description: str = ""
    required: bool = False
    default: str = ""


@dataclass
class Output:
    """An output an action sets."""

    description: str = ""
    value: str = ""


@dataclass
class Action:
    """Metadata of an action."""

    name: str = ""
    author: str = ""
    description: str = ""
    inputs: dict[str, Input] = field(default_factory=dict)
    outputs: dict[str, Output] = field(default_factory=dict)
    runs: ActionRuns = field(default_factory=ActionRuns)
    branding: Branding = field(default_factory=Branding)


def _mapping(value: Any, what: str) -> Mapping:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(
            f"Failed to decode {what}: expected a mapping, got {type(value).__name__}"
        )
    return value


def _bool(value: Any, what: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ValueError(f"Failed to decode {what}: expected a boolean, got {value!r}")


def _input(data: Any) -> Input:
    data = _mapping(data, "input")
    return Input(
        description=_scalar_text(data.get("description"), "description"),
        required=_bool(data.get("required"), "required"),
        default=_scalar_text(data.get("default"), "default"),
    )


def _output(data: Any) -> Output:
    data = _mapping(data, "output")
    return Output(
        description=_scalar_text(data.get("description"), "description"),
        value=_scalar_text(data.get("value"), "value"),
    )


def _runs(data: Any) -> ActionRuns:
    data = _mapping(data, "runs")
    using = data.get("using")
    args = data.get("args") or []
    if not isinstance(args, list):
        raise ValueError("Failed to decode runs.args: expected a sequence")
    steps = data.get("steps") or []
    if not isinstance(steps, list):
        raise ValueError("Failed to decode runs.steps: expected a sequence")
    return ActionRuns(
        using=None if using is None else parse_runs_using(using),
        env=_string_map(data.get("env"), "runs.env"),
        main=_scalar_text(data.get("main"), "main"),
        pre=_scalar_text(data.get("pre"), "pre"),
        pre_if=_scalar_text(data.get("pre-if"), "pre-if"),
        post=_scalar_text(data.get("post"), "post"),
        post_if=_scalar_text(data.get("post-if"), "post-if"),
        image=_scalar_text(data.get("image"), "image"),
        entrypoint=_scalar_text(data.get("entrypoint"), "entrypoint"),
        args=[_scalar_text(a, "runs.args") for a in args],
        steps=[Step.from_mapping(s) for s in steps],
    )


def read_action(stream: IO[str] | str) -> Action:
    """Read an action from a text stream or string.

    Raises EOFError for an empty document and ValueError for invalid content.
    """
    data = yaml.safe_load(stream)
    if data is None:
        raise EOFError("EOF")
    data = _mapping(data, "action")
    branding = _mapping(data.get("branding"), "branding")
    action = Action(
        name=_scalar_text(data.get("name"), "name"),
        author=_scalar_text(data.get("author"), "author"),
        description=_scalar_text(data.get("description"), "description"),
        inputs={
            _scalar_text(k): _input(v)
            for k, v in _mapping(data.get("inputs"), "inputs").items()
        },
        outputs={
            _scalar_text(k): _output(v)
            for k, v in _mapping(data.get("outputs"), "outputs").items()
        },
        runs=_runs(data.get("runs")),
        branding=Branding(
            color=_scalar_text(branding.get("color"), "color"),
            icon=_scalar_text(branding.get("icon"), "icon"),
        ),
    )
    if not action.runs.pre_if:
        action.runs.pre_if = "always()"
    if not action.runs.post_if:
        action.runs.post_if = "always()"
    return action