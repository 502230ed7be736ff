"""Steps of a workflow job."""

from __future__ import annotations

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_INPUT_KEY_RE = re.compile(r"[^A-Z0-9-]")


def _scalar_text(value: Any, what: str = "value") -> str:
    """Render a YAML scalar as the text it was written as."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        raise ValueError(
            f"Failed to decode {what}: expected a scalar, got {type(value).__name__}"
        )
    return str(value)


def _string_map(value: Any, what: str) -> dict[str, str]:
    """Decode a YAML mapping into a str-to-str dictionary."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(
            f"Failed to decode {what}: expected a mapping, got {type(value).__name__}"
        )
    return {_scalar_text(k, what): _scalar_text(v, what) for k, v in value.items()}


def environment(node: Any) -> dict[str, str]:
    """Return the key=value environment held by a raw YAML node."""
    if isinstance(node, Mapping):
        return _string_map(node, "env")
    return {}


class StepType(enum.Enum):
    """Kind of step, decided by its ``run`` and ``uses`` keys."""

    RUN = "run"
    USES_DOCKER_URL = "docker"
    USES_ACTION_LOCAL = "local-action"
    USES_ACTION_REMOTE = "remote-action"
    REUSABLE_WORKFLOW_LOCAL = "local-reusable-workflow"
    REUSABLE_WORKFLOW_REMOTE = "remote-reusable-workflow"
    INVALID = "invalid"

    def __str__(self) -> str:
        return self.value


_SHELL_COMMANDS = {
    "": "bash --noprofile --norc -e -o pipefail {0}",
    "bash": "bash --noprofile --norc -e -o pipefail {0}",
    "pwsh": "pwsh -command . '{0}'",
    "python": "python {0}",
    "sh": "sh -e {0}",
    "cmd": '%ComSpec% /D /E:ON /V:OFF /S /C "CALL "{0}""',
    "powershell": "powershell -command . '{0}'",
}


@dataclass
class Step:
    """One step in a job."""

    id: str = ""
    if_: str = ""
    name: str = ""
    uses: str = ""
    run: str = ""
    working_directory: str = ""
    shell: str = ""
    env: Any = None
    with_: dict[str, str] = field(default_factory=dict)
    raw_continue_on_error: str = ""
    timeout_minutes: str = ""

    @classmethod
    def from_mapping(cls, data: Any) -> Step:
        """Build a step from its decoded YAML mapping."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(
                f"Failed to decode step: expected a mapping, got {type(data).__name__}"
            )
        return cls(
            id=_scalar_text(data.get("id"), "id"),
            if_=_scalar_text(data.get("if"), "if"),
            name=_scalar_text(data.get("name"), "name"),
            uses=_scalar_text(data.get("uses"), "uses"),
            run=_scalar_text(data.get("run"), "run"),
            working_directory=_scalar_text(
                data.get("working-directory"), "working-directory"
            ),
            shell=_scalar_text(data.get("shell"), "shell"),
            env=data.get("env"),
            with_=_string_map(data.get("with"), "with"),
            raw_continue_on_error=_scalar_text(
                data.get("continue-on-error"), "continue-on-error"
            ),
            timeout_minutes=_scalar_text(data.get("timeout-minutes"), "timeout-minutes"),
        )

    def __str__(self) -> str:
        return self.name or self.uses or self.run or self.id

    def environment(self) -> dict[str, str]:
        """Return the step's own env mapping."""
        return environment(self.env)

    def get_env(self) -> dict[str, str]:
        """Return the env with ``with`` inputs added as INPUT_* variables."""
        env = self.environment()
        for key, value in self.with_.items():
            env_key = _INPUT_KEY_RE.sub("_", key.upper())
            env[f"INPUT_{env_key.upper()}"] = value
        return env

    def shell_command(self) -> str:
        """Return the command template used to run the step's script."""
        return _SHELL_COMMANDS.get(self.shell, self.shell)

    def step_type(self) -> StepType:
        """Classify the step."""
        uses = self.uses
        if not self.run and not uses:
            return StepType.INVALID
        if self.run:
            return StepType.INVALID if uses else StepType.RUN
        if uses.startswith("docker://"):
            return StepType.USES_DOCKER_URL
        if uses.startswith("./.github/workflows") and uses.endswith((".yml", ".yaml")):
            return StepType.REUSABLE_WORKFLOW_LOCAL
        if (
            not uses.startswith("./")
            and ".github/workflows" in uses
            and (".yml@" in uses or ".yaml@" in uses)
        ):
            return StepType.REUSABLE_WORKFLOW_REMOTE
        if uses.startswith("./"):
            return StepType.USES_ACTION_LOCAL
        return StepType.USES_ACTION_REMOTE