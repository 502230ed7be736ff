"""Workflow commands written by steps to their output."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..model.step_result import StepResult

log = logging.getLogger(__name__)

_COMMAND_GA = re.compile(r"::([^ ]+)( (.+))?::([^\r\n]*)[\r\n]+")
_COMMAND_ADO = re.compile(r"##\[([^ ]+)( (.+))?\]([^\r\n]*)[\r\n]+")

# "%25" comes last so that an escaped percent sign is not unescaped twice.
_DATA_ESCAPES = (("%0D", "\r"), ("%0A", "\n"), ("%25", "%"))
_PROPERTY_ESCAPES = (
    ("%0D", "\r"),
    ("%0A", "\n"),
    ("%3A", ":"),
    ("%2C", ","),
    ("%25", "%"),
)


@dataclass
class ActionCommand:
    """A parsed command line: its name, properties and argument."""

    command: str
    kv_pairs: dict[str, str]
    arg: str


def parse_key_value_pairs(text: str, separator: str) -> dict[str, str]:
    """Parse ``key=value`` items; items without exactly one ``=`` are dropped."""
    pairs: dict[str, str] = {}
    for item in text.split(separator):
        parts = item.split("=")
        if len(parts) == 2:
            pairs[parts[0]] = parts[1]
    return pairs


def try_parse_raw_action_command(line: str) -> ActionCommand | None:
    """Parse ``::cmd k=v::arg`` or ``##[cmd k=v]arg`` lines ending in a newline."""
    for pattern, separator in ((_COMMAND_GA, ","), (_COMMAND_ADO, ";")):
        match = pattern.fullmatch(line)
        if match:
            return ActionCommand(
                command=match.group(1),
                kv_pairs=parse_key_value_pairs(match.group(3) or "", separator),
                arg=match.group(4),
            )
    return None


def _unescape(text: str, escapes: tuple[tuple[str, str], ...]) -> str:
    for escaped, plain in escapes:
        text = text.replace(escaped, plain)
    return text


def unescape_command_data(arg: str) -> str:
    """Undo the escaping of a command argument."""
    return _unescape(arg, _DATA_ESCAPES)


def unescape_command_property(arg: str) -> str:
    """Undo the escaping of a command property value."""
    return _unescape(arg, _PROPERTY_ESCAPES)


def unescape_kv_pairs(pairs: dict[str, str]) -> dict[str, str]:
    """Return ``pairs`` with every value unescaped."""
    return {key: unescape_command_property(value) for key, value in pairs.items()}


def _merge(target: dict[str, str], source: dict[str, str], case_insensitive: bool) -> None:
    for key, value in source.items():
        if case_insensitive:
            for existing in [k for k in target if k.lower() == key.lower()]:
                del target[existing]
        target[key] = value


@dataclass
class CommandContext:
    """State of a running job that workflow commands act upon."""

    env: dict[str, str] = field(default_factory=dict)
    global_env: dict[str, str] = field(default_factory=dict)
    current_step: str = ""
    step_results: dict[str, StepResult] = field(default_factory=dict)
    output_mappings: dict[tuple[str, str], tuple[str, str]] = field(default_factory=dict)
    extra_path: list[str] = field(default_factory=list)
    masks: list[str] = field(default_factory=list)
    intra_action_state: dict[str, dict[str, str]] = field(default_factory=dict)
    environment_case_insensitive: bool = False
    _resume_command: str = field(default="", init=False, repr=False)

    def handle_line(self, line: str) -> bool:
        """Process one output line; return True if it is not a command."""
        parsed = try_parse_raw_action_command(line)
        if parsed is None:
            return True
        command = parsed.command
        if self._resume_command and command != self._resume_command:
            log.info("  \u2699  %s", line)
            return False

        arg = unescape_command_data(parsed.arg)
        kv_pairs = unescape_kv_pairs(parsed.kv_pairs)
        if command == "set-env":
            self.set_env(kv_pairs, arg)
        elif command == "set-output":
            self.set_output(kv_pairs, arg)
        elif command == "add-path":
            self.add_path(arg)
        elif command == "debug":
            log.info("  \U0001F4AC  %s", line)
        elif command == "warning":
            log.info("  \U0001F6A7  %s", line)
        elif command == "error":
            log.info("  \u2757  %s", line)
        elif command == "add-mask":
            self.add_mask(arg)
            log.info("  \u2699  %s", "***")
        elif command == "stop-commands":
            self._resume_command = arg
            log.info("  \u2699  %s", line)
        elif command == self._resume_command:
            self._resume_command = ""
            log.info("  \u2699  %s", line)
        elif command == "save-state":
            log.info("  \U0001F4BE  %s", line)
            self.save_state(kv_pairs, arg)
        elif command == "add-matcher":
            log.info("  \u2753 add-matcher %s", arg)
        else:
            log.info("  \u2753  %s", line)
        return False

    def set_env(self, kv_pairs: dict[str, str], arg: str) -> None:
        """Set an environment variable for the job and later steps."""
        name = kv_pairs.get("name", "")
        log.info("  \u2699  ::set-env:: %s=%s", name, arg)
        update = {name: arg}
        _merge(self.env, update, self.environment_case_insensitive)
        _merge(self.global_env, update, self.environment_case_insensitive)

    def set_output(self, kv_pairs: dict[str, str], arg: str) -> None:
        """Record an output of the current (or mapped) step."""
        step_id = self.current_step
        output_name = kv_pairs.get("name", "")
        mapped = self.output_mappings.get((step_id, output_name))
        if mapped is not None:
            step_id, output_name = mapped
        result = self.step_results.get(step_id)
        if result is None:
            log.info("  \u2757  no outputs used step '%s'", step_id)
            return
        log.info("  \u2699  ::set-output:: %s=%s", output_name, arg)
        result.outputs[output_name] = arg

    def add_path(self, arg: str) -> None:
        """Put ``arg`` first on the extra path, dropping earlier copies of it."""
        log.info("  \u2699  ::add-path:: %s", arg)
        self.extra_path = [arg, *(entry for entry in self.extra_path if entry != arg)]

    def add_mask(self, arg: str) -> None:
        """Register a value to be masked in logs."""
        self.masks.append(arg)

    def save_state(self, kv_pairs: dict[str, str], arg: str) -> None:
        """Save a state value for the current step."""
        if not self.current_step:
            return
        state = self.intra_action_state.setdefault(self.current_step, {})
        state[kv_pairs.get("name", "")] = arg