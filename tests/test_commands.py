from ghaflow.model.step_result import StepResult
from ghaflow.runner.commands import (
    ActionCommand,
    CommandContext,
    parse_key_value_pairs,
    try_parse_raw_action_command,
    unescape_command_data,
    unescape_command_property,
    unescape_kv_pairs,
)


def test_parse_github_command():
    parsed = try_parse_raw_action_command("::set-env name=x::value\n")
    assert parsed == ActionCommand("set-env", {"name": "x"}, "value")


def test_parse_github_command_without_properties():
    parsed = try_parse_raw_action_command("::add-path::/opt/bin\r\n")
    assert parsed == ActionCommand("add-path", {}, "/opt/bin")


def test_parse_devops_command():
    parsed = try_parse_raw_action_command("##[set-output name=a;x=y]val\n")
    assert parsed == ActionCommand("set-output", {"name": "a", "x": "y"}, "val")


def test_parse_rejects_plain_text_and_missing_newline():
    assert try_parse_raw_action_command("hello world\n") is None
    assert try_parse_raw_action_command("::set-env name=x::value") is None


def test_parse_key_value_pairs_drops_malformed():
    assert parse_key_value_pairs("a=1,b=2,c,d=e=f", ",") == {"a": "1", "b": "2"}
    assert parse_key_value_pairs("", ",") == {}


def test_unescape():
    assert unescape_command_data("a%0Ab%0Dc%25") == "a\nb\rc%"
    assert unescape_command_property("%3A%2C%0A") == ":,\n"
    assert unescape_command_data("%3A") == "%3A"
    assert unescape_kv_pairs({"name": "a%3Ab"}) == {"name": "a:b"}


def test_unescape_percent_is_not_unescaped_twice():
    assert unescape_command_data("%250A") == "%0A"


def test_plain_line_is_passed_through():
    ctx = CommandContext()
    assert ctx.handle_line("just output\n") is True
    assert ctx.env == {}


def test_set_env_updates_both_environments():
    ctx = CommandContext()
    assert ctx.handle_line("::set-env name=A%3AB::x%0Ay\n") is False
    assert ctx.env == {"A:B": "x\ny"}
    assert ctx.global_env == {"A:B": "x\ny"}


def test_set_env_case_insensitive_replaces_existing():
    ctx = CommandContext(env={"PATH": "old"}, environment_case_insensitive=True)
    ctx.handle_line("::set-env name=path::new\n")
    keys = [key for key in ctx.env if key.lower() == "path"]
    assert len(keys) == 1
    assert ctx.env[keys[0]] == "new"


def test_set_env_case_sensitive_keeps_both():
    ctx = CommandContext(env={"PATH": "old"})
    ctx.handle_line("::set-env name=path::new\n")
    assert ctx.env["PATH"] == "old"
    assert ctx.env["path"] == "new"


def test_set_output_for_current_step():
    ctx = CommandContext(current_step="step1", step_results={"step1": StepResult()})
    ctx.handle_line("::set-output name=out::v\n")
    assert ctx.step_results["step1"].outputs == {"out": "v"}


def test_set_output_unknown_step_is_ignored():
    ctx = CommandContext(current_step="missing", step_results={"step1": StepResult()})
    ctx.handle_line("::set-output name=out::v\n")
    assert ctx.step_results["step1"].outputs == {}


def test_set_output_follows_mapping():
    ctx = CommandContext(
        current_step="composite",
        step_results={"step1": StepResult()},
        output_mappings={("composite", "out"): ("step1", "real")},
    )
    ctx.handle_line("::set-output name=out::v\n")
    assert ctx.step_results["step1"].outputs == {"real": "v"}


def test_add_path_moves_to_front_without_duplicates():
    ctx = CommandContext()
    for line in ("::add-path::a\n", "::add-path::b\n", "::add-path::a\n"):
        ctx.handle_line(line)
    assert ctx.extra_path == ["a", "b"]


def test_add_mask():
    ctx = CommandContext()
    ctx.handle_line("::add-mask::token\n")
    assert ctx.masks == ["token"]


def test_save_state_needs_current_step():
    ctx = CommandContext(current_step="step")
    ctx.handle_line("::save-state name=name::state value\n")
    assert ctx.intra_action_state == {"step": {"name": "state value"}}

    empty = CommandContext()
    empty.handle_line("::save-state name=name::state value\n")
    assert empty.intra_action_state == {}


def test_stop_commands_and_resume():
    ctx = CommandContext()
    assert ctx.handle_line("::stop-commands::pause\n") is False
    assert ctx.handle_line("::set-env name=a::1\n") is False
    assert ctx.env == {}
    assert ctx.handle_line("::pause::\n") is False
    ctx.handle_line("::set-env name=a::1\n")
    assert ctx.env == {"a": "1"}


def test_informational_commands_are_consumed():
    ctx = CommandContext()
    for line in ("::debug::x\n", "::warning::x\n", "::error::x\n", "::unknown::x\n"):
        assert ctx.handle_line(line) is False
    assert ctx.env == {} and ctx.masks == []