# ghaflow

Building blocks for working with GitHub Actions style workflows in plain
Python:

- **Action metadata** (`ghaflow.model.action`): `read_action` reads an
  `action.yml` document into an `Action` with its `Input`s, `Output`s,
  `ActionRuns` and `Branding`. `runs.using` is parsed case-insensitively into
  `ActionRunsUsing` (`node12`, `node16`, `docker`, `composite`); `pre_if` and
  `post_if` default to `always()`. An empty document raises `EOFError`,
  invalid content raises `ValueError`.
- **Steps** (`ghaflow.model.step`): `Step.from_mapping` builds a step from a
  decoded YAML mapping. `Step.step_type()` classifies it as a `StepType`
  (run, docker URL, local or remote action, local or remote reusable
  workflow, invalid), `Step.get_env()` adds `with` inputs as `INPUT_*`
  variables, and `Step.shell_command()` gives the command template for the
  step's shell.
- **Step results** (`ghaflow.model.step_result`): `StepResult` with its
  outputs, conclusion and outcome, and the `StepStatus` enum
  (`success`, `failure`, `skipped`); `parse_step_status` turns a name back
  into a status.
- **Contexts** (`ghaflow.model.github_context`): `GithubContext` and
  `JobContext`. `GithubContext` derives `ref`, `sha`, `ref_type`,
  `ref_name`, `base_ref`, `head_ref` and `repository_owner` from the event
  payload. Where the event does not say, it falls back on lookup functions
  you pass in (`find_git_ref`, `find_git_revision`, `find_github_repo`).
- **Expressions** (`ghaflow.expr.parser`, `ghaflow.expr.values`):
  `tokenize` and `parse_expression` turn the text inside `${{ }}` into a
  tree of nodes, and `walk` iterates over that tree. `is_truthy`,
  `coerce_to_string`, `coerce_to_number` and `compare_values` implement the
  runner's truthiness, coercion and comparison rules.
- **Workflow commands** (`ghaflow.runner.commands`):
  `try_parse_raw_action_command` parses `::cmd k=v::arg` and `##[cmd k=v]arg`
  lines. `CommandContext.handle_line` applies `set-env`, `set-output`,
  `add-path`, `add-mask`, `save-state` and `stop-commands` to the job state.
- **Executable lookup** (`ghaflow.lookpath`): `look_path` finds an
  executable with the rules of the running platform.
  `look_path_unix`, `look_path_windows` and `look_path_plan9` apply one
  platform's rules explicitly. A failed lookup raises `LookPathError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Read an action definition:

```python
from ghaflow.model.action import read_action

with open("action.yml") as stream:
    action = read_action(stream)
print(action.runs.using, action.runs.pre_if)   # e.g. node16 always()
```

Classify a step and build its environment:

```python
from ghaflow.model.step import Step

step = Step.from_mapping({"uses": "docker://alpine:3", "with": {"my-arg": "x"}})
print(step.step_type())   # docker
print(step.get_env())     # {'INPUT_MY-ARG': 'x'}
```

Fill in the ref of a github context:

```python
from ghaflow.model.github_context import GithubContext

ghc = GithubContext(event_name="push", event={"ref": "refs/heads/main"})
ghc.set_ref("main", ".")
ghc.set_ref_type_and_name()
print(ghc.ref, ghc.ref_type, ghc.ref_name)   # refs/heads/main branch main
```

Parse an expression and compare values:

```python
from ghaflow.expr.parser import CompareKind, parse_expression, walk
from ghaflow.expr.values import compare_values, is_truthy

tree = parse_expression("github.event_name == 'push' && !cancelled()")
print([type(node).__name__ for node in walk(tree)])

print(compare_values("3", 3, CompareKind.EQ))   # True
print(is_truthy(""), is_truthy([]))             # False True
```

Apply workflow commands to a job's state:

```python
from ghaflow.model.step_result import StepResult
from ghaflow.runner.commands import CommandContext

ctx = CommandContext(current_step="build", step_results={"build": StepResult()})
ctx.handle_line("::set-output name=result::ok\n")
ctx.handle_line("::add-path::/opt/tools\n")
print(ctx.step_results["build"].outputs)   # {'result': 'ok'}
print(ctx.extra_path)                      # ['/opt/tools']
```

## What this package does not do

- It does not read workflow files. There are no workflow or job models,
  no matrix expansion and no planning of jobs into stages.
- It parses expressions and provides the value rules, but it has no
  evaluator that resolves contexts such as `github`, `env` or `steps`.
  It also lacks the built-in functions (`format`, `join`, `toJSON`,
  `fromJSON`, `hashFiles`, `success()`, ...).
- It does not talk to git. The `GithubContext` fallbacks use only the
  lookup functions you pass in.
- It does not run steps, actions or containers, and it has no command-line
  tool.