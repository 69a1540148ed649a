# colmena

Building blocks for deploying NixOS configurations to many hosts at once,
driven by asyncio.

The package provides:

- `colmena.goal.Goal` – deployment goals (`build`, `push`, `switch`, `boot`,
  `test`, `dry-activate`, `keys`), parsed with `Goal.parse`, and what each one
  implies (`requires_activation`, `should_switch_profile`,
  `persists_after_reboot`, `requires_target_host`, `success_str`).
- `colmena.limits` – `ParallelismLimit`, which holds asyncio semaphores for
  concurrent evaluation (default 1) and apply (default 10) work, and
  `EvaluationNodeLimit`, which caps how many hosts go into one evaluation.
  `EvaluationNodeLimit.parse("auto")` picks a limit from available memory
  (1 GiB reserved, 512 MiB per host, at least 1, falling back to 10 when
  memory cannot be read); `"0"` means no limit.
- `colmena.options` – `Options`, the deployment switches (substituters,
  gzip, key upload, reboot, GC roots, building on the target, replacing
  unknown profiles) and `EvaluatorType` (`chunked` or `streaming`).
- `colmena.expression` – `NixExpression`, `SerializedNixExpression` for
  embedding JSON-serialisable data via `builtins.fromJSON`, and `nix_quote`
  for quoting a string as a Nix string literal.
- `colmena.events` – `JobState`, `JobType`, `Event`, `JobStats`,
  `JobMetadata` and `describe_node_list`, which produce the human-readable
  lines such as `"alpha, beta, and 5 other nodes"`.
- `colmena.job` – `JobMonitor`, `JobHandle` and `MetaJobHandle`: jobs report
  events over a queue, the monitor tracks their states, forwards
  `ProgressMessage`s to an optional progress queue, and on completion logs
  each failed job with its last 20 lines of output.
- `colmena.flake` – `Flake` and `FlakeMetadata`, which resolve flakes
  through `nix flake metadata --json`, and `lock_flake_quiet`, which runs
  `nix flake lock`.
- `colmena.errors` – the exception hierarchy, rooted at `ColmenaError`, and
  `from_returncode` for turning a child's return code into `ChildFailure` or
  `ChildKilled`.

## Installing

```
pip install .
```

The flake functions start `nix`, so it must be on `PATH`.

## Example

```python
import asyncio

from colmena.events import JobType
from colmena.goal import Goal
from colmena.job import JobMonitor

async def main():
    monitor, meta = JobMonitor.create(None)

    async def work(job):
        build = job.create_job(JobType.BUILD, ["alpha"])
        await build.run(lambda j: asyncio.sleep(0))
        return Goal.parse("switch").success_str()

    result, _ = await asyncio.gather(meta.run(work), monitor.run_until_completion())
    print(result)  # Activation successful

asyncio.run(main())
```

## What this package does not do

It has no command-line program and does not itself deploy anything: there
is no hive loading, no node selection, no connection to hosts, no building,
pushing, activation, key upload or reboot. There is also no evaluator that
runs Nix evaluations and streams their results. The goals, limits, options
and job monitor here are the pieces such a deployment is made from.

## Running the tests

```
pip install .[test]
pytest
```