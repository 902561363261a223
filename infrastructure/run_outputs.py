"""Step outputs consumed by the CI workflow after a queue run."""

from __future__ import annotations
from tracking import t

import os
from pathlib import Path
from typing import Callable, Mapping, Optional


def set_output(
    name: str,
    value: str,
    *,
    env: Optional[Mapping[str, str]] = None,
    echo: Callable[[str], None] = print,
) -> None:
    """Append ``name`` to ``$GITHUB_OUTPUT`` or echo ``name=value`` locally.

    Values are written with the multi-line heredoc syntax so per-request
    result lines survive intact.
    """
    t('infrastructure.run_outputs.set_output')

    env = os.environ if env is None else env
    destination = env.get("GITHUB_OUTPUT")
    if destination:
        with Path(destination).open("a", encoding="utf-8") as handle:
            handle.write(f"{name}<<EOF\n{value}\nEOF\n")
        return
    echo(f"{name}={value}")


def publish_run_outputs(
    processed_count: int,
    results: str,
    *,
    status: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    echo: Callable[[str], None] = print,
) -> None:
    """Write the three outputs the notification step reads."""
    t('infrastructure.run_outputs.publish_run_outputs')

    if status is None:
        status = "success" if processed_count > 0 else "failure"
    set_output("processed_count", str(processed_count), env=env, echo=echo)
    set_output("booking_status", status, env=env, echo=echo)
    set_output("results", results, env=env, echo=echo)
