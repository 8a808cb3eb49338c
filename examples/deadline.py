"""This example fetches from a few slow sources, with a deadline on the lot."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gthread import par, race, run, sleep, timeout
from gthread.log import configure_logging

if TYPE_CHECKING:
    from gthread.typedefs import Context, Program, Resume, Routine


def source(name: str, delay_ms: float) -> Routine[str]:
    """Pretends to fetch from a source that answers after delay_ms."""

    def fetch(resume: Resume, context: Context) -> Program[str]:
        yield sleep(delay_ms, resume)
        context.setdefault("fetched", []).append(name)
        return f"{name} answered after {delay_ms}ms"

    return fetch


def gather_all(resume: Resume, context: Context) -> Program[list[str]]:
    """Asks every source in parallel."""
    answers = yield par(
        [source("alpha", 100), source("beta", 250), source("gamma", 50)],
        resume,
        context,
    )
    return answers


def entry(resume: Resume, context: Context) -> Program[None]:
    """Example entrypoint."""
    winner = yield race([gather_all, timeout(200, "deadline")], resume, context)
    if winner == "deadline":
        print(f"Gave up, only heard back from {context.get('fetched', [])}")
    else:
        for answer in winner:
            print(answer)


if __name__ == "__main__":
    configure_logging("DEBUG")
    run(entry)
