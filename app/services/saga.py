"""Ordered multi-step workflows with compensating actions.

Each step's action receives the shared context dict and its result is stored
under the step name. When a step fails, the compensations of all completed
steps run in reverse order and the original exception is re-raised.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("kkal_tracker.saga")

SagaContext = dict[str, Any]


@dataclass
class SagaStep:
    name: str
    action: Callable[[SagaContext], Any]
    compensation: Callable[[SagaContext], None] | None = None


class Saga:
    """Runs steps in order and unwinds them on the first failure."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.steps: list[SagaStep] = []

    def add_step(
        self,
        name: str,
        action: Callable[[SagaContext], Any],
        compensation: Callable[[SagaContext], None] | None = None,
    ) -> "Saga":
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def run(self, context: SagaContext | None = None) -> SagaContext:
        ctx: SagaContext = context if context is not None else {}
        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                ctx[step.name] = step.action(ctx)
            except BaseException as e:
                # BaseException so an interrupted request still unwinds.
                logger.warning(
                    "Saga %s: step '%s' failed (%s), compensating %d step(s)",
                    self.name,
                    step.name,
                    type(e).__name__,
                    len(completed),
                )
                self._compensate(completed, ctx)
                raise
            completed.append(step)
        return ctx

    def _compensate(self, completed: list[SagaStep], ctx: SagaContext) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation(ctx)
            except Exception:
                logger.exception("Saga %s: compensation for step '%s' failed", self.name, step.name)
