import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger("beegrub")

StepAction = Callable[[Dict[str, Any]], Any]
StepCompensation = Callable[[Dict[str, Any]], None]


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: StepAction
    compensation: Optional[StepCompensation] = None
    # Non-critical failures are recorded and the saga moves on.
    critical: bool = True


@dataclass
class SagaResult:
    context: Dict[str, Any]
    completed: List[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[Exception] = None
    tolerated: Dict[str, Exception] = field(default_factory=dict)
    compensated: List[str] = field(default_factory=list)
    compensation_errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None

    @property
    def fully_compensated(self) -> bool:
        return not self.compensation_errors


class Saga:
    """Runs named steps in order and unwinds completed ones on a critical failure.

    Every step is an independent remote call, so there is no transaction to
    roll back: compensations are best effort and their own failures are only
    collected on the result.
    """

    def __init__(self, name: str, steps: List[SagaStep]) -> None:
        self.name = name
        self.steps = steps

    def run(self, context: Optional[Dict[str, Any]] = None) -> SagaResult:
        result = SagaResult(context=dict(context or {}))
        done: List[SagaStep] = []
        for step in self.steps:
            try:
                result.context[step.name] = step.action(result.context)
            except Exception as exc:
                if not step.critical:
                    logger.warning("Saga %s: step %s failed, continuing: %s", self.name, step.name, exc)
                    result.tolerated[step.name] = exc
                    continue
                logger.error("Saga %s: step %s failed: %s", self.name, step.name, exc)
                result.failed_step = step.name
                result.error = exc
                self._compensate(done, result)
                return result
            done.append(step)
            result.completed.append(step.name)
        return result

    def _compensate(self, done: List[SagaStep], result: SagaResult) -> None:
        for step in reversed(done):
            if step.compensation is None:
                continue
            try:
                step.compensation(result.context)
            except Exception as exc:
                logger.exception("Saga %s: compensation for %s failed: %s", self.name, step.name, exc)
                result.compensation_errors[step.name] = exc
                continue
            result.compensated.append(step.name)
