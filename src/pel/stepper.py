"""Drives the interpreter one suspension point at a time.

The presentation layer owns the pace: nothing runs unless `Stepper.step()` is
called, and dropping a stepper mid-program is always safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from .errors import ExecutionError
from .lang import Stmt
from .main import Interpreter
from .trace import TraceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Terminal result of a program: success, or the first runtime error."""

    error: Optional[ExecutionError] = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class NotStarted:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NotStarted()"


NOT_STARTED = NotStarted()


@dataclass(frozen=True)
class Suspended:
    record: TraceRecord


@dataclass(frozen=True)
class Finished:
    result: RunResult


StepOutcome = Union[Suspended, Finished]
StepperState = Union[NotStarted, Suspended, Finished]


class Stepper:
    def __init__(self, interpreter: Interpreter):
        self.interpreter = interpreter
        self.state: StepperState = NOT_STARTED
        self.steps = 0
        self._generator = interpreter.interpret()
        self._fault: Optional[BaseException] = None
        self._pending: Optional[TraceRecord] = None

    @property
    def finished(self) -> bool:
        return isinstance(self.state, Finished)

    def step(self) -> StepOutcome:
        """Resume until the next suspension point or the end of the program."""
        if isinstance(self.state, Finished):
            return self.state

        if self._pending is not None:
            record, self._pending = self._pending, None
        else:
            record = self._resume()
            if record is None:
                return self.state

        self.steps += 1
        self.state = Suspended(record)
        logger.debug("step %d: %s", self.steps, record.message)
        return self.state

    def _resume(self) -> Optional[TraceRecord]:
        """Advance the interpreter; returns None once the stepper is finished."""
        if self._fault is not None:
            raise RuntimeError("interpreter stopped after an internal failure") from self._fault

        try:
            return next(self._generator)
        except StopIteration:
            self.state = Finished(RunResult(output=self.interpreter.program_output))
            logger.debug("program finished successfully after %d steps", self.steps)
        except ExecutionError as exc:
            self.state = Finished(RunResult(error=exc, output=self.interpreter.program_output))
            logger.debug("program failed after %d steps: %s", self.steps, exc)
        except Exception as exc:
            self._fault = exc
            raise
        return None

    def records(self, max_steps: Optional[int] = None) -> Iterator[TraceRecord]:
        """Yield trace records until the program finishes or `max_steps` is reached."""
        while max_steps is None or self.steps < max_steps:
            outcome = self.step()
            if isinstance(outcome, Finished):
                return
            yield outcome.record
        # a program that ends right at the limit still reports completion
        if self._pending is None and not self.finished:
            self._pending = self._resume()

    def run(self, max_steps: Optional[int] = None) -> Optional[RunResult]:
        """
        Step to completion and return the terminal result.

        Returns None when `max_steps` suspensions were taken without the
        program finishing; the stepper can be resumed afterwards.
        """
        for _ in self.records(max_steps):
            pass
        if isinstance(self.state, Finished):
            return self.state.result
        return None


def new_interpreter(statements: Iterable[Stmt]) -> Stepper:
    return Stepper(Interpreter(statements))
