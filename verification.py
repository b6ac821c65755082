"""
Run/verify state machine for one tutorial editor.

The machine is a pure reducer over EditorState; VerificationSession is
the thin owner that calls the interpreter and feeds the result back in.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from interpreter_bridge import InterpreterBridge, InterpreterError

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error: "


class Status(Enum):
    IDLE = "idle"           # never run
    SUCCESS = "success"     # last run printed exactly the expected output
    MISMATCH = "mismatch"   # last run printed anything else, errors included


@dataclass(frozen=True)
class EditorState:
    current_source: str
    last_output: Optional[str] = None
    status: Status = Status.IDLE


@dataclass(frozen=True)
class EditSource:
    source: str


@dataclass(frozen=True)
class RunCompleted:
    output: str


@dataclass(frozen=True)
class RunFailed:
    message: str


Action = Union[EditSource, RunCompleted, RunFailed]


def initial_state(source: str) -> EditorState:
    return EditorState(current_source=source)


def classify(output: str, expected_output: str) -> Status:
    """Byte-exact comparison; whitespace and case count."""
    return Status.SUCCESS if output == expected_output else Status.MISMATCH


def reduce(state: EditorState, action: Action, expected_output: str) -> EditorState:
    if isinstance(action, EditSource):
        # status stays whatever the last run produced
        return replace(state, current_source=action.source)
    if isinstance(action, RunCompleted):
        return replace(state, last_output=action.output,
                       status=classify(action.output, expected_output))
    if isinstance(action, RunFailed):
        # error text never counts as the expected answer
        return replace(state, last_output=f"{ERROR_PREFIX}{action.message}",
                       status=Status.MISMATCH)
    raise TypeError(f"Unknown action: {action!r}")


class VerificationSession:
    """Owns the EditorState of one tutorial section."""

    def __init__(self, section, bridge: InterpreterBridge):
        self.section = section
        self.bridge = bridge
        self.state = initial_state(section.starting_code)

    @property
    def status(self) -> Status:
        return self.state.status

    @property
    def output_text(self) -> str:
        """What the output pane shows; empty until the first run."""
        return self.state.last_output if self.state.last_output is not None else ""

    def dispatch(self, action: Action) -> EditorState:
        self.state = reduce(self.state, action, self.section.expected_output)
        return self.state

    def edit(self, source: str) -> EditorState:
        return self.dispatch(EditSource(source))

    def run(self) -> EditorState:
        source = self.state.current_source
        try:
            output = self.bridge.evaluate(source, [], True)
        except InterpreterError as e:
            logger.warning(f"Run of {self.section.title!r} failed: {e.message}")
            state = self.dispatch(RunFailed(e.message))
        else:
            state = self.dispatch(RunCompleted(output))
        logger.info(f"Ran {self.section.title!r}: {state.status.value}")
        return state
