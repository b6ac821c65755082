"""
Interpreter bridge: the one call the tour makes into BlockPipe.

Widgets depend only on InterpreterBridge.evaluate() and InterpreterError,
so the real interpreter can be swapped for a fake in tests.
"""
import logging
import math
import os
import re
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "blockpipe"


class InterpreterError(Exception):
    """Evaluation failed; carries a human-readable message."""

    def __init__(self, message):
        super().__init__(message)
        self.message = str(message)


class InterpreterBridge(ABC):
    @abstractmethod
    def evaluate(self, source: str, args: Sequence[str] = (), verbose: bool = True) -> str:
        """Evaluate source and return the printed result.

        Args:
            source: BlockPipe program text
            args: string parameters handed to the root closure
            verbose: execute the root closure instead of only evaluating it

        Raises:
            InterpreterError: the program could not be evaluated
        """


class CallableInterpreter(InterpreterBridge):
    """Adapts a plain function with the evaluate() signature."""

    def __init__(self, fn: Callable[[str, list, bool], str]):
        self.fn = fn

    def evaluate(self, source, args=(), verbose=True):
        try:
            result = self.fn(source, list(args), verbose)
        except InterpreterError:
            raise
        except Exception as e:
            raise InterpreterError(str(e)) from e
        return str(result)


class _CliOutputReader:
    """Recursive-descent reader for the CLI's printed result.

    The CLI prints the debug form of the evaluation result, e.g.
    ``Ok(Tuple([Integer(1), String("a")]))`` or ``Err("Unbound symbol 'x'")``.
    Values are rendered the way the interpreter displays them: strings
    unquoted, tuples space-joined in parentheses, closures as ``<closure>``.
    """

    NAME = re.compile(r'[A-Za-z]+')
    INTEGER = re.compile(r'-?[0-9]+')
    FLOAT = re.compile(r'-?(?:inf|NaN|[0-9]+(?:\.[0-9]+)?(?:e-?[0-9]+)?)')
    BOOLEAN = re.compile(r'true|false')
    ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}

    def __init__(self, text):
        self.text = text
        self.pos = 0

    def read(self):
        """Return (succeeded, text); text is the rendered value or the error message."""
        name = self._match(self.NAME, "Ok or Err")
        if name not in ("Ok", "Err"):
            raise self._error(f"expected Ok or Err, found {name!r}")
        self._expect("(")
        text = self._value() if name == "Ok" else self._string()
        self._expect(")")
        if self.pos != len(self.text):
            raise self._error("unexpected trailing text")
        return name == "Ok", text

    def _value(self):
        name = self._match(self.NAME, "a value")
        if name == "RuntimeInvocation":
            return "<runtime invocation>"
        self._expect("(")
        if name == "Integer":
            text = self._match(self.INTEGER, "an integer")
        elif name == "Float":
            text = display_float(float(self._match(self.FLOAT, "a float")))
        elif name == "Boolean":
            text = self._match(self.BOOLEAN, "a boolean")
        elif name == "String":
            text = self._string()
        elif name == "Tuple":
            text = "(" + " ".join(self._list()) + ")"
        elif name == "Closure":
            self._skip_nested()
            text = "<closure>"
        else:
            raise self._error(f"unknown value {name!r}")
        self._expect(")")
        return text

    def _list(self):
        self._expect("[")
        items = []
        while not self._accept("]"):
            if items:
                self._expect(", ")
            items.append(self._value())
        return items

    def _string(self):
        self._expect('"')
        chars = []
        while True:
            if self.pos >= len(self.text):
                raise self._error("unterminated string")
            ch = self.text[self.pos]
            self.pos += 1
            if ch == '"':
                return "".join(chars)
            if ch != "\\":
                chars.append(ch)
                continue
            code = self.text[self.pos:self.pos + 1]
            self.pos += 1
            if code == "u":
                digits = self._match(re.compile(r'\{([0-9a-fA-F]+)\}'), "a unicode escape")
                chars.append(chr(int(digits[1:-1], 16)))
            elif code in self.ESCAPES:
                chars.append(self.ESCAPES[code])
            else:
                raise self._error(f"unknown escape \\{code}")

    def _skip_nested(self):
        """Skip closure internals up to the closing parenthesis of the value."""
        depth = 0
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == '"':
                self._string()
                continue
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                if depth == 0:
                    return
                depth -= 1
            self.pos += 1
        raise self._error("unterminated closure")

    def _match(self, pattern, what):
        match = pattern.match(self.text, self.pos)
        if match is None:
            raise self._error(f"expected {what}")
        self.pos = match.end()
        return match.group()

    def _accept(self, literal):
        if self.text.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def _expect(self, literal):
        if not self._accept(literal):
            raise self._error(f"expected {literal!r}")

    def _error(self, reason):
        return InterpreterError(f"Unreadable interpreter output ({reason} at {self.pos}): {self.text}")


def display_float(value):
    """Format a float as the interpreter prints it: no exponent, no trailing ``.0``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def read_cli_output(stdout):
    """Rendered result of one CLI run; an ``Err(...)`` becomes InterpreterError."""
    succeeded, text = _CliOutputReader(stdout.strip()).read()
    if not succeeded:
        raise InterpreterError(text)
    return text


class SubprocessInterpreter(InterpreterBridge):
    """Runs the BlockPipe command-line interpreter on a temporary file."""

    def __init__(self, executable: str = DEFAULT_EXECUTABLE, cwd: Optional[str] = None):
        self.executable = executable
        self.cwd = cwd

    def _resolve(self):
        path = shutil.which(self.executable)
        if path is None:
            raise InterpreterError(f"BlockPipe interpreter not found: {self.executable}")
        return path

    def build_command(self, path, filename, args, verbose):
        if verbose:
            return [path, "interpret-execute", filename, *args]
        return [path, "interpret", filename]

    def evaluate(self, source, args=(), verbose=True):
        path = self._resolve()
        fd, filename = tempfile.mkstemp(suffix=".bp", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(source)
            cmd = self.build_command(path, filename, list(args), verbose)
            logger.debug(f"Running {cmd}")
            try:
                result = subprocess.run(cmd, capture_output=True, text=True,
                                        encoding="utf-8", errors="replace", cwd=self.cwd)
            except OSError as e:
                raise InterpreterError(f"Cannot start interpreter: {e}") from e
        finally:
            os.unlink(filename)

        # The CLI exits 0 for evaluation errors too; only I/O failures change the status.
        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip() or f"exit status {result.returncode}"
            raise InterpreterError(message)
        return read_cli_output(result.stdout)
