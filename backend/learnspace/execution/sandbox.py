"""
Sandboxed code execution.

Runs student code in a child process under a wall-clock budget and returns
the captured output or a failure reason. Nothing is shared between calls.

JavaScript runs inside a Node.js ``vm`` context whose only global is a
``console.log`` shim that collects lines. Python runs as ``python3 -c``.
Both children get a scrubbed environment, their own session (so a timeout
kills everything they started), and POSIX resource limits where available.
This is process isolation only: there is no filesystem or network jail.
"""

import json
import logging
import math
import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass, asdict
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from learnspace.core.config import settings

try:
    import resource
except ImportError:  # Windows
    resource = None


logger = logging.getLogger(__name__)

NO_OUTPUT = "(no output)"
TRUNCATED_SUFFIX = "\n... (output truncated)"

# Node enforces its budget inside the vm; the parent waits this much longer
# for node to start and report before killing it
NODE_STARTUP_GRACE_SECONDS = 2.0

# Python has no inner limit, so the parent timeout is the budget itself
PYTHON_STARTUP_GRACE_SECONDS = 0.2

SUPPORTED_LANGUAGES = ("javascript", "python")

NODE_HARNESS = r"""
const vm = require('node:vm');
let raw = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', (chunk) => { raw += chunk; });
process.stdin.on('end', () => {
  const { code, input, timeout } = JSON.parse(raw);
  const logs = [];
  const sandbox = {
    console: {
      log: (...args) => logs.push(args.map((arg) => String(arg)).join(' ')),
    },
  };
  if (typeof input === 'string') {
    sandbox.input = input;
  }
  let result;
  try {
    vm.runInNewContext(code, sandbox, { timeout });
    result = { success: true, output: logs.join('\n') };
  } catch (error) {
    result = {
      success: false,
      error: error && error.message ? String(error.message) : String(error),
      timedOut: Boolean(error && error.code === 'ERR_SCRIPT_EXECUTION_TIMEOUT'),
    };
  }
  process.stdout.write(JSON.stringify(result));
});
"""


class ExecutionKind(str, Enum):
    """Outcome class of one execution request."""
    OK = "ok"
    INVALID_INPUT = "invalid_input"
    UNSUPPORTED_LANGUAGE = "unsupported_language"
    TIMEOUT = "timeout"
    RUNTIME_ERROR = "runtime_error"
    RUNTIME_UNAVAILABLE = "runtime_unavailable"


@dataclass
class ExecutionResult:
    success: bool
    kind: ExecutionKind
    output: Optional[str] = None
    error: Optional[str] = None
    duration_ms: int = 0

    @classmethod
    def ok(cls, output: str, duration_ms: int = 0) -> "ExecutionResult":
        return cls(True, ExecutionKind.OK, output=output or NO_OUTPUT, duration_ms=duration_ms)

    @classmethod
    def failure(cls, kind: ExecutionKind, error: str, duration_ms: int = 0) -> "ExecutionResult":
        return cls(False, kind, error=error, duration_ms=duration_ms)

    def to_response(self) -> Dict[str, Any]:
        """Body for the HTTP endpoint."""
        if self.success:
            return {"success": True, "output": self.output}
        return {"success": False, "error": self.error}

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


class _Timeout(Exception):
    pass


class CodeExecutor:
    """
    Executes source text in a named language.

    Args:
        node_binary: Node.js executable used for JavaScript
        python_binary: Python executable used for Python
        js_timeout_ms: Budget for JavaScript code, enforced inside the vm
        python_timeout_ms: Wall-clock budget for the Python child
        memory_limit_mb: Address-space cap for Python, old-space cap for Node
        max_output_chars: Captured output beyond this is truncated
        max_concurrency: Child processes allowed to run at once
    """

    def __init__(
        self,
        node_binary: str = "node",
        python_binary: str = "python3",
        js_timeout_ms: int = 1200,
        python_timeout_ms: int = 2000,
        memory_limit_mb: int = 256,
        max_output_chars: int = 64 * 1024,
        max_concurrency: int = 4,
    ):
        self.node_binary = node_binary
        self.python_binary = python_binary
        self.js_timeout_ms = js_timeout_ms
        self.python_timeout_ms = python_timeout_ms
        self.memory_limit_mb = memory_limit_mb
        self.max_output_chars = max_output_chars
        self._slots = threading.BoundedSemaphore(max(1, max_concurrency))

    @classmethod
    def from_settings(cls) -> "CodeExecutor":
        return cls(
            node_binary=settings.NODE_BINARY,
            python_binary=settings.PYTHON_BINARY,
            js_timeout_ms=settings.JS_TIMEOUT_MS,
            python_timeout_ms=settings.PYTHON_TIMEOUT_MS,
            memory_limit_mb=settings.EXECUTION_MEMORY_LIMIT_MB,
            max_output_chars=settings.EXECUTION_MAX_OUTPUT_CHARS,
            max_concurrency=settings.EXECUTION_MAX_CONCURRENCY,
        )

    def execute(self, code: Any, language: Optional[str] = "javascript", stdin: Optional[str] = None) -> ExecutionResult:
        """
        Run ``code`` and report its output or the reason it failed.

        ``stdin`` is fed to a Python program's standard input and exposed to
        JavaScript as the global string ``input``.
        """
        if not code or not isinstance(code, str):
            return ExecutionResult.failure(ExecutionKind.INVALID_INPUT, "Code is required")

        if language not in SUPPORTED_LANGUAGES:
            return ExecutionResult.failure(ExecutionKind.UNSUPPORTED_LANGUAGE, "Unsupported language")
        runner = self._run_javascript if language == "javascript" else self._run_python

        started = time.perf_counter()
        with self._slots:
            result = runner(code, stdin)
        result.duration_ms = int((time.perf_counter() - started) * 1000)

        logger.debug(f"Executed {language} code: kind={result.kind.value} duration={result.duration_ms}ms")
        return result

    def _run_javascript(self, code: str, stdin: Optional[str]) -> ExecutionResult:
        payload = json.dumps({"code": code, "input": stdin, "timeout": self.js_timeout_ms})
        argv = [
            self.node_binary,
            f"--max-old-space-size={max(32, self.memory_limit_mb)}",
            "-e",
            NODE_HARNESS,
        ]
        try:
            proc = self._spawn(
                argv, payload, self.js_timeout_ms / 1000, NODE_STARTUP_GRACE_SECONDS, limit_memory=False
            )
        except FileNotFoundError:
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_UNAVAILABLE, "JavaScript runtime is not available"
            )
        except _Timeout:
            return self._timeout(self.js_timeout_ms)
        except OSError as e:
            logger.error(f"Could not start node: {e}")
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_UNAVAILABLE, "JavaScript runtime is not available"
            )

        try:
            outcome = json.loads(proc.stdout)
        except ValueError:
            # The harness always prints one JSON object unless node itself died
            logger.warning(f"Node harness exited {proc.returncode} without a result: {proc.stderr[:200]!r}")
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_ERROR, proc.stderr.strip() or "JavaScript execution failed"
            )

        if outcome.get("success"):
            return ExecutionResult.ok(self._truncate(outcome.get("output") or ""))
        if outcome.get("timedOut"):
            return self._timeout(self.js_timeout_ms)
        return ExecutionResult.failure(
            ExecutionKind.RUNTIME_ERROR, outcome.get("error") or "JavaScript execution failed"
        )

    def _run_python(self, code: str, stdin: Optional[str]) -> ExecutionResult:
        argv = [self.python_binary, "-c", code]
        try:
            proc = self._spawn(
                argv, stdin or "", self.python_timeout_ms / 1000, PYTHON_STARTUP_GRACE_SECONDS, limit_memory=True
            )
        except FileNotFoundError:
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_UNAVAILABLE, "Python runtime is not available"
            )
        except _Timeout:
            return self._timeout(self.python_timeout_ms)
        except ValueError:
            # argv entries cannot carry NUL characters
            return ExecutionResult.failure(
                ExecutionKind.INVALID_INPUT, "Code must not contain null characters"
            )
        except OSError as e:
            logger.error(f"Could not start {self.python_binary}: {e}")
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_UNAVAILABLE, "Python runtime is not available"
            )

        if proc.returncode == -getattr(signal, "SIGXCPU", -1):
            return self._timeout(self.python_timeout_ms)
        if proc.returncode != 0:
            return ExecutionResult.failure(
                ExecutionKind.RUNTIME_ERROR,
                self._truncate(proc.stderr) or "Python execution failed",
            )
        return ExecutionResult.ok(self._truncate(proc.stdout))

    def _spawn(
        self,
        argv: List[str],
        stdin_text: str,
        budget_seconds: float,
        grace_seconds: float,
        limit_memory: bool,
    ) -> subprocess.CompletedProcess:
        """
        Run a child to completion.

        Raises:
            FileNotFoundError: the interpreter binary does not exist
            ValueError: an argv entry contains a NUL character
            OSError: the child could not be started
            _Timeout: the child outlived its budget plus start-up grace
        """
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=self._child_env(),
            start_new_session=os.name == "posix",
            preexec_fn=self._limits(budget_seconds, limit_memory),
        )
        try:
            stdout, stderr = proc.communicate(stdin_text, timeout=budget_seconds + grace_seconds)
        except subprocess.TimeoutExpired:
            self._kill(proc)
            proc.communicate()
            raise _Timeout()
        return subprocess.CompletedProcess(argv, proc.returncode, stdout, stderr)

    def _limits(self, budget_seconds: float, limit_memory: bool) -> Optional[Callable[[], None]]:
        """
        POSIX resource limits applied in the child before exec.

        The hook runs between fork and exec while other threads may hold
        locks, so it only calls setrlimit on values computed here.
        """
        if resource is None:
            return None

        cpu_seconds = max(1, math.ceil(budget_seconds))
        mem_bytes = self.memory_limit_mb * 1024 * 1024

        def apply_limits():
            resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds + 1))
            resource.setrlimit(resource.RLIMIT_FSIZE, (10 * 1024 * 1024, 10 * 1024 * 1024))
            # V8 reserves far more address space than it uses
            if limit_memory:
                resource.setrlimit(resource.RLIMIT_AS, (mem_bytes, mem_bytes))

        return apply_limits

    @staticmethod
    def _child_env() -> Dict[str, str]:
        env = {
            key: os.environ[key]
            for key in ("PATH", "LANG", "LC_ALL", "SYSTEMROOT", "TMPDIR")
            if key in os.environ
        }
        env["PYTHONIOENCODING"] = "utf-8"
        env["PYTHONDONTWRITEBYTECODE"] = "1"
        return env

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        if os.name == "posix":
            try:
                os.killpg(proc.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
        proc.kill()

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_output_chars:
            return text
        return text[: self.max_output_chars] + TRUNCATED_SUFFIX

    @staticmethod
    def _timeout(budget_ms: int) -> ExecutionResult:
        return ExecutionResult.failure(ExecutionKind.TIMEOUT, f"Execution timed out after {budget_ms}ms")


@lru_cache
def get_executor() -> CodeExecutor:
    """Process-wide executor built from settings (FastAPI dependency)."""
    return CodeExecutor.from_settings()
