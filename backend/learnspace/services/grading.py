"""
Submission grading for LearnSpace.

A submission is graded by running its code through the sandbox once per test
case (test input on stdin, trimmed output compared with the expected output).
Challenges without test cases are checked against ``expected_output``; with
neither, a clean run passes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from learnspace.execution.sandbox import CodeExecutor, ExecutionKind, ExecutionResult, NO_OUTPUT
from learnspace.models.course import Challenge
from learnspace.models.submission import SubmissionResult


logger = logging.getLogger(__name__)


@dataclass
class CaseOutcome:
    passed: bool
    expected: Optional[str]
    actual: Optional[str]
    error: Optional[str] = None
    description: Optional[str] = None


@dataclass
class GradeReport:
    result: SubmissionResult
    tests_passed: int
    total_tests: int
    execution_time: int
    feedback: str
    cases: List[CaseOutcome] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.result == SubmissionResult.PASSED


def normalize_output(text: Optional[str]) -> str:
    """Trim surrounding whitespace and line-ending differences."""
    if text is None or text == NO_OUTPUT:
        return ""
    return "\n".join(line.rstrip() for line in text.strip().splitlines())


def _cases_for(challenge: Challenge) -> List[Dict[str, Any]]:
    if challenge.test_cases:
        return list(challenge.test_cases)
    if challenge.expected_output is not None:
        return [{"input": None, "expected_output": challenge.expected_output}]
    return [{"input": None, "expected_output": None}]


def _check(result: ExecutionResult, case: Dict[str, Any]) -> CaseOutcome:
    expected = case.get("expected_output")
    description = case.get("description")
    if not result.success:
        return CaseOutcome(False, expected, None, error=result.error, description=description)

    actual = normalize_output(result.output)
    if expected is None:
        return CaseOutcome(True, None, actual, description=description)
    return CaseOutcome(actual == normalize_output(expected), expected, actual, description=description)


def _feedback(outcomes: Sequence[CaseOutcome]) -> str:
    total = len(outcomes)
    for index, outcome in enumerate(outcomes, start=1):
        if outcome.passed:
            continue
        label = f"Test {index}" if total > 1 else "Test"
        if outcome.error is not None:
            return f"{label} raised an error: {outcome.error}"
        return f"{label} failed: expected {outcome.expected!r}, got {outcome.actual!r}"
    return f"All {total} tests passed" if total > 1 else "Test passed"


def grade(executor: CodeExecutor, challenge: Challenge, code: str, language: str) -> GradeReport:
    """
    Run ``code`` against a challenge's checks.

    Args:
        executor: Sandbox used to run the code
        challenge: Challenge providing test cases or expected output
        code: Source to run
        language: ``javascript`` or ``python``

    Returns:
        GradeReport: ``passed`` when every check passes, ``error`` when any
        run failed to complete, otherwise ``failed``
    """
    outcomes: List[CaseOutcome] = []
    elapsed = 0
    errored = False

    for case in _cases_for(challenge):
        result = executor.execute(code, language, stdin=case.get("input"))
        elapsed += result.duration_ms
        outcomes.append(_check(result, case))
        if not result.success:
            errored = True
            # No point trying the remaining cases without an interpreter
            if result.kind == ExecutionKind.RUNTIME_UNAVAILABLE:
                logger.error(f"Cannot grade challenge {challenge.id}: {result.error}")
                break

    tests_passed = sum(1 for o in outcomes if o.passed)
    total_tests = len(_cases_for(challenge))

    if tests_passed == total_tests:
        result_state = SubmissionResult.PASSED
    elif errored:
        result_state = SubmissionResult.ERROR
    else:
        result_state = SubmissionResult.FAILED

    return GradeReport(
        result=result_state,
        tests_passed=tests_passed,
        total_tests=total_tests,
        execution_time=elapsed,
        feedback=_feedback(outcomes),
        cases=outcomes,
    )
