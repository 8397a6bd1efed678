"""
Public run/submit entry points.

``run_code`` grades the visible example cases and returns full detail.
``submit_code`` grades example and hidden cases together, scores them, and
never returns the content of a hidden case, only whether it passed.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from .assembler import assemble
from .errors import NotFoundError, ValidationError
from .executor import Executor
from .schemas import (
    ExecutionResult,
    Problem,
    RunOutcome,
    SubmitOutcome,
    Summary,
    TestCase,
    TestCaseConfig,
    TestCaseConfigResponse,
)
from .selector import filter_test_cases, percentage, usage_report, validate_config
from .store import ProblemStore


logger = logging.getLogger(__name__)

HIDDEN_PLACEHOLDER = '[Hidden]'
HIDDEN_CORRECT = '✓ Correct'
HIDDEN_INCORRECT = '✗ Incorrect'
MAX_SCORE = 100


def summarize(results: Sequence[ExecutionResult], total: int) -> Summary:
    passed = sum(1 for r in results if r.passed)
    return Summary(total=total, passed=passed, failed=total - passed)


def redact(result: ExecutionResult, number: int) -> ExecutionResult:
    return ExecutionResult(
        testcase_index=result.testcase_index,
        testcase_number=number,
        is_hidden=True,
        input=HIDDEN_PLACEHOLDER,
        expected_output=HIDDEN_PLACEHOLDER,
        actual_output=HIDDEN_CORRECT if result.passed else HIDDEN_INCORRECT,
        passed=result.passed,
        status=result.status,
        status_code=result.status_code,
        error_type=result.error_type,
        time=result.time,
        memory=result.memory,
    )


class GradingService:
    def __init__(self, store: ProblemStore, executor: Executor):
        self.store = store
        self.executor = executor

    def _load(self, problem_id: str, section_problem_id: Optional[str]) -> Tuple[Problem, Optional[TestCaseConfig]]:
        problem = self.store.get_problem(problem_id)
        if problem is None:
            raise NotFoundError('Problem not found')

        config = None
        if section_problem_id:
            link = self.store.get_section_problem(section_problem_id)
            if link is None:
                raise NotFoundError('Section problem not found')
            config = link.test_case_config
        return problem, config

    def _execute(self, problem: Problem, code: str, language: str, cases: List[TestCase]) -> List[ExecutionResult]:
        full_code = assemble(code, problem.driver_code, language)
        return self.executor.execute(full_code, language, cases)

    def run_code(
        self,
        problem_id: str,
        code: str,
        language: str,
        section_problem_id: Optional[str] = None,
    ) -> RunOutcome:
        logger.info('[RUN] Running code for problem %s', problem_id)
        problem, config = self._load(problem_id, section_problem_id)
        sample, _ = filter_test_cases(problem, config)
        if not sample:
            raise ValidationError('No sample testcases available for execution')

        results = self._execute(problem, code, language, sample)
        summary = summarize(results, len(sample))
        return RunOutcome(
            success=summary.passed == summary.total,
            results=results,
            summary=summary,
        )

    def submit_code(
        self,
        problem_id: str,
        code: str,
        language: str,
        user_id: str,
        assessment_id: Optional[str] = None,
        section_id: Optional[str] = None,
        section_problem_id: Optional[str] = None,
    ) -> SubmitOutcome:
        logger.info(
            '[SUBMIT] Submitting code for problem %s by user %s (assessment %s, section %s)',
            problem_id, user_id, assessment_id or '-', section_id or '-',
        )
        problem, config = self._load(problem_id, section_problem_id)
        sample, hidden = filter_test_cases(problem, config)
        all_cases = sample + hidden
        if not all_cases:
            raise ValidationError('No testcases available')
        logger.info(
            'Executing %d test cases (%d example + %d hidden)', len(all_cases), len(sample), len(hidden)
        )

        results = self._execute(problem, code, language, all_cases)
        boundary = len(sample)
        sample_results = [
            r.model_copy(update={'is_hidden': False, 'testcase_number': i + 1})
            for i, r in enumerate(results[:boundary])
        ]
        hidden_results = [
            redact(r, boundary + i + 1) for i, r in enumerate(results[boundary:])
        ]

        summary = summarize(results, len(all_cases))
        score = percentage(summary.passed, summary.total)
        logger.info('[SUBMIT] Score: %d/%d (%d/%d passed)', score, MAX_SCORE, summary.passed, summary.total)

        return SubmitOutcome(
            success=summary.passed == summary.total,
            results=sample_results + hidden_results,
            sample_results=sample_results,
            hidden_results=hidden_results,
            summary=summary,
            sample_summary=summarize(sample_results, len(sample)),
            hidden_summary=summarize(hidden_results, len(hidden)),
            score=score,
            max_score=MAX_SCORE,
        )

    def configure_test_cases(
        self, section_problem_id: str, config: Optional[TestCaseConfig]
    ) -> TestCaseConfigResponse:
        link = self.store.get_section_problem(section_problem_id)
        if link is None:
            raise NotFoundError('Section problem not found')
        problem = self.store.get_problem(link.problem_id)
        if problem is None:
            raise NotFoundError('Problem not found')

        validate_config(problem, config)
        self.store.save_section_problem(link.model_copy(update={'test_case_config': config}))

        usage = usage_report(problem, config)
        logger.info(
            '[TEST_CASE_CONFIG] %s will use example %d/%d, hidden %d/%d',
            section_problem_id,
            usage.example.selected, usage.example.total,
            usage.hidden.selected, usage.hidden.total,
        )
        message = 'Test case configuration saved' if config else 'Will use all test cases'
        return TestCaseConfigResponse(message=message, config=config, usage=usage)

    def get_test_case_config(self, section_problem_id: str) -> TestCaseConfigResponse:
        link = self.store.get_section_problem(section_problem_id)
        if link is None:
            raise NotFoundError('Section problem not found')
        problem = self.store.get_problem(link.problem_id)
        if problem is None:
            raise NotFoundError('Problem not found')
        return TestCaseConfigResponse(
            config=link.test_case_config,
            usage=usage_report(problem, link.test_case_config),
        )
