import logging
from typing import List, Sequence

from .judge_client import JudgeClient, decode_result, language_id
from .schemas import ExecutionResult, TestCase


logger = logging.getLogger(__name__)

DEFAULT_FAIL_FAST_COUNT = 5
DEFAULT_BATCH_SIZE = 20

# A submission that fails like this will fail the same way on every case.
ABORTING_ERRORS = {'compile', 'internal'}


class Executor:
    """Runs test cases on the judge in serial batches.

    The first few cases go out alone; if any of them fails to compile or hits
    an internal judge error the rest are never submitted.
    """

    def __init__(
        self,
        judge: JudgeClient,
        fail_fast_count: int = DEFAULT_FAIL_FAST_COUNT,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if fail_fast_count < 1 or batch_size < 1:
            raise ValueError('fail_fast_count and batch_size must be positive')
        self.judge = judge
        self.fail_fast_count = fail_fast_count
        self.batch_size = batch_size

    def _run_batch(
        self, code: str, lang_id: int, test_cases: Sequence[TestCase], offset: int
    ) -> List[ExecutionResult]:
        tokens = self.judge.submit_batch(code, lang_id, test_cases)
        raw_results = self.judge.poll_batch(tokens)
        return [
            decode_result(raw, test_cases[i], offset + i)
            for i, raw in enumerate(raw_results)
        ]

    def execute(self, code: str, language: str, test_cases: Sequence[TestCase]) -> List[ExecutionResult]:
        lang_id = language_id(language)
        test_cases = list(test_cases)
        if not test_cases:
            return []
        logger.info('[EXECUTE] Running %d test case(s) in %s', len(test_cases), language)

        initial_count = min(self.fail_fast_count, len(test_cases))
        results: List[ExecutionResult] = []
        for result in self._run_batch(code, lang_id, test_cases[:initial_count], 0):
            results.append(result)
            if result.error_type in ABORTING_ERRORS:
                logger.warning(
                    '[FAIL-FAST] %s error on test #%d (status %d), skipping %d remaining test case(s)',
                    result.error_type, result.testcase_index + 1, result.status_code,
                    len(test_cases) - len(results),
                )
                return results

        remaining = len(test_cases) - initial_count
        if remaining:
            logger.info('Processing remaining %d test cases in chunks of %d', remaining, self.batch_size)
        for start in range(initial_count, len(test_cases), self.batch_size):
            chunk = test_cases[start:start + self.batch_size]
            results.extend(self._run_batch(code, lang_id, chunk, start))

        return results
