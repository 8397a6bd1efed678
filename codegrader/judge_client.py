"""
Client for the Judge0 batch submission API.

The judge compiles and runs each job in its own sandbox. We only submit
batches, poll for their completion and decode what comes back.
"""
import base64
import binascii
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from .errors import ExternalServiceError, JudgeTimeout, ValidationError
from .schemas import ExecutionResult, TestCase


logger = logging.getLogger(__name__)

LANGUAGE_IDS = {
    'python': 71,
    'javascript': 63,
    'java': 62,
    'c++': 54,
    'cpp': 54,
    'c': 50,
    'go': 60,
}

STATUS_ACCEPTED = 3
STATUS_TIMEOUT = 5
STATUS_COMPILE_ERROR = 6
STATUS_MEMORY_LIMIT = 9
STATUS_INTERNAL_ERROR = 13
# 1 = In Queue, 2 = Processing
LAST_PENDING_STATUS = 2

POLL_FIELDS = 'token,status,stdout,stderr,compile_output,time,memory'


def language_id(language: str) -> int:
    lang_id = LANGUAGE_IDS.get((language or '').strip().lower())
    if lang_id is None:
        raise ValidationError(f'Unsupported language: {language}')
    return lang_id


def _encode(text: str) -> str:
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


def _decode(raw: Optional[str]) -> str:
    if not raw:
        return ''
    try:
        return base64.b64decode(raw).decode('utf-8', errors='replace')
    except (binascii.Error, ValueError):
        logger.warning('Judge returned a field that is not valid base64')
        return raw


def _preview(text: str, size: int = 20) -> str:
    flat = text.replace('\n', '\\n')
    return flat if len(flat) <= size else flat[:size] + '...'


def status_id_of(raw: Dict[str, Any], default: int) -> int:
    """The numeric verdict of a raw result, or ``default`` when it is missing or not a number."""
    value = (raw.get('status') or {}).get('id')
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def classify(status_id: int) -> Optional[str]:
    if status_id == STATUS_COMPILE_ERROR:
        return 'compile'
    if status_id == STATUS_TIMEOUT:
        return 'timeout'
    if status_id == STATUS_MEMORY_LIMIT:
        return 'memory_limit'
    if 7 <= status_id <= 12:
        return 'runtime'
    if status_id >= STATUS_INTERNAL_ERROR:
        return 'internal'
    return None


def decode_result(raw: Dict[str, Any], test_case: TestCase, index: int) -> ExecutionResult:
    status = raw.get('status') or {}
    status_id = status_id_of(raw, STATUS_INTERNAL_ERROR)
    stdout = _decode(raw.get('stdout'))
    stderr = _decode(raw.get('stderr'))
    compile_output = _decode(raw.get('compile_output'))

    actual = stdout.strip()
    expected = test_case.output.strip()
    passed = status_id == STATUS_ACCEPTED and actual == expected

    logger.info(
        '[TEST #%d] %s | In: "%s" | Exp: "%s" | Act: "%s"',
        index + 1, 'PASSED' if passed else 'FAILED',
        _preview(test_case.input), _preview(expected), _preview(actual),
    )
    if status_id != STATUS_ACCEPTED:
        logger.info('   Status %d (%s)', status_id, status.get('description', ''))
        if stderr:
            logger.debug('   Stderr: %s', stderr[:100])

    run_time = raw.get('time')
    return ExecutionResult(
        testcase_index=index,
        input=test_case.input,
        expected_output=expected,
        actual_output=actual,
        passed=passed,
        status=status.get('description') or '',
        status_code=status_id,
        error_type=classify(status_id),
        time=str(run_time) if run_time is not None else None,
        memory=raw.get('memory'),
        compile_error=compile_output if status_id == STATUS_COMPILE_ERROR else None,
        runtime_error=stderr or None,
        error=compile_output or stderr or None,
    )


class JudgeClient:
    def __init__(
        self,
        base_url: str,
        max_retries: int = 40,
        poll_interval_ms: int = 3000,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.poll_interval_ms = poll_interval_ms
        self._http = http_client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    def close(self) -> None:
        self._http.close()

    def submit_batch(self, source_code: str, language_id: int, test_cases: Sequence[TestCase]) -> List[str]:
        logger.info('[JUDGE0 BATCH] Submitting %d jobs', len(test_cases))
        encoded_source = _encode(source_code)
        submissions = []
        for tc in test_cases:
            job = {
                'source_code': encoded_source,
                'language_id': language_id,
                'stdin': _encode(tc.input),
            }
            if tc.output:
                job['expected_output'] = _encode(tc.output)
            submissions.append(job)

        try:
            resp = self._http.post(
                f'{self.base_url}/submissions/batch',
                params={'base64_encoded': 'true'},
                json={'submissions': submissions},
            )
            resp.raise_for_status()
            tokens = [item['token'] for item in resp.json()]
        except httpx.HTTPStatusError as e:
            logger.error('[JUDGE0 BATCH] Submit failed with HTTP %d', e.response.status_code)
            raise ExternalServiceError('Batch submission failed', status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error('[JUDGE0 BATCH] Submit failed: %s', e)
            raise ExternalServiceError('Batch submission failed') from e
        except (ValueError, KeyError, TypeError) as e:
            logger.error('[JUDGE0 BATCH] Malformed submit response: %s', e)
            raise ExternalServiceError('Batch submission failed') from e

        if len(tokens) != len(test_cases):
            raise ExternalServiceError(
                f'Judge returned {len(tokens)} tokens for {len(test_cases)} submissions'
            )
        logger.info('[JUDGE0 BATCH] Submitted %d jobs', len(tokens))
        return tokens

    def _fetch(self, tokens: Sequence[str]) -> List[Dict[str, Any]]:
        resp = self._http.get(
            f'{self.base_url}/submissions/batch',
            params={
                'tokens': ','.join(tokens),
                'base64_encoded': 'true',
                'fields': POLL_FIELDS,
            },
        )
        resp.raise_for_status()
        return resp.json()['submissions']

    def poll_batch(self, tokens: Sequence[str]) -> List[Dict[str, Any]]:
        for attempt in range(1, self.max_retries + 1):
            self._sleep(self.poll_interval_ms / 1000)
            try:
                submissions = self._fetch(tokens)
            except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                logger.warning('[JUDGE0 BATCH] Poll attempt %d failed: %s', attempt, e)
                continue

            if len(submissions) != len(tokens):
                raise ExternalServiceError(
                    f'Judge returned {len(submissions)} results for {len(tokens)} tokens'
                )
            pending = [
                s for s in submissions
                if status_id_of(s, 0) <= LAST_PENDING_STATUS
            ]
            if pending:
                logger.info(
                    '[JUDGE0 BATCH] Processing... %d/%d remaining (attempt %d)',
                    len(pending), len(tokens), attempt,
                )
                continue

            logger.info('[JUDGE0 BATCH] All %d jobs completed', len(tokens))
            return submissions

        logger.error('[JUDGE0 BATCH] Gave up after %d poll attempts', self.max_retries)
        raise JudgeTimeout('Batch execution timed out')
