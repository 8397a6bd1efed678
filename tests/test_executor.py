import pytest

from codegrader.errors import ExternalServiceError, JudgeTimeout, ValidationError
from codegrader.executor import Executor
from tests.conftest import FakeJudge, b64, echo_verdict, make_cases


def compile_error(source, case):
    return {'status': {'id': 6, 'description': 'Compilation Error'}, 'compile_output': b64('syntax error')}


def test_all_pass_in_order(fake_judge):
    cases = make_cases('t', 10)
    results = Executor(fake_judge).execute('code', 'python', cases)

    assert [r.testcase_index for r in results] == list(range(10))
    assert [r.input for r in results] == [c.input for c in cases]
    assert all(r.passed for r in results)


def test_batches_are_initial_then_chunks(fake_judge):
    cases = make_cases('t', 48)
    Executor(fake_judge, fail_fast_count=5, batch_size=20).execute('code', 'java', cases)

    assert [len(batch[2]) for batch in fake_judge.submitted] == [5, 20, 20, 3]
    assert all(batch[1] == 62 for batch in fake_judge.submitted)
    flattened = [tc for batch in fake_judge.submitted for tc in batch[2]]
    assert flattened == cases


def test_fewer_cases_than_initial_batch(fake_judge):
    results = Executor(fake_judge).execute('code', 'python', make_cases('t', 2))
    assert len(results) == 2
    assert len(fake_judge.submitted) == 1


def test_compile_error_stops_after_first_result():
    judge = FakeJudge(compile_error)
    results = Executor(judge).execute('code', 'python', make_cases('t', 30))

    assert len(results) == 1
    assert results[0].error_type == 'compile'
    assert results[0].compile_error == 'syntax error'
    assert len(judge.submitted) == 1


def test_internal_error_mid_initial_batch_stops_scan():
    def verdict(source, case):
        if case.input == 't-in-2':
            return {'status': {'id': 13, 'description': 'Internal Error'}}
        return echo_verdict(source, case)

    judge = FakeJudge(verdict)
    results = Executor(judge).execute('code', 'python', make_cases('t', 12))

    assert [r.passed for r in results] == [True, True, False]
    assert results[-1].error_type == 'internal'
    assert len(judge.submitted) == 1


def test_runtime_errors_do_not_abort():
    def verdict(source, case):
        return {'status': {'id': 11, 'description': 'Runtime Error (NZEC)'}, 'stderr': b64('boom')}

    judge = FakeJudge(verdict)
    results = Executor(judge).execute('code', 'python', make_cases('t', 7))
    assert len(results) == 7
    assert len(judge.submitted) == 2


def test_compile_error_in_later_chunk_does_not_abort():
    def verdict(source, case):
        if case.input == 't-in-6':
            return compile_error(source, case)
        return echo_verdict(source, case)

    judge = FakeJudge(verdict)
    results = Executor(judge, batch_size=2).execute('code', 'python', make_cases('t', 9))
    assert len(results) == 9
    assert results[6].error_type == 'compile'


def test_unknown_language_rejected_before_submitting(fake_judge):
    with pytest.raises(ValidationError):
        Executor(fake_judge).execute('code', 'brainfuck', make_cases('t', 3))
    assert fake_judge.submitted == []


@pytest.mark.parametrize('error', [ExternalServiceError('Batch submission failed'), JudgeTimeout('timed out')])
def test_judge_errors_propagate_from_later_chunks(error):
    class FlakyJudge(FakeJudge):
        def poll_batch(self, tokens):
            if len(self.polled) == 1:
                raise error
            return super().poll_batch(tokens)

    with pytest.raises(type(error)):
        Executor(FlakyJudge()).execute('code', 'python', make_cases('t', 10))


def test_rejects_non_positive_sizes(fake_judge):
    with pytest.raises(ValueError):
        Executor(fake_judge, batch_size=0)
