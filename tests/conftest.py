"""
Shared fixtures: an in-process fake judge and a small problem catalogue.
"""
import base64

import pytest

from codegrader.executor import Executor
from codegrader.grading import GradingService
from codegrader.schemas import Problem, SectionProblem, TestCase
from codegrader.store import InMemoryProblemStore


def b64(text):
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


def echo_verdict(source, case):
    """Accepted, printing the expected output."""
    return {'status': {'id': 3, 'description': 'Accepted'}, 'stdout': b64(case.output + '\n')}


class FakeJudge:
    """Stands in for JudgeClient. ``verdict(source, case)`` builds each raw result."""

    def __init__(self, verdict=echo_verdict):
        self.verdict = verdict
        self.submitted = []
        self.polled = []
        self._jobs = {}

    def submit_batch(self, source_code, language_id, test_cases):
        self.submitted.append((source_code, language_id, list(test_cases)))
        tokens = []
        for tc in test_cases:
            token = f'tok-{len(self._jobs)}'
            self._jobs[token] = (source_code, tc)
            tokens.append(token)
        return tokens

    def poll_batch(self, tokens):
        self.polled.append(list(tokens))
        return [self.verdict(*self._jobs[t]) for t in tokens]


def make_cases(prefix, count):
    return [TestCase(input=f'{prefix}-in-{i}', output=f'{prefix}-out-{i}') for i in range(count)]


@pytest.fixture
def fake_judge():
    return FakeJudge()


@pytest.fixture
def problem():
    return Problem(
        id='p1',
        title='Echo',
        example_test_cases=make_cases('ex', 3),
        hidden_test_cases=make_cases('hid', 2),
        driver_code={'python': 'print(solve(input()))'},
    )


@pytest.fixture
def store(problem):
    store = InMemoryProblemStore()
    store.add_problem(problem)
    store.add_section_problem(SectionProblem(id='link1', problem_id='p1'))
    return store


@pytest.fixture
def service(store, fake_judge):
    return GradingService(store, Executor(fake_judge))
