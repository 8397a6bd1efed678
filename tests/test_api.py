"""
Route tests for the grading API
"""
import pytest
from fastapi.testclient import TestClient

from codegrader.config import Settings
from codegrader.errors import JudgeTimeout
from codegrader.executor import Executor
from codegrader.grading import GradingService
from codegrader.main import create_app
from tests.conftest import FakeJudge


@pytest.fixture
def client(service):
    return TestClient(create_app(Settings(), service=service))


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json() == {'ok': True}


def test_run_returns_camel_case(client):
    response = client.post('/code/run', json={'problemId': 'p1', 'code': 'x', 'language': 'python'})
    assert response.status_code == 200
    data = response.json()
    assert data['success'] is True
    assert data['summary'] == {'total': 3, 'passed': 3, 'failed': 0}
    first = data['results'][0]
    assert first['statusCode'] == 3
    assert first['expectedOutput'] == 'ex-out-0'
    assert first['testcaseIndex'] == 0


def test_run_requires_fields(client):
    response = client.post('/code/run', json={'problemId': 'p1', 'language': 'python'})
    assert response.status_code == 400
    assert response.json() == {'success': False, 'message': 'problemId, code, and language are required'}


def test_run_unknown_problem(client):
    response = client.post('/code/run', json={'problemId': 'zzz', 'code': 'x', 'language': 'python'})
    assert response.status_code == 404
    assert response.json()['message'] == 'Problem not found'


def test_run_unsupported_language(client):
    response = client.post('/code/run', json={'problemId': 'p1', 'code': 'x', 'language': 'cobol'})
    assert response.status_code == 400
    assert 'Unsupported language' in response.json()['message']


def test_submit_requires_user(client):
    response = client.post('/code/submit', json={'problemId': 'p1', 'code': 'x', 'language': 'python'})
    assert response.status_code == 401


def test_submit_hides_hidden_cases(client):
    response = client.post(
        '/code/submit',
        json={'problemId': 'p1', 'code': 'x', 'language': 'python', 'userId': 'u1', 'sectionProblemId': 'link1'},
    )
    assert response.status_code == 200
    data = response.json()
    assert data['score'] == 100
    assert data['maxScore'] == 100
    assert data['hiddenSummary'] == {'total': 2, 'passed': 2, 'failed': 0}
    assert all(r['input'] == '[Hidden]' for r in data['hiddenResults'])
    assert 'hid-in-0' not in response.text
    assert 'hid-out-1' not in response.text


def test_judge_timeout_maps_to_408(store):
    class SlowJudge(FakeJudge):
        def poll_batch(self, tokens):
            raise JudgeTimeout('Batch execution timed out')

    app = create_app(Settings(), service=GradingService(store, Executor(SlowJudge())))
    response = TestClient(app).post('/code/run', json={'problemId': 'p1', 'code': 'x', 'language': 'python'})
    assert response.status_code == 408
    assert response.json() == {'success': False, 'message': 'Batch execution timed out'}


def test_unexpected_error_is_500(store):
    class BrokenJudge(FakeJudge):
        def submit_batch(self, source_code, language_id, test_cases):
            raise RuntimeError('kaboom')

    app = create_app(Settings(), service=GradingService(store, Executor(BrokenJudge())))
    response = TestClient(app).post('/code/run', json={'problemId': 'p1', 'code': 'x', 'language': 'python'})
    assert response.status_code == 500
    assert response.json()['message'] == 'Failed to run code'


def test_configure_and_read_test_case_config(client):
    response = client.put(
        '/section-problems/link1/test-case-config',
        json={'config': {'exampleRange': {'start': 1, 'end': 2}}},
    )
    assert response.status_code == 200
    assert response.json()['usage']['example'] == {'selected': 2, 'total': 3, 'percentage': 67}

    response = client.get('/section-problems/link1/test-case-config')
    assert response.json()['config']['exampleRange'] == {'start': 1, 'end': 2}

    run = client.post(
        '/code/run',
        json={'problemId': 'p1', 'code': 'x', 'language': 'python', 'sectionProblemId': 'link1'},
    )
    assert [r['input'] for r in run.json()['results']] == ['ex-in-1', 'ex-in-2']


def test_configure_rejects_out_of_range(client):
    response = client.put('/section-problems/link1/test-case-config', json={'config': {'hiddenIndices': [5]}})
    assert response.status_code == 400
    assert 'Invalid hidden indices: [5]' in response.json()['message']


def test_shutdown_closes_judge_http_client():
    app = create_app(Settings(judge_url='http://judge.test'))
    judge = app.state.service.executor.judge
    with TestClient(app) as client:
        assert client.get('/health').status_code == 200
        assert not judge._http.is_closed
    assert judge._http.is_closed
