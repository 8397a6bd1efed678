import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, configure_logging
from .errors import GradingError
from .executor import Executor
from .grading import GradingService
from .judge_client import JudgeClient
from .schemas import (
    ConfigureTestCasesRequest,
    RunOutcome,
    RunRequest,
    SubmitOutcome,
    SubmitRequest,
    TestCaseConfigResponse,
)
from .store import InMemoryProblemStore


logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'success': False, 'message': message})


def build_service(settings: Settings) -> GradingService:
    if settings.problems_file:
        store = InMemoryProblemStore.from_file(settings.problems_file)
    else:
        store = InMemoryProblemStore()
    judge = JudgeClient(
        settings.judge_url,
        max_retries=settings.max_retries,
        poll_interval_ms=settings.poll_interval_ms,
        timeout=settings.http_timeout,
    )
    executor = Executor(judge, fail_fast_count=settings.fail_fast_count, batch_size=settings.batch_size)
    return GradingService(store, executor)


def create_app(settings: Optional[Settings] = None, service: Optional[GradingService] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    owns_service = service is None
    if owns_service:
        service = build_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_service:
            service.executor.judge.close()

    app = FastAPI(title='Code Grader', lifespan=lifespan)
    app.state.service = service

    @app.exception_handler(GradingError)
    async def grading_error_handler(request: Request, exc: GradingError):
        logger.warning('%s %s failed: %s', request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.get('/health')
    def health():
        return {'ok': True}

    # Plain ``def`` routes: grading blocks on judge polling, so it runs in the threadpool.
    @app.post('/code/run', response_model=RunOutcome)
    def run_code(req: RunRequest, request: Request):
        if not req.problem_id or not req.code or not req.language:
            return _error(400, 'problemId, code, and language are required')
        try:
            return request.app.state.service.run_code(
                req.problem_id, req.code, req.language, req.section_problem_id
            )
        except GradingError:
            raise
        except Exception:
            logger.exception('Unexpected error while running code')
            return _error(500, 'Failed to run code')

    @app.post('/code/submit', response_model=SubmitOutcome)
    def submit_code(req: SubmitRequest, request: Request):
        if not req.user_id:
            return _error(401, 'Unauthorized')
        if not req.problem_id or not req.code or not req.language:
            return _error(400, 'problemId, code, and language are required')
        try:
            return request.app.state.service.submit_code(
                req.problem_id,
                req.code,
                req.language,
                req.user_id,
                assessment_id=req.assessment_id,
                section_id=req.section_id,
                section_problem_id=req.section_problem_id,
            )
        except GradingError:
            raise
        except Exception:
            logger.exception('Unexpected error while submitting code')
            return _error(500, 'Failed to submit code')

    @app.put('/section-problems/{section_problem_id}/test-case-config', response_model=TestCaseConfigResponse)
    def configure_test_cases(section_problem_id: str, req: ConfigureTestCasesRequest, request: Request):
        return request.app.state.service.configure_test_cases(section_problem_id, req.config)

    @app.get('/section-problems/{section_problem_id}/test-case-config', response_model=TestCaseConfigResponse)
    def get_test_case_config(section_problem_id: str, request: Request):
        return request.app.state.service.get_test_case_config(section_problem_id)

    return app


def run() -> None:
    uvicorn.run(create_app(), host=os.getenv('HOST', '0.0.0.0'), port=int(os.getenv('PORT', '8000')))


if __name__ == '__main__':
    run()
