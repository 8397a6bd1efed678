from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Literal, Optional


ErrorType = Literal['compile', 'timeout', 'memory_limit', 'runtime', 'internal']


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TestCase(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    input: str = ''
    output: str = ''


class Problem(CamelModel):
    id: str
    title: Optional[str] = None
    example_test_cases: List[TestCase] = Field(default_factory=list)
    hidden_test_cases: List[TestCase] = Field(default_factory=list)
    driver_code: Dict[str, str] = Field(default_factory=dict)
    starter_code: Dict[str, str] = Field(default_factory=dict)


class IndexRange(CamelModel):
    start: int
    end: int


class TestCaseConfig(CamelModel):
    example_range: Optional[IndexRange] = None
    hidden_range: Optional[IndexRange] = None
    example_indices: Optional[List[int]] = None
    hidden_indices: Optional[List[int]] = None


class SectionProblem(CamelModel):
    id: str
    problem_id: str
    test_case_config: Optional[TestCaseConfig] = None


class ExecutionResult(CamelModel):
    testcase_index: int
    testcase_number: Optional[int] = None
    is_hidden: Optional[bool] = None
    input: str
    expected_output: str
    actual_output: str
    passed: bool
    status: str
    status_code: int
    error_type: Optional[ErrorType] = None
    time: Optional[str] = None
    memory: Optional[int] = None
    compile_error: Optional[str] = None
    runtime_error: Optional[str] = None
    error: Optional[str] = None


class Summary(CamelModel):
    total: int
    passed: int
    failed: int


class RunOutcome(CamelModel):
    success: bool
    results: List[ExecutionResult]
    summary: Summary


class SubmitOutcome(CamelModel):
    success: bool
    results: List[ExecutionResult]
    sample_results: List[ExecutionResult]
    hidden_results: List[ExecutionResult]
    summary: Summary
    sample_summary: Summary
    hidden_summary: Summary
    score: int
    max_score: int = 100


class RunRequest(CamelModel):
    problem_id: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    section_problem_id: Optional[str] = None


class SubmitRequest(RunRequest):
    user_id: Optional[str] = None
    assessment_id: Optional[str] = None
    section_id: Optional[str] = None


class ConfigureTestCasesRequest(CamelModel):
    config: Optional[TestCaseConfig] = None


class CategoryUsage(CamelModel):
    selected: int
    total: int
    percentage: int


class TestCaseUsage(CamelModel):
    example: CategoryUsage
    hidden: CategoryUsage


class TestCaseConfigResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    config: Optional[TestCaseConfig] = None
    usage: TestCaseUsage
