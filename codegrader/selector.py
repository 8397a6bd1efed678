"""
Narrow a problem's example and hidden test cases to the subset an assessment
actually grades.
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple, TypeVar

from .errors import InvalidConfig
from .schemas import (
    CategoryUsage,
    IndexRange,
    Problem,
    TestCase,
    TestCaseConfig,
    TestCaseUsage,
)


logger = logging.getLogger(__name__)

T = TypeVar('T')


def _valid_span(count: int) -> str:
    return f'0-{count - 1}' if count else 'none'


def check_range(category: str, rng: IndexRange, count: int) -> None:
    if rng.start < 0 or rng.end >= count or rng.start > rng.end:
        raise InvalidConfig(
            f'Invalid {category} range [{rng.start}, {rng.end}]. Problem has {count} '
            f'{category} test cases (valid: {_valid_span(count)})',
            category=category,
            offending=(rng.start, rng.end),
        )


def check_indices(category: str, indices: Sequence[int], count: int) -> None:
    invalid = [i for i in indices if i < 0 or i >= count]
    if invalid:
        raise InvalidConfig(
            f'Invalid {category} indices: [{", ".join(str(i) for i in invalid)}]. '
            f'Valid range: {_valid_span(count)}',
            category=category,
            offending=invalid,
        )


def select(
    full_list: Sequence[T],
    rng: Optional[IndexRange] = None,
    indices: Optional[Sequence[int]] = None,
    category: str = 'test case',
) -> List[T]:
    """Return the configured subset of ``full_list``.

    A range is inclusive on both ends. Indices keep their given order and
    duplicates. When both are set the range takes precedence.
    """
    if rng is not None:
        check_range(category, rng, len(full_list))
        return list(full_list[rng.start:rng.end + 1])
    if indices is not None:
        check_indices(category, indices, len(full_list))
        return [full_list[i] for i in indices]
    return list(full_list)


def validate_config(problem: Problem, config: Optional[TestCaseConfig]) -> None:
    if config is None:
        return
    example_count = len(problem.example_test_cases)
    hidden_count = len(problem.hidden_test_cases)
    if config.example_range is not None:
        check_range('example', config.example_range, example_count)
    if config.hidden_range is not None:
        check_range('hidden', config.hidden_range, hidden_count)
    if config.example_indices is not None:
        check_indices('example', config.example_indices, example_count)
    if config.hidden_indices is not None:
        check_indices('hidden', config.hidden_indices, hidden_count)


def filter_test_cases(
    problem: Problem, config: Optional[TestCaseConfig]
) -> Tuple[List[TestCase], List[TestCase]]:
    if config is None:
        logger.info(
            'No test case config, using all %d example and %d hidden cases',
            len(problem.example_test_cases), len(problem.hidden_test_cases),
        )
        return list(problem.example_test_cases), list(problem.hidden_test_cases)

    example = select(
        problem.example_test_cases, config.example_range, config.example_indices, 'example'
    )
    hidden = select(
        problem.hidden_test_cases, config.hidden_range, config.hidden_indices, 'hidden'
    )
    logger.info(
        'Test case filter applied: example %d/%d, hidden %d/%d',
        len(example), len(problem.example_test_cases),
        len(hidden), len(problem.hidden_test_cases),
    )
    return example, hidden


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up."""
    return math.floor(part * 100 / whole + 0.5)


def _usage(total: int, rng: Optional[IndexRange], indices: Optional[Sequence[int]]) -> CategoryUsage:
    if rng is not None:
        selected = rng.end - rng.start + 1
    elif indices is not None:
        selected = len(indices)
    else:
        selected = total
    return CategoryUsage(
        selected=selected, total=total, percentage=percentage(selected, total) if total else 100
    )


def usage_report(problem: Problem, config: Optional[TestCaseConfig]) -> TestCaseUsage:
    config = config or TestCaseConfig()
    return TestCaseUsage(
        example=_usage(len(problem.example_test_cases), config.example_range, config.example_indices),
        hidden=_usage(len(problem.hidden_test_cases), config.hidden_range, config.hidden_indices),
    )
