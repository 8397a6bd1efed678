import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from .schemas import Problem, SectionProblem


logger = logging.getLogger(__name__)


class ProblemStore(Protocol):
    def get_problem(self, problem_id: str) -> Optional[Problem]:
        ...

    def get_section_problem(self, section_problem_id: str) -> Optional[SectionProblem]:
        ...

    def save_section_problem(self, link: SectionProblem) -> SectionProblem:
        ...


class InMemoryProblemStore:
    """Problems and assessment links held in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._problems: Dict[str, Problem] = {}
        self._links: Dict[str, SectionProblem] = {}

    def add_problem(self, problem: Problem) -> Problem:
        with self._lock:
            self._problems[problem.id] = problem
            return problem

    def add_section_problem(self, link: SectionProblem) -> SectionProblem:
        return self.save_section_problem(link)

    def get_problem(self, problem_id: str) -> Optional[Problem]:
        with self._lock:
            return self._problems.get(problem_id)

    def get_section_problem(self, section_problem_id: str) -> Optional[SectionProblem]:
        with self._lock:
            return self._links.get(section_problem_id)

    def save_section_problem(self, link: SectionProblem) -> SectionProblem:
        with self._lock:
            self._links[link.id] = link
            return link

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'InMemoryProblemStore':
        """Load ``{"problems": [...], "sectionProblems": [...]}`` from a JSON file."""
        store = cls()
        data = json.loads(Path(path).read_text(encoding='utf-8'))
        for item in data.get('problems', []):
            store.add_problem(Problem.model_validate(item))
        for item in data.get('sectionProblems', []):
            store.add_section_problem(SectionProblem.model_validate(item))
        logger.info(
            'Loaded %d problems and %d section links from %s',
            len(store._problems), len(store._links), path,
        )
        return store
