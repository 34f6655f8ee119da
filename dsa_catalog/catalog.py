"""Static DSA problem catalog with topic-balanced random selection."""
from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from interview_session.models import DSAProblem

logger = logging.getLogger(__name__)

_PROBLEM_LIST = TypeAdapter(List[DSAProblem])

MIN_PER_TOPIC = 1
MAX_PER_TOPIC = 3


def load_problems(path: Path) -> List[DSAProblem]:
    """Read the problem set; a missing or malformed file yields an empty catalog."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        problems = _PROBLEM_LIST.validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("Error loading DSA problems from %s: %s", path, exc)
        return []
    logger.info("Loaded %d DSA problems from %s", len(problems), path)
    return problems


def shuffled(items: Sequence[DSAProblem], rng: random.Random) -> List[DSAProblem]:
    """Fisher-Yates shuffle into a new list."""

    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


class ProblemCatalog:
    """Immutable problem set grouped by topic tag."""

    def __init__(self, problems: Iterable[DSAProblem], *, rng: Optional[random.Random] = None) -> None:
        unique: Dict[str, DSAProblem] = {}
        for problem in problems:
            unique.setdefault(problem.id, problem)
        self._problems: tuple[DSAProblem, ...] = tuple(unique.values())
        self._rng = rng or random.Random()
        categories: Dict[str, List[DSAProblem]] = {}
        for problem in self._problems:
            for topic in problem.topics:
                categories.setdefault(topic, []).append(problem)
        self._categories = {topic: tuple(items) for topic, items in categories.items()}

    @classmethod
    def from_path(cls, path: Path, *, rng: Optional[random.Random] = None) -> "ProblemCatalog":
        return cls(load_problems(path), rng=rng)

    def __len__(self) -> int:
        return len(self._problems)

    @property
    def problems(self) -> tuple[DSAProblem, ...]:
        return self._problems

    def topics(self) -> List[str]:
        return list(self._categories)

    def by_topic(self, topic: str) -> List[DSAProblem]:
        return list(self._categories.get(topic, ()))

    def by_id(self, problem_id: str) -> Optional[DSAProblem]:
        return next((problem for problem in self._problems if problem.id == problem_id), None)

    def by_slug(self, slug: str) -> Optional[DSAProblem]:
        return next((problem for problem in self._problems if problem.slug == slug), None)

    def by_difficulty(self, difficulty: str) -> List[DSAProblem]:
        return [problem for problem in self._problems if problem.difficulty == difficulty]

    def by_topics(self, topics: str | Sequence[str]) -> List[DSAProblem]:
        wanted = {topics} if isinstance(topics, str) else set(topics)
        return [problem for problem in self._problems if wanted.intersection(problem.topics)]

    def select_balanced_set(self, count: int) -> List[DSAProblem]:
        """Draw 1-3 problems per topic, shuffle the union, truncate to ``count``.

        Problems tagged with several topics are kept once. When the per-topic
        draw comes up short of ``count`` the remainder is filled from the
        undrawn problems, so the result always has
        ``min(count, len(self))`` distinct entries.
        """

        if count <= 0 or not self._problems:
            return []
        drawn: Dict[str, DSAProblem] = {}
        for topic, members in self._categories.items():
            take = min(self._rng.randint(MIN_PER_TOPIC, MAX_PER_TOPIC), len(members))
            for problem in shuffled(members, self._rng)[:take]:
                drawn.setdefault(problem.id, problem)
        selection = shuffled(list(drawn.values()), self._rng)[:count]
        if len(selection) < count:
            chosen = {problem.id for problem in selection}
            remainder = [problem for problem in self._problems if problem.id not in chosen]
            selection.extend(shuffled(remainder, self._rng)[: count - len(selection)])
        return selection


__all__ = ["MAX_PER_TOPIC", "MIN_PER_TOPIC", "ProblemCatalog", "load_problems", "shuffled"]
