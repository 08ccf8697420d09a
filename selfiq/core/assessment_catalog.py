"""Assessment content definitions & catalog.

Definitions are authored as JSON documents (one assessment per file) in the
content directory and loaded once, read-only. Each document looks like::

    {
      "testId": "big_five_short",
      "testName": "Big Five (short form)",
      "categoryId": "personality",
      "isPremium": false,
      "scoringCategories": ["extraversion", ...],
      "questions": [
        {"id": "q1", "text": "...",
         "answers": [{"id": "a", "text": "...", "score": {"extraversion": 2}}]}
      ]
    }

Integrity is validated on load (unique ids, at least one question, every
answer's score categories declared in ``scoringCategories``); a broken file
raises ``InvalidDefinitionError`` instead of surfacing mid-session.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from selfiq.exceptions import InvalidDefinitionError, UnknownAssessmentError, UnknownAnswerError

logger = logging.getLogger("selfiq.catalog")


@dataclass(frozen=True)
class Answer:
    id: str
    text: str
    score: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    answers: Tuple[Answer, ...]

    def answer(self, answer_id: str) -> Optional[Answer]:
        for a in self.answers:
            if a.id == answer_id:
                return a
        return None


@dataclass(frozen=True)
class AssessmentDefinition:
    id: str
    name: str
    category_id: str
    questions: Tuple[Question, ...]
    scoring_categories: Tuple[str, ...] = ()
    is_premium: bool = False
    description: Optional[str] = None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def resolve(self, question_id: str, answer_id: str) -> Answer:
        """Return the Answer for a (question, answer) id pair or raise UnknownAnswerError."""
        q = self.question(question_id)
        if q is None:
            raise UnknownAnswerError(f"Question {question_id!r} is not part of {self.id}")
        a = q.answer(answer_id)
        if a is None:
            raise UnknownAnswerError(f"Answer {answer_id!r} is not an option of question {question_id!r}")
        return a


def parse_definition(doc: dict) -> AssessmentDefinition:
    """Build and validate an AssessmentDefinition from its JSON document."""
    try:
        test_id = str(doc["testId"])
        categories = tuple(str(c) for c in doc.get("scoringCategories") or [])
        questions = []
        for qdoc in doc["questions"]:
            answers = tuple(
                Answer(
                    id=str(adoc["id"]),
                    text=str(adoc.get("text", "")),
                    score={str(k): int(v) for k, v in (adoc.get("score") or {}).items()},
                )
                for adoc in qdoc["answers"]
            )
            questions.append(Question(id=str(qdoc["id"]), text=str(qdoc.get("text", "")), answers=answers))
        definition = AssessmentDefinition(
            id=test_id,
            name=str(doc.get("testName") or test_id),
            category_id=str(doc.get("categoryId") or "general"),
            questions=tuple(questions),
            scoring_categories=categories,
            is_premium=bool(doc.get("isPremium", False)),
            description=doc.get("description"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidDefinitionError(f"Malformed assessment document: {e}") from e
    _validate_integrity(definition)
    return definition


def _validate_integrity(definition: AssessmentDefinition) -> None:
    if not definition.questions:
        raise InvalidDefinitionError(f"{definition.id}: at least one question is required")
    qids = [q.id for q in definition.questions]
    if len(set(qids)) != len(qids):
        raise InvalidDefinitionError(f"{definition.id}: duplicate question ids")
    declared = set(definition.scoring_categories)
    for q in definition.questions:
        if not q.answers:
            raise InvalidDefinitionError(f"{definition.id}/{q.id}: question has no answers")
        aids = [a.id for a in q.answers]
        if len(set(aids)) != len(aids):
            raise InvalidDefinitionError(f"{definition.id}/{q.id}: duplicate answer ids")
        if declared:
            stray = {c for a in q.answers for c in a.score} - declared
            if stray:
                raise InvalidDefinitionError(
                    f"{definition.id}/{q.id}: undeclared score categories {sorted(stray)}"
                )


class AssessmentCatalog:
    """In-memory, read-only registry of assessment definitions."""

    def __init__(self, definitions: Iterable[AssessmentDefinition] = ()):
        self._by_id: Dict[str, AssessmentDefinition] = {}
        for d in definitions:
            if d.id in self._by_id:
                raise InvalidDefinitionError(f"Duplicate assessment id {d.id}")
            self._by_id[d.id] = d

    @classmethod
    def from_directory(cls, path: str | Path) -> "AssessmentCatalog":
        directory = Path(path)
        if not directory.is_dir():
            logger.warning(f"Content directory {directory} not found; catalog is empty")
            return cls()
        definitions = []
        for file in sorted(directory.glob("*.json")):
            with open(file, "r", encoding="utf-8") as f:
                definitions.append(parse_definition(json.load(f)))
        logger.info(f"Loaded {len(definitions)} assessment definition(s) from {directory}")
        return cls(definitions)

    def get(self, assessment_id: str) -> AssessmentDefinition:
        try:
            return self._by_id[assessment_id]
        except KeyError:
            raise UnknownAssessmentError(assessment_id) from None

    def find(self, assessment_id: str) -> Optional[AssessmentDefinition]:
        return self._by_id.get(assessment_id)

    def all(self) -> List[AssessmentDefinition]:
        return list(self._by_id.values())

    def by_category(self, category_id: str) -> List[AssessmentDefinition]:
        return [d for d in self._by_id.values() if d.category_id == category_id]

    def __contains__(self, assessment_id: str) -> bool:
        return assessment_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)
