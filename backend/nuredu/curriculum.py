"""Read-only access to the static curriculum document.

The curriculum is a language-keyed tree of specialities, each holding
numbered grades, each holding ordered lesson slots::

    {
      "specialities": {"us": [{"name": ..., "grades": [
          {"gradeNumber": 1, "lessons": [{"queue": 1, "title": ...}]}]}]},
      "lessonTypes": {"us": ["Theory", ...]}
    }

It is loaded once per process and never written. Declaration order is
preserved everywhere since it is the order the curriculum is presented
in. Lookups that may miss return `None`; callers handle the absent case.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from .config import settings

logger = logging.getLogger("nuredu.curriculum")


@dataclass(frozen=True)
class LessonSlot:
    """A placeholder lesson position (queue + title) inside a grade."""
    queue: int
    title: str

    def label(self) -> str:
        return f"[{self.queue}] - {self.title}"


@dataclass(frozen=True)
class Grade:
    number: int
    lessons: Tuple[LessonSlot, ...] = ()

    def label(self) -> str:
        return f"Grade {self.number}"


@dataclass(frozen=True)
class Speciality:
    """A named curriculum track holding grade levels."""
    name: str
    grades: Tuple[Grade, ...] = ()


class CurriculumTree:
    """Immutable language → specialities mapping plus lesson types."""

    def __init__(self, specialities: Mapping[str, Tuple[Speciality, ...]], lesson_types: Mapping[str, Tuple[str, ...]]):
        self._specialities: Dict[str, Tuple[Speciality, ...]] = dict(specialities)
        self._lesson_types: Dict[str, Tuple[str, ...]] = dict(lesson_types)

    def languages(self) -> Tuple[str, ...]:
        return tuple(self._specialities)

    def specialities_for(self, language: str) -> Tuple[Speciality, ...]:
        """Specialities declared for `language`; empty when unknown."""
        return self._specialities.get(language, ())

    def lesson_types_for(self, language: str) -> Tuple[str, ...]:
        """Lesson types declared for `language`; empty when unknown."""
        return self._lesson_types.get(language, ())

    def find_speciality(self, language: str, name: str) -> Optional[Speciality]:
        return next((s for s in self.specialities_for(language) if s.name == name), None)

    @staticmethod
    def find_grade(speciality: Optional[Speciality], number) -> Optional[Grade]:
        if speciality is None or not number:
            return None
        return next((g for g in speciality.grades if g.number == int(number)), None)

    @staticmethod
    def find_slot(grade: Optional[Grade], queue) -> Optional[LessonSlot]:
        if grade is None or not queue:
            return None
        return next((s for s in grade.lessons if s.queue == int(queue)), None)

    def to_document(self, language: str) -> dict:
        """Return the JSON shape served by `GET /curriculum/{language}`."""
        return {
            "language": language,
            "specialities": [
                {
                    "name": s.name,
                    "grades": [
                        {"gradeNumber": g.number, "lessons": [{"queue": l.queue, "title": l.title} for l in g.lessons]}
                        for g in s.grades
                    ],
                }
                for s in self.specialities_for(language)
            ],
            "lessonTypes": list(self.lesson_types_for(language)),
        }


def parse_curriculum(document: dict) -> CurriculumTree:
    """Build a `CurriculumTree` from the decoded JSON document.

    Raises `ValueError` when the document does not have the expected
    shape or repeats a speciality name, grade number or lesson queue
    within the same parent.
    """
    if not isinstance(document, dict):
        raise ValueError("curriculum document must be an object")
    specialities = {}
    for language, items in (document.get("specialities") or {}).items():
        parsed = []
        for item in items:
            grades = []
            for g in item.get("grades", []):
                slots = tuple(LessonSlot(queue=int(l["queue"]), title=str(l["title"])) for l in g.get("lessons", []))
                _check_unique([s.queue for s in slots], f"lesson queue in {language}/{item.get('name')}/{g.get('gradeNumber')}")
                grades.append(Grade(number=int(g["gradeNumber"]), lessons=slots))
            _check_unique([g.number for g in grades], f"grade in {language}/{item.get('name')}")
            parsed.append(Speciality(name=str(item["name"]), grades=tuple(grades)))
        _check_unique([s.name for s in parsed], f"speciality in {language}")
        specialities[language] = tuple(parsed)
    lesson_types = {lang: tuple(str(t) for t in types) for lang, types in (document.get("lessonTypes") or {}).items()}
    return CurriculumTree(specialities, lesson_types)


def _check_unique(values, what: str) -> None:
    seen = set()
    for v in values:
        if v in seen:
            raise ValueError(f"duplicate {what}: {v}")
        seen.add(v)


def load_curriculum(path: Path) -> CurriculumTree:
    """Read and parse the curriculum document stored at `path`."""
    tree = parse_curriculum(json.loads(Path(path).read_text(encoding="utf-8")))
    logger.info("curriculum loaded from %s (languages: %s)", path, ", ".join(tree.languages()))
    return tree


@lru_cache(maxsize=1)
def get_curriculum() -> CurriculumTree:
    """Return the process-wide curriculum loaded from `CURRICULUM_DATA_PATH`."""
    return load_curriculum(settings.CURRICULUM_DATA_PATH)
