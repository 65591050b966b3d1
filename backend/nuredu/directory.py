"""View-model for browsing stored lessons by speciality and grade.

The directory mirrors the curriculum page of the admin frontend: pick a
speciality, then one of its grades, then a lesson. The lessons listed
for a grade are the stored records whose language and grade match;
stored lessons do not record a speciality, so the same records appear
under every speciality that has that grade.

Admins get actionable entries and may batch-delete; everyone else sees
locked entries. The locking is presentational only, the API enforces
the admin role on its own.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from . import schemas
from .curriculum import CurriculumTree, Speciality
from .errors import NetworkError, ParseError
from .lesson_form import Notifier, log_notice
from .services import ADMIN_ROLE

logger = logging.getLogger("nuredu.directory")


@dataclass(frozen=True)
class LessonEntry:
    """One rendered lesson card."""
    lesson_id: str
    primary_text: str
    secondary_text: str
    category_text: str
    locked: bool


@dataclass(frozen=True)
class GradeCard:
    number: int
    primary_text: str
    secondary_text: str


class LessonDirectory:
    """Selection, filtering and batch deletion over stored lessons."""

    def __init__(self, gateway, tree: CurriculumTree, language: str, role: Optional[str] = None,
                 notifier: Optional[Notifier] = None):
        self.gateway = gateway
        self.tree = tree
        self.language = language
        self.role = role
        self.notify = notifier if notifier is not None else log_notice

        self.records: Optional[List[schemas.LessonRecord]] = None
        self.selected_speciality: Optional[Speciality] = None
        self.selected_grade: Optional[int] = None
        self.selected_lesson: Optional[schemas.LessonRecord] = None

        self.delete_mode = False
        self.marked: Set[str] = set()
        self.loading = False

    @property
    def elevated(self) -> bool:
        return bool(self.role) and self.role.lower() == ADMIN_ROLE

    def refresh(self) -> bool:
        """Reload every lesson through the gateway.

        A malformed stored list field raises `ParseError` to the caller.
        A failed request keeps the previously loaded records and returns
        False.
        """
        try:
            records = self.gateway.list()
        except ParseError:
            logger.exception("stored lesson has a malformed list field")
            raise
        except NetworkError:
            logger.exception("could not load lessons")
            self.notify("error", "Something went wrong, try later!", "")
            return False
        self.records = records
        return True

    def set_language(self, language: str) -> bool:
        """Switch language, drop selections that belonged to the old one and reload."""
        self.language = language
        self.selected_lesson = None
        self.selected_grade = None
        self.selected_speciality = None
        return self.refresh()

    # navigation

    def specialities(self):
        return self.tree.specialities_for(self.language)

    def select_speciality(self, speciality: Speciality) -> None:
        self.selected_lesson = None
        self.selected_grade = None
        self.selected_speciality = speciality

    def select_grade(self, number: int) -> None:
        self.selected_lesson = None
        self.selected_grade = number

    def go_back(self) -> None:
        self.selected_grade = None

    def select_lesson(self, record: schemas.LessonRecord) -> None:
        self.selected_lesson = record

    def close_lesson(self) -> None:
        self.selected_lesson = None

    def grade_cards(self) -> List[GradeCard]:
        if self.selected_speciality is None:
            return []
        return [
            GradeCard(number=g.number, primary_text=g.label(), secondary_text=f"{len(g.lessons)} lessons")
            for g in self.selected_speciality.grades
        ]

    def visible_lessons(self) -> List[schemas.LessonRecord]:
        """Stored lessons of the current language and selected grade."""
        if self.records is None or self.selected_speciality is None or self.selected_grade is None:
            return []
        return [r for r in self.records if r.language == self.language and r.grade == self.selected_grade]

    def entries(self) -> List[LessonEntry]:
        out = []
        for lesson in self.visible_lessons():
            if self.elevated:
                secondary, locked = f"Topic: {lesson.topic_title}", False
            else:
                secondary, locked = "Locked or limited...", True
            out.append(LessonEntry(
                lesson_id=lesson.id,
                primary_text=lesson.chapter,
                secondary_text=secondary,
                category_text=f"Queue {lesson.chapter_queue}",
                locked=locked,
            ))
        return out

    # batch delete

    def toggle_delete_mode(self) -> None:
        self.delete_mode = not self.delete_mode

    def toggle_mark(self, lesson_id: str) -> None:
        if lesson_id in self.marked:
            self.marked.discard(lesson_id)
        else:
            self.marked.add(lesson_id)

    def commit_delete(self) -> bool:
        """Delete every marked lesson, then reload.

        On failure the marked set is kept, an error notice is emitted and
        no reload is issued.
        """
        if not self.marked or self.loading:
            return False
        self.loading = True
        try:
            try:
                self.gateway.delete(set(self.marked))
            except NetworkError:
                logger.exception("batch delete of %d lessons failed", len(self.marked))
                self.notify("error", "Something went wrong, try later!", "")
                return False
            self.marked = set()
            self.refresh()
        finally:
            self.loading = False
        self.notify("success", "Successfully deleted lessons!", "")
        return True
