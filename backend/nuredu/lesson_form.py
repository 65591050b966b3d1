"""Draft state and submit logic for creating or editing a curriculum lesson.

The form walks the curriculum tree one level at a time: language, then
speciality, then grade, then lesson slot. Each level's options are
derived from the selections above it. Changing the language clears the
speciality, grade, lesson queue and lesson title because none of them
carry over between languages; changing the speciality keeps the grade
and lesson as they are. Metadata fields (topic,
objectives, equipment, links...) are independent of the selection chain
and are never cleared by it.
"""

import logging
from typing import Callable, List, Optional, Tuple

from . import schemas
from .curriculum import CurriculumTree, Grade, LessonSlot, Speciality
from .errors import NetworkError, ValidationError
from .utils.serialized import dump_list

logger = logging.getLogger("nuredu.form")

Notifier = Callable[[str, str, str], None]


def log_notice(level: str, title: str, message: str = "") -> None:
    """Default notifier: write the notice to the `nuredu.notices` logger."""
    log = logging.getLogger("nuredu.notices")
    log.log(logging.WARNING if level in ("warning", "error") else logging.INFO, "%s: %s %s", level, title, message)


class LessonForm:
    """Editable lesson draft bound to a `CurriculumTree`.

    A form created with a `record_id` edits that stored lesson; otherwise
    `submit` creates a new one.
    """

    def __init__(self, tree: CurriculumTree, language: str = "us",
                 notifier: Optional[Notifier] = None, record_id: Optional[str] = None):
        self.tree = tree
        self.notify = notifier if notifier is not None else log_notice
        self.record_id = record_id
        self.loading = False

        self.language = language
        self.speciality_name = ""
        self.grade_number = 0
        self.lesson_queue = 0
        self.lesson_title = ""

        self.topic_title = ""
        self.topic_queue = 0
        self.lesson_type = ""
        self.lesson_objectives = ""
        self.lesson_equipment: List[str] = []
        self.prior_knowledge = ""
        self.lesson_start = ""
        self.lesson_middle = ""
        self.lesson_end = ""
        self.video_links: List[str] = []
        self.presentation_links: List[str] = []
        self.link_for_doc = ""
        self.additional_resources: List[str] = []

    @classmethod
    def from_record(cls, tree: CurriculumTree, record: schemas.LessonRecord,
                    notifier: Optional[Notifier] = None) -> "LessonForm":
        """Pre-fill a form for editing `record`.

        Stored lessons do not remember their speciality, so it is guessed:
        the first speciality of the record's language whose grade holds a
        slot at the record's queue, preferring one whose title matches.
        """
        form = cls(tree, language=record.language, notifier=notifier, record_id=record.id)
        form.speciality_name = form._guess_speciality(record)
        form.grade_number = record.grade
        form.lesson_queue = record.chapter_queue
        form.lesson_title = record.chapter
        form.topic_title = record.topic_title
        form.topic_queue = record.topic_queue
        form.lesson_type = record.lesson_type
        form.lesson_objectives = record.lesson_objectives
        form.lesson_equipment = list(record.lesson_equipment)
        form.prior_knowledge = record.prior_knowledge
        form.lesson_start = record.lesson_start
        form.lesson_middle = record.lesson_middle
        form.lesson_end = record.lesson_end
        form.video_links = list(record.video_links)
        form.presentation_links = list(record.presentation_links)
        form.link_for_doc = record.link_for_doc
        form.additional_resources = list(record.additional_resources)
        return form

    def _guess_speciality(self, record: schemas.LessonRecord) -> str:
        fallback = ""
        for speciality in self.tree.specialities_for(record.language):
            slot = self.tree.find_slot(self.tree.find_grade(speciality, record.grade), record.chapter_queue)
            if slot is None:
                continue
            if slot.title == record.chapter:
                return speciality.name
            fallback = fallback or speciality.name
        return fallback

    # selection chain

    def select_language(self, language: str) -> None:
        self.language = language
        self.speciality_name = ""
        self.grade_number = 0
        self.lesson_queue = 0
        self.lesson_title = ""

    def select_speciality(self, name: str) -> None:
        self.speciality_name = name

    def select_grade(self, number) -> None:
        self.grade_number = int(number) if number else 0

    def select_lesson_slot(self, queue) -> None:
        """Pick a lesson slot and copy its title.

        When the current grade has no slot at `queue` the queue is still
        recorded but the title keeps its previous value.
        """
        self.lesson_queue = int(queue) if queue else 0
        slot = self.tree.find_slot(self._grade(), self.lesson_queue)
        if slot is not None:
            self.lesson_title = slot.title

    def _speciality(self) -> Optional[Speciality]:
        return self.tree.find_speciality(self.language, self.speciality_name)

    def _grade(self) -> Optional[Grade]:
        return self.tree.find_grade(self._speciality(), self.grade_number)

    def available_specialities(self) -> Tuple[Speciality, ...]:
        return self.tree.specialities_for(self.language)

    def available_grades(self) -> Tuple[Grade, ...]:
        speciality = self._speciality()
        return speciality.grades if speciality else ()

    def available_lesson_slots(self) -> Tuple[LessonSlot, ...]:
        grade = self._grade()
        return grade.lessons if grade else ()

    def available_lesson_types(self) -> Tuple[str, ...]:
        return self.tree.lesson_types_for(self.language)

    def grade_options(self) -> List[Tuple[int, str]]:
        """(value, label) pairs for the grade picker, e.g. (1, "Grade 1")."""
        return [(g.number, g.label()) for g in self.available_grades()]

    def lesson_slot_options(self) -> List[Tuple[int, str]]:
        """(value, label) pairs for the lesson picker, e.g. (1, "[1] - Intro")."""
        return [(s.queue, s.label()) for s in self.available_lesson_slots()]

    # submission

    def validate_required(self) -> None:
        """Raise `ValidationError` unless speciality, grade, lesson queue and title are all set."""
        missing = []
        if not self.speciality_name:
            missing.append("speciality")
        if not self.grade_number:
            missing.append("grade")
        if not self.lesson_queue:
            missing.append("lesson queue")
        if not self.lesson_title:
            missing.append("lesson title")
        if missing:
            raise ValidationError(missing)

    def to_persistence_payload(self) -> schemas.LessonPayload:
        """Map the draft onto stored column names with list fields serialized."""
        return schemas.LessonPayload(
            language=self.language,
            grade=int(self.grade_number or 0),
            chapter_queue=int(self.lesson_queue or 0),
            chapter=self.lesson_title,
            topic_title=self.topic_title,
            topic_queue=int(self.topic_queue or 0),
            lesson_type=self.lesson_type,
            lesson_objectives=self.lesson_objectives,
            lesson_equipment=dump_list(self.lesson_equipment),
            prior_knowledge=self.prior_knowledge,
            lesson_start=self.lesson_start,
            lesson_middle=self.lesson_middle,
            lesson_end=self.lesson_end,
            video_links=dump_list(self.video_links),
            presentation_links=dump_list(self.presentation_links),
            link_for_doc=self.link_for_doc,
            additional_resources=dump_list(self.additional_resources),
        )

    def submit(self, gateway, on_success: Optional[Callable[[], None]] = None) -> bool:
        """Validate and send the draft through `gateway`.

        Returns True when the lesson was stored. A missing required field
        produces a warning notice; a failed request produces an error
        notice. In both cases the draft is left as it was so the user can
        fix it and submit again. `on_success` runs only after the create
        or update call has returned.
        """
        if self.loading:
            logger.debug("submit ignored: a request is already in flight")
            return False
        try:
            self.validate_required()
        except ValidationError as exc:
            logger.info("lesson draft incomplete: %s", exc)
            self.notify("warning", "Enter all required data!", "Must pick Speciality, Grade, and Lesson")
            return False

        payload = self.to_persistence_payload()
        self.loading = True
        try:
            if self.record_id:
                gateway.update(schemas.LessonOut(id=self.record_id, **payload.model_dump()))
            else:
                gateway.create(payload)
        except NetworkError:
            logger.exception("lesson submit failed")
            self.notify("error", "Something went wrong, try later.", "")
            return False
        finally:
            self.loading = False

        self.notify("success", "Lesson updated!" if self.record_id else "Lesson created!", "")
        if on_success is not None:
            on_success()
        return True
