"""
Attempt Tracker.
Creates, updates and looks up ExamUser records. Lookups with unusable keys
return None or an empty list rather than raising.
"""
import logging
from typing import Iterable, List, Optional

from django.db import transaction

from examinations.models import ExamUser
from .keys import is_valid_id, is_valid_username

logger = logging.getLogger(__name__)


class AttemptService:

    @classmethod
    def create(cls, exam, users: Optional[Iterable]) -> List[ExamUser]:
        """Assign an exam to a roster, one fresh attempt per user."""
        if exam is None or not users:
            logger.info("Skipping attempt creation: no exam or empty roster")
            return []

        attempts = [
            ExamUser(
                user=user,
                exam=exam,
                is_started=False,
                is_finished=False,
                remaining_time=exam.duration_seconds,
                total_point=ExamUser.UNGRADED
            )
            for user in users
        ]
        with transaction.atomic():
            created = ExamUser.objects.bulk_create(attempts)
        logger.info(f"Created {len(created)} attempts for exam {exam.pk}")
        return created

    @classmethod
    def update(cls, attempt: ExamUser) -> Optional[ExamUser]:
        """
        Copy the mutable fields of `attempt` onto the stored row.

        Null flags are stored as False. Null remaining_time or total_point
        keep the stored value. Out-of-range numbers are accepted as given.
        Unknown ids are a no-op and return None.
        """
        if attempt is None or not is_valid_id(attempt.pk):
            logger.warning("Attempt update skipped: missing id")
            return None

        with transaction.atomic():
            stored = ExamUser.objects.select_for_update().filter(pk=attempt.pk).first()
            if stored is None:
                logger.warning(f"Attempt update skipped: {attempt.pk} does not exist")
                return None

            stored.is_started = bool(attempt.is_started)
            stored.is_finished = bool(attempt.is_finished)
            if attempt.remaining_time is not None:
                stored.remaining_time = attempt.remaining_time
            if attempt.total_point is not None:
                stored.total_point = attempt.total_point
            if attempt.time_start is not None:
                stored.time_start = attempt.time_start
            if attempt.time_finish is not None:
                stored.time_finish = attempt.time_finish
            stored.save()

        return stored

    @classmethod
    def find_by_exam_and_user(cls, exam_id, username) -> Optional[ExamUser]:
        if not is_valid_id(exam_id) or not is_valid_username(username):
            return None
        return (
            ExamUser.objects.select_related('exam', 'user')
            .filter(exam_id=exam_id, user__username=username)
            .first()
        )

    @classmethod
    def find_by_id(cls, attempt_id) -> Optional[ExamUser]:
        if not is_valid_id(attempt_id):
            return None
        try:
            return ExamUser.objects.select_related('exam', 'user').get(pk=attempt_id)
        except ExamUser.DoesNotExist:
            return None

    @classmethod
    def find_all_by_exam(cls, exam_id) -> List[ExamUser]:
        if not is_valid_id(exam_id):
            return []
        return list(ExamUser.objects.select_related('user').filter(exam_id=exam_id))

    @classmethod
    def list_by_username(cls, username) -> List[ExamUser]:
        if not is_valid_username(username):
            return []
        return list(ExamUser.objects.select_related('exam').filter(user__username=username))

    @classmethod
    def get_complete_exams(cls, course_id, username) -> List[ExamUser]:
        if not is_valid_id(course_id) or not is_valid_username(username):
            return []
        return list(
            ExamUser.objects.select_related('exam')
            .filter(exam__part__course_id=course_id, user__username=username, is_finished=True)
        )

    @classmethod
    def get_graded_exams(cls, course_id, username) -> List[ExamUser]:
        if not is_valid_id(course_id) or not is_valid_username(username):
            return []
        return list(
            ExamUser.objects.select_related('exam')
            .filter(exam__part__course_id=course_id, user__username=username)
            .exclude(total_point=ExamUser.UNGRADED)
        )
