import logging

from examinations.models import Exam
from .attempts import AttemptService
from .keys import is_valid_id

logger = logging.getLogger(__name__)


class ExamService:

    @classmethod
    def save_exam(cls, exam):
        # non-positive ids are never stored
        if exam.pk is not None and not is_valid_id(exam.pk):
            exam.pk = None
            exam._state.adding = True
        exam.save()
        return exam

    @classmethod
    def cancel_exam(cls, exam_id):
        if not is_valid_id(exam_id):
            return False
        updated = Exam.objects.filter(pk=exam_id).update(canceled=True)
        if not updated:
            logger.info(f"Exam {exam_id} not canceled: does not exist")
        return bool(updated)

    @classmethod
    def get_exam_by_id(cls, exam_id):
        if not is_valid_id(exam_id):
            return None
        return Exam.objects.filter(pk=exam_id).first()

    @classmethod
    def get_all(cls):
        return list(Exam.objects.all())

    @classmethod
    def find_all_by_created_by_username(cls, username):
        if not username:
            return []
        return list(Exam.objects.filter(created_by__username=username))

    @classmethod
    def assign(cls, exam, users):
        return AttemptService.create(exam, users)
