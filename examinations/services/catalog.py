"""
Lookups and saves for courses, parts, question types and intakes.
"""
import logging

from examinations.models import Course, Part, QuestionType, Intake
from .keys import is_valid_id

logger = logging.getLogger(__name__)


class CourseService:

    @classmethod
    def get_course_by_id(cls, course_id):
        if not is_valid_id(course_id):
            return None
        return Course.objects.filter(pk=course_id).first()

    @classmethod
    def get_course_list(cls):
        return list(Course.objects.all())

    @classmethod
    def save_course(cls, course):
        course.save()
        return course

    @classmethod
    def delete(cls, course_id):
        deleted, _ = Course.objects.filter(pk=course_id).delete()
        if not deleted:
            logger.info(f"Course {course_id} not deleted: does not exist")

    @classmethod
    def exists_by_code(cls, code) -> bool:
        return bool(code) and Course.objects.filter(code=code).exists()

    @classmethod
    def exists_by_id(cls, course_id) -> bool:
        return is_valid_id(course_id) and Course.objects.filter(pk=course_id).exists()


class PartService:

    @classmethod
    def save_part(cls, part):
        part.save()
        return part

    @classmethod
    def get_part_list_by_course(cls, course):
        if course is None or course.pk is None:
            return []
        return list(Part.objects.filter(course=course))

    @classmethod
    def find_part_by_id(cls, part_id):
        if not is_valid_id(part_id):
            return None
        return Part.objects.select_related('course').filter(pk=part_id).first()

    @classmethod
    def exists_by_id(cls, part_id) -> bool:
        return is_valid_id(part_id) and Part.objects.filter(pk=part_id).exists()


class QuestionTypeService:

    @classmethod
    def get_question_type_by_id(cls, type_id):
        if not is_valid_id(type_id):
            return None
        return QuestionType.objects.filter(pk=type_id).first()

    @classmethod
    def get_question_type_by_code(cls, type_code):
        if not type_code:
            return None
        return QuestionType.objects.filter(type_code=type_code).first()

    @classmethod
    def get_question_type_list(cls):
        return list(QuestionType.objects.all())

    @classmethod
    def save_question_type(cls, question_type):
        """Save a new type. A code that is already taken is refused."""
        clash = QuestionType.objects.filter(type_code=question_type.type_code)
        if question_type.pk:
            clash = clash.exclude(pk=question_type.pk)
        if clash.exists():
            logger.warning(f"Question type {question_type.type_code} already exists")
            return None
        question_type.save()
        return question_type

    @classmethod
    def delete(cls, type_id):
        QuestionType.objects.filter(pk=type_id).delete()

    @classmethod
    def exists_by_id(cls, type_id) -> bool:
        return is_valid_id(type_id) and QuestionType.objects.filter(pk=type_id).exists()


class IntakeService:

    @classmethod
    def find_by_code(cls, code):
        if not code:
            return None
        return Intake.objects.filter(code=code).first()

    @classmethod
    def find_by_id(cls, intake_id):
        if not is_valid_id(intake_id):
            return None
        return Intake.objects.filter(pk=intake_id).first()

    @classmethod
    def find_all(cls):
        return list(Intake.objects.all())
