"""
Question bank operations. Deleting a question only flags it, so exams that
already reference it can still be scored.
"""
import logging

from django.db import transaction

from examinations.models import Question, Choice
from .keys import is_valid_id

logger = logging.getLogger(__name__)


class QuestionService:

    @classmethod
    def get_question_by_id(cls, question_id):
        if not is_valid_id(question_id):
            return None
        return Question.objects.prefetch_related('choices').filter(pk=question_id).first()

    @classmethod
    def get_questions_by_part(cls, part):
        if part is None or part.pk is None:
            return []
        return list(Question.objects.filter(part=part))

    @classmethod
    def get_questions_by_question_type(cls, question_type):
        if question_type is None or question_type.pk is None:
            return []
        return list(Question.objects.filter(question_type=question_type))

    @classmethod
    def find_questions_by_part(cls, part):
        """Active questions of a part."""
        if part is None or part.pk is None:
            return []
        return list(Question.active.filter(part=part))

    @classmethod
    def find_questions_by_part_and_creator(cls, part_id, username):
        if not is_valid_id(part_id) or not username:
            return []
        return list(Question.active.filter(part_id=part_id, created_by__username=username))

    @classmethod
    def find_questions_by_creator(cls, username):
        if not username:
            return []
        return list(Question.active.filter(created_by__username=username))

    @classmethod
    def find_question_text_by_id(cls, question_id):
        if not is_valid_id(question_id):
            return None
        return Question.objects.filter(pk=question_id).values_list('question_text', flat=True).first()

    @classmethod
    def save(cls, question, choices=None):
        """Create a question with its choices. The point follows the difficulty."""
        with transaction.atomic():
            question.save()
            for choice in choices or []:
                choice.question = question
                choice.save()
        logger.info(f"Saved question {question.pk} worth {question.point} points")
        return question

    @classmethod
    def update(cls, question):
        question.save()
        return question

    @classmethod
    def delete(cls, question_id):
        question = Question.objects.filter(pk=question_id).first() if is_valid_id(question_id) else None
        if question is None:
            logger.info(f"Question {question_id} not deleted: does not exist")
            return False
        question.soft_delete()
        return True


class ChoiceService:

    @classmethod
    def find_is_corrected_by_id(cls, choice_id):
        if not is_valid_id(choice_id):
            return None
        return Choice.objects.filter(pk=choice_id).values_list('is_corrected', flat=True).first()

    @classmethod
    def find_choice_text_by_id(cls, choice_id):
        if not is_valid_id(choice_id):
            return None
        return Choice.objects.filter(pk=choice_id).values_list('choice_text', flat=True).first()
