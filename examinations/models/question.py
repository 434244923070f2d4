from django.conf import settings
from django.db import models
from django.utils import timezone

from .lifecycle import Lifecycle


class DifficultyLevel(models.TextChoices):
    EASY = 'easy', 'Easy'
    MEDIUM = 'medium', 'Medium'
    HARD = 'hard', 'Hard'


DIFFICULTY_POINTS = {
    DifficultyLevel.EASY: 5,
    DifficultyLevel.MEDIUM: 10,
    DifficultyLevel.HARD: 15,
}


class ActiveQuestionManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(status=Lifecycle.ACTIVE)


class QuestionType(models.Model):
    class TypeCode(models.TextChoices):
        TRUE_FALSE = 'TF', 'True/False'
        MULTIPLE_CHOICE = 'MC', 'Multiple Choice'
        ESSAY = 'ES', 'Essay'

    type_code = models.CharField(max_length=5, choices=TypeCode.choices, unique=True)
    description = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.get_type_code_display()


class Question(models.Model):
    question_text = models.TextField(blank=True)
    difficulty_level = models.CharField(
        max_length=10,
        choices=DifficultyLevel.choices,
        default=DifficultyLevel.EASY
    )
    point = models.PositiveIntegerField(default=0)
    question_type = models.ForeignKey(
        'QuestionType',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='questions'
    )
    part = models.ForeignKey(
        'Part',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='questions',
        db_index=True
    )
    status = models.CharField(
        max_length=10,
        choices=Lifecycle.choices,
        default=Lifecycle.ACTIVE,
        db_index=True
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_questions'
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active = ActiveQuestionManager()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"Q{self.pk}: {self.question_text[:50]}"

    def save(self, *args, **kwargs):
        # point is fixed when the row is first written
        if self._state.adding:
            self.point = DIFFICULTY_POINTS.get(self.difficulty_level, 0)
        super().save(*args, **kwargs)

    def recompute_point(self, commit=True):
        self.point = DIFFICULTY_POINTS.get(self.difficulty_level, 0)
        if commit:
            self.save(update_fields=['point', 'updated_at'])
        return self.point

    def soft_delete(self):
        self.status = Lifecycle.DELETED
        self.save(update_fields=['status', 'updated_at'])

    @property
    def is_deleted(self):
        return self.status == Lifecycle.DELETED

    @property
    def type_code(self):
        return self.question_type.type_code if self.question_type_id else None


class Choice(models.Model):
    class Correctness(models.IntegerChoices):
        INCORRECT = 0, 'Incorrect'
        CORRECT = 1, 'Correct'

    question = models.ForeignKey(
        'Question',
        on_delete=models.CASCADE,
        related_name='choices',
        db_index=True
    )
    choice_text = models.TextField(blank=True)
    is_corrected = models.PositiveSmallIntegerField(
        choices=Correctness.choices,
        default=Correctness.INCORRECT
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.choice_text[:50]
