from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone


class Exam(models.Model):
    title = models.CharField(max_length=300)
    part = models.ForeignKey(
        'Part',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='exams',
        db_index=True
    )
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    shuffle = models.BooleanField(default=False)
    canceled = models.BooleanField(default=False, db_index=True)

    begin_exam = models.DateTimeField(null=True, blank=True)
    finish_exam = models.DateTimeField(null=True, blank=True)

    # [{"questionId": 1, "point": 5}, ...]
    question_data = models.JSONField(default=list, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_exams'
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def duration_seconds(self):
        return (self.duration_minutes or 0) * 60

    @property
    def is_available(self):
        """Open for taking: not canceled and inside the begin/finish window."""
        now = timezone.now()
        if self.canceled:
            return False
        if self.begin_exam and now < self.begin_exam:
            return False
        if self.finish_exam and now > self.finish_exam:
            return False
        return True

    def get_question_points(self):
        from examinations.services.scoring import ExamQuestionPoint

        return [ExamQuestionPoint.from_dict(item) for item in (self.question_data or [])]

    def set_question_points(self, points):
        self.question_data = [point.to_dict() for point in points]
