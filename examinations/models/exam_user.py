from django.conf import settings
from django.db import models
from django.utils import timezone


class ExamUser(models.Model):
    """One user's attempt at one exam."""

    UNGRADED = -1.0

    class State(models.TextChoices):
        CREATED = 'created', 'Not Started'
        STARTED = 'started', 'Started'
        FINISHED = 'finished', 'Finished'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='exam_attempts',
        db_index=True
    )
    exam = models.ForeignKey(
        'Exam',
        on_delete=models.CASCADE,
        related_name='attempts',
        db_index=True
    )
    is_started = models.BooleanField(default=False)
    is_finished = models.BooleanField(default=False, db_index=True)
    # seconds; negative values are stored as given
    remaining_time = models.IntegerField(default=0)
    total_point = models.FloatField(default=UNGRADED)

    time_start = models.DateTimeField(null=True, blank=True)
    time_finish = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['exam', 'user'], name='exam_user_exam_user_idx'),
        ]

    def __str__(self):
        return f"{self.user.username} - {self.exam.title}"

    @property
    def is_graded(self):
        return self.total_point is not None and self.total_point != self.UNGRADED

    @property
    def state(self):
        if self.is_finished:
            return self.State.FINISHED
        if self.is_started:
            return self.State.STARTED
        return self.State.CREATED

    def start(self, now=None, commit=True):
        """Mark the attempt as started. Returns False once it is finished."""
        if self.is_finished:
            return False
        if not self.is_started:
            self.is_started = True
            self.time_start = now or timezone.now()
            if commit:
                self.save(update_fields=['is_started', 'time_start'])
        return True

    def finish(self, total_point=None, now=None, commit=True):
        """Close the attempt, optionally recording the graded total."""
        if self.is_finished:
            return False
        self.is_started = True
        self.is_finished = True
        self.time_finish = now or timezone.now()
        if total_point is not None:
            self.total_point = total_point
        if commit:
            self.save(update_fields=['is_started', 'is_finished', 'time_finish', 'total_point'])
        return True
