from django.db import models


class Course(models.Model):
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, unique=True, db_index=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['code']

    def __str__(self):
        return f"{self.code} - {self.name}"


class Part(models.Model):
    """A chapter of a course. Questions and exams are filed under parts."""
    name = models.CharField(max_length=200, blank=True)
    course = models.ForeignKey(
        'Course',
        on_delete=models.CASCADE,
        related_name='parts',
        db_index=True
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.course.code} / {self.name}"


class Intake(models.Model):
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, unique=True, db_index=True)

    class Meta:
        ordering = ['code']

    def __str__(self):
        return self.code
