"""
Statistics Aggregator.
Day/week comparison primitives, week-over-week deltas and rolling daily
counts for the admin dashboard.

Weeks follow ISO-8601 (Monday first). Dates are taken in settings.TIME_ZONE.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

import numpy as np
from django.conf import settings
from django.contrib.auth.models import User
from django.utils import timezone

from examinations.models import Exam, ExamUser, Lifecycle, Question

logger = logging.getLogger(__name__)


def to_reference_date(value) -> date:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def _week_start(value) -> date:
    day = to_reference_date(value)
    return day - timedelta(days=day.weekday())


def is_same_day(a, b) -> bool:
    return to_reference_date(a) == to_reference_date(b)


def is_same_week(a, b) -> bool:
    return _week_start(a) == _week_start(b)


def is_last_week(reference, candidate) -> bool:
    """True when candidate falls in the calendar week right before reference's."""
    return _week_start(candidate) == _week_start(reference) - timedelta(weeks=1)


def percentage_change(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def week_over_week_change(timestamps: Iterable, now=None) -> float:
    now = now or timezone.now()
    current = previous = 0
    for stamp in timestamps:
        if stamp is None:
            continue
        if is_same_week(now, stamp):
            current += 1
        elif is_last_week(now, stamp):
            previous += 1
    return percentage_change(current, previous)


def count_last_days(timestamps: Iterable, now=None, days: int = 7) -> List[int]:
    """
    Per-day counts for the trailing window ending today.
    Index 0 is the oldest day, the last index is today.
    """
    today = to_reference_date(now or timezone.now())
    first_day = today - timedelta(days=days - 1)
    counts = [0] * days
    for stamp in timestamps:
        if stamp is None:
            continue
        offset = (to_reference_date(stamp) - first_day).days
        if 0 <= offset < days:
            counts[offset] += 1
    return counts


class StatisticsService:
    """Dashboard figures computed from the stored entities."""

    @staticmethod
    def _rolling_window_days() -> int:
        return settings.EXAMINATIONS.get('ROLLING_WINDOW_DAYS', 7)

    @classmethod
    def count_exam_total(cls) -> int:
        return Exam.objects.count()

    @classmethod
    def count_question_total(cls) -> int:
        return Question.active.count()

    @classmethod
    def count_account_total(cls) -> int:
        return User.objects.filter(profile__status=Lifecycle.ACTIVE).count()

    @classmethod
    def count_exam_user_total(cls) -> int:
        return ExamUser.objects.count()

    @classmethod
    def get_change_exam(cls, now=None) -> float:
        return week_over_week_change(Exam.objects.values_list('created_at', flat=True), now)

    @classmethod
    def get_change_question(cls, now=None) -> float:
        return week_over_week_change(Question.active.values_list('created_at', flat=True), now)

    @classmethod
    def get_change_account(cls, now=None) -> float:
        joined = User.objects.filter(profile__status=Lifecycle.ACTIVE).values_list('date_joined', flat=True)
        return week_over_week_change(joined, now)

    @classmethod
    def get_change_exam_user(cls, now=None) -> float:
        finished = ExamUser.objects.filter(time_finish__isnull=False).values_list('time_finish', flat=True)
        return week_over_week_change(finished, now)

    @classmethod
    def count_exam_user_last_seven_days(cls, now=None) -> List[int]:
        now = now or timezone.now()
        days = cls._rolling_window_days()
        since = now - timedelta(days=days + 1)
        finished = ExamUser.objects.filter(time_finish__gte=since).values_list('time_finish', flat=True)
        return count_last_days(finished, now, days)

    @classmethod
    def get_dashboard(cls, now=None) -> dict:
        now = now or timezone.now()
        return {
            'exam_total': cls.count_exam_total(),
            'question_total': cls.count_question_total(),
            'account_total': cls.count_account_total(),
            'exam_user_total': cls.count_exam_user_total(),
            'change_exam': round(cls.get_change_exam(now), 2),
            'change_question': round(cls.get_change_question(now), 2),
            'change_account': round(cls.get_change_account(now), 2),
            'change_exam_user': round(cls.get_change_exam_user(now), 2),
            'exam_user_last_seven_days': cls.count_exam_user_last_seven_days(now),
        }

    @classmethod
    def get_score_summary(cls, exam) -> Optional[dict]:
        """Spread of graded total points for one exam, None if nothing is graded."""
        points = list(
            ExamUser.objects.filter(exam=exam)
            .exclude(total_point=ExamUser.UNGRADED)
            .values_list('total_point', flat=True)
        )
        if not points:
            logger.info(f"No graded attempts for exam {exam.pk}")
            return None

        scores = np.array(points, dtype=float)
        return {
            'exam_id': exam.pk,
            'graded_count': int(scores.size),
            'average_point': round(float(np.mean(scores)), 2),
            'median_point': round(float(np.median(scores)), 2),
            'std_deviation': round(float(np.std(scores)), 2),
            'highest_point': round(float(np.max(scores)), 2),
            'lowest_point': round(float(np.min(scores)), 2),
        }
