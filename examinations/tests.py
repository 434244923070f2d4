"""
Test cases for the Online Examination backend.
Covers answer reconciliation, attempt tracking and dashboard statistics.
"""
import math
from datetime import date, datetime, timedelta, timezone as dt_timezone
from io import StringIO

from django.test import TestCase, SimpleTestCase, override_settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.management import call_command

from .models import (
    Course, Part, Intake, QuestionType, Question, Choice, Exam, ExamUser,
    DifficultyLevel, Lifecycle, Role, UserProfile,
)
from .services import (
    AnswerSheet, SubmittedChoice, ExamQuestionPoint, QuestionNotFound,
    find_question, get_choice_list, grade_choice_lists,
    convert_from_question_list, get_question_point_list, question_point_for,
    AttemptService, StatisticsService, CourseService, PartService,
    QuestionTypeService, IntakeService, QuestionService, ChoiceService, ExamService,
    RoleService, ProfileService, UserService, expand_roles,
)
from .services.statistics import (
    to_reference_date, is_same_day, is_same_week, is_last_week,
    percentage_change, week_over_week_change, count_last_days,
)


# Wednesday
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=dt_timezone.utc)


class QuestionBankMixin:
    """Course, part and question types shared by the ORM-backed suites."""

    def make_bank(self):
        self.lecturer = User.objects.create_user('lecturer', 'lecturer@test.com')
        self.course = Course.objects.create(name='Python', code='CS101')
        self.part = Part.objects.create(name='Chapter 1', course=self.course)
        self.mc = QuestionType.objects.create(type_code=QuestionType.TypeCode.MULTIPLE_CHOICE)
        self.tf = QuestionType.objects.create(type_code=QuestionType.TypeCode.TRUE_FALSE)
        self.essay = QuestionType.objects.create(type_code=QuestionType.TypeCode.ESSAY)

    def make_question(self, text='Question', difficulty=DifficultyLevel.EASY, question_type=None, flags=(1, 0)):
        question = QuestionService.save(
            Question(
                question_text=text,
                difficulty_level=difficulty,
                question_type=question_type or self.mc,
                part=self.part,
                created_by=self.lecturer
            ),
            [Choice(choice_text=f'Option {i}', is_corrected=flag) for i, flag in enumerate(flags)]
        )
        return question

    def sheet_for(self, question, marks):
        choices = [
            SubmittedChoice(id=c.id, choice_text=c.choice_text, is_corrected=mark)
            for c, mark in zip(question.choices.all(), marks)
        ]
        return AnswerSheet(question_id=question.pk, choices=choices, point=question.point)


class ChoiceReconciliationTests(QuestionBankMixin, TestCase):
    """Tests for pairing submitted choices with stored correctness."""

    def setUp(self):
        self.make_bank()
        self.q1 = self.make_question('First', flags=(1, 0, 0))
        self.q2 = self.make_question('Second', DifficultyLevel.MEDIUM, self.tf, flags=(0, 1))
        self.q3 = self.make_question('Third', DifficultyLevel.HARD, flags=(0, 1))

    def test_preserves_input_order(self):
        """Test one entry per sheet, in submission order."""
        sheets = [self.sheet_for(q, (0, 0)) for q in (self.q3, self.q1, self.q2)]
        result = get_choice_list(sheets, [])
        self.assertEqual(len(result), 3)
        self.assertEqual([entry.question.pk for entry in result], [self.q3.pk, self.q1.pk, self.q2.pk])

    def test_real_flags_are_attached(self):
        """Test each submitted choice carries the stored flag."""
        result = get_choice_list([self.sheet_for(self.q1, (0, 1, 0))], [])
        self.assertEqual([c.is_real_correct for c in result[0].choices], [1, 0, 0])
        self.assertEqual([c.choice.is_corrected for c in result[0].choices], [0, 1, 0])

    def test_missing_question_aborts(self):
        """Test an unknown id aborts the whole call."""
        sheets = [self.sheet_for(self.q1, (1, 0, 0)), AnswerSheet(question_id=99999)]
        with self.assertRaises(QuestionNotFound):
            get_choice_list(sheets, [])

    def test_null_and_negative_ids_abort(self):
        """Test null, zero and negative ids are rejected."""
        for bad_id in (None, 0, -3):
            with self.assertRaises(QuestionNotFound):
                get_choice_list([self.sheet_for(self.q1, (1,)), AnswerSheet(question_id=bad_id)], [])

    def test_question_without_choices(self):
        """Test a question with no stored choices yields an empty choice list."""
        bare = self.make_question('Essay', question_type=self.essay, flags=())
        sheet = AnswerSheet(question_id=bare.pk, choices=[SubmittedChoice(id=12345, is_corrected=1)])
        result = get_choice_list([sheet], [])
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].question.pk, bare.pk)
        self.assertEqual(result[0].choices, [])

    def test_empty_input(self):
        """Test empty and None input give an empty list."""
        self.assertEqual(get_choice_list([], []), [])
        self.assertEqual(get_choice_list(None, None), [])

    def test_unmatched_choice_id_is_incorrect(self):
        """Test a choice id from another question reconciles as 0."""
        foreign = self.q2.choices.last()
        sheet = AnswerSheet(question_id=self.q1.pk, choices=[SubmittedChoice(id=foreign.id, is_corrected=1)])
        result = get_choice_list([sheet], [])
        self.assertEqual(result[0].choices[0].is_real_correct, 0)

    def test_point_comes_from_exam(self):
        """Test the exam's point wins over the sheet's own point."""
        sheets = [self.sheet_for(self.q1, (1, 0, 0)), self.sheet_for(self.q2, (0, 1))]
        result = get_choice_list(sheets, [ExamQuestionPoint(question_id=self.q1.pk, point=7)])
        self.assertEqual(result[0].point, 7)
        self.assertEqual(result[1].point, self.q2.point)

    def test_injected_lookup(self):
        """Test a custom question lookup replaces the ORM."""
        calls = []

        def lookup(question_id):
            calls.append(question_id)
            return self.q1

        get_choice_list([AnswerSheet(question_id=42)], [], question_lookup=lookup)
        self.assertEqual(calls, [42])

    def test_soft_deleted_question_still_scored(self):
        """Test exams keep scoring questions removed from the bank."""
        QuestionService.delete(self.q1.pk)
        self.assertEqual(find_question(self.q1.pk).pk, self.q1.pk)

    def test_string_ids_in_payload(self):
        """Test ids sent as strings still match the stored choices and exam points."""
        correct = self.q1.choices.get(is_corrected=Choice.Correctness.CORRECT)
        sheet = AnswerSheet.from_dict({
            'questionId': str(self.q1.pk),
            'choices': [{'id': str(correct.pk), 'isCorrected': '1'}],
        })
        points = [ExamQuestionPoint.from_dict({'questionId': str(self.q1.pk), 'point': 9})]
        self.assertEqual(sheet.question_id, self.q1.pk)
        self.assertEqual(sheet.choices[0].id, correct.pk)

        result = get_choice_list([sheet], points)
        self.assertEqual(result[0].choices[0].is_real_correct, 1)
        self.assertEqual(result[0].point, 9)

    def test_missing_ids_in_payload_stay_none(self):
        """Test absent ids are not coerced."""
        sheet = AnswerSheet.from_dict({'choices': [{'isCorrected': 1}]})
        self.assertIsNone(sheet.question_id)
        self.assertIsNone(sheet.choices[0].id)
        self.assertIsNone(ExamQuestionPoint.from_dict({'point': 3}).question_id)


class GradingTests(QuestionBankMixin, TestCase):
    """Tests for point tallies over reconciled choices."""

    def setUp(self):
        self.make_bank()
        self.q1 = self.make_question('Easy one', flags=(1, 0))
        self.q2 = self.make_question('Medium one', DifficultyLevel.MEDIUM, self.tf, flags=(0, 1))

    def test_all_correct(self):
        """Test every matching answer earns the full point."""
        sheets = [self.sheet_for(self.q1, (1, 0)), self.sheet_for(self.q2, (0, 1))]
        result = grade_choice_lists(get_choice_list(sheets, []))
        self.assertEqual(result.total_point, 15.0)
        self.assertEqual(result.correct_count, 2)
        self.assertEqual(result.percentage, 100.0)

    def test_partial_answer(self):
        """Test one wrong flag loses the question."""
        sheets = [self.sheet_for(self.q1, (1, 1)), self.sheet_for(self.q2, (0, 1))]
        result = grade_choice_lists(get_choice_list(sheets, []))
        self.assertEqual(result.total_point, 10.0)
        self.assertEqual(result.max_points, 15.0)

    def test_essay_never_auto_correct(self):
        """Test essay questions earn nothing automatically."""
        essay = self.make_question('Essay', question_type=self.essay, flags=(1,))
        result = grade_choice_lists(get_choice_list([self.sheet_for(essay, (1,))], []))
        self.assertEqual(result.total_point, 0)

    def test_empty_sheet_percentage(self):
        """Test an empty score sheet reports 0 percent."""
        result = grade_choice_lists([])
        self.assertEqual(result.percentage, 0.0)

    def test_blank_sheets(self):
        """Test blank sheets carry every choice unmarked."""
        sheets = convert_from_question_list([self.q1, self.q2])
        self.assertEqual([s.question_id for s in sheets], [self.q1.pk, self.q2.pk])
        self.assertTrue(all(c.is_corrected == 0 for s in sheets for c in s.choices))
        self.assertEqual(sheets[1].point, 10)

    def test_question_point_list_skips_unknown(self):
        """Test unknown ids are skipped and order is kept."""
        points = [
            ExamQuestionPoint(question_id=self.q2.pk, point=10),
            ExamQuestionPoint(question_id=99999, point=5),
            ExamQuestionPoint(question_id=self.q1.pk, point=5),
        ]
        self.assertEqual([q.pk for q in get_question_point_list(points)], [self.q2.pk, self.q1.pk])

    def test_answer_sheet_from_payload(self):
        """Test answer sheets parse the camelCase payload."""
        sheet = AnswerSheet.from_dict({
            'questionId': self.q1.pk,
            'point': 5,
            'choices': [{'id': 1, 'choiceText': 'A', 'isCorrected': 1}],
        })
        self.assertEqual(sheet.question_id, self.q1.pk)
        self.assertEqual(sheet.choices[0].is_corrected, 1)


class QuestionPointTests(QuestionBankMixin, TestCase):
    """Tests for difficulty-derived question points."""

    def setUp(self):
        self.make_bank()

    def test_difficulty_points(self):
        """Test EASY, MEDIUM and HARD map to 5, 10 and 15."""
        for difficulty, expected in [
            (DifficultyLevel.EASY, 5),
            (DifficultyLevel.MEDIUM, 10),
            (DifficultyLevel.HARD, 15),
        ]:
            question = self.make_question(difficulty=difficulty)
            question.refresh_from_db()
            self.assertEqual(question.point, expected)
            self.assertEqual(question_point_for(difficulty), expected)

    def test_update_keeps_point(self):
        """Test changing difficulty does not recompute the point on update."""
        question = self.make_question(difficulty=DifficultyLevel.EASY)
        question.difficulty_level = DifficultyLevel.HARD
        QuestionService.update(question)
        question.refresh_from_db()
        self.assertEqual(question.point, 5)

        question.recompute_point()
        question.refresh_from_db()
        self.assertEqual(question.point, 15)


class AttemptTrackerTests(QuestionBankMixin, TestCase):
    """Tests for exam attempt creation, update and lookup."""

    def setUp(self):
        self.make_bank()
        self.alice = User.objects.create_user('alice', 'alice@test.com')
        self.bob = User.objects.create_user('bob', 'bob@test.com')
        self.exam = Exam.objects.create(title='Midterm', part=self.part, duration_minutes=60)

    def stored(self, user):
        return ExamUser.objects.get(exam=self.exam, user=user)

    def test_create_attempts(self):
        """Test each user gets a fresh, ungraded attempt."""
        created = AttemptService.create(self.exam, [self.alice, self.bob])
        self.assertEqual(len(created), 2)
        self.assertEqual(ExamUser.objects.filter(exam=self.exam).count(), 2)
        for attempt in ExamUser.objects.filter(exam=self.exam):
            self.assertEqual(attempt.remaining_time, 3600)
            self.assertEqual(attempt.total_point, -1.0)
            self.assertFalse(attempt.is_started)
            self.assertFalse(attempt.is_finished)
            self.assertFalse(attempt.is_graded)

    def test_create_without_exam_or_roster(self):
        """Test a missing exam or roster creates nothing."""
        self.assertEqual(AttemptService.create(None, [self.alice]), [])
        self.assertEqual(AttemptService.create(self.exam, None), [])
        self.assertEqual(AttemptService.create(self.exam, []), [])
        self.assertEqual(ExamUser.objects.count(), 0)

    def test_update_null_flags(self):
        """Test null flags are stored as false."""
        AttemptService.create(self.exam, [self.alice])
        stored = self.stored(self.alice)
        stored.is_started = True
        stored.save()

        AttemptService.update(ExamUser(
            pk=stored.pk, is_started=None, is_finished=None, remaining_time=None, total_point=None
        ))
        stored.refresh_from_db()
        self.assertIs(stored.is_started, False)
        self.assertIs(stored.is_finished, False)
        self.assertEqual(stored.remaining_time, 3600)
        self.assertEqual(stored.total_point, -1.0)

    def test_update_accepts_out_of_range_values(self):
        """Test negative remaining time and points are stored as given."""
        AttemptService.create(self.exam, [self.alice])
        stored = self.stored(self.alice)
        stored.remaining_time = -50
        stored.total_point = -20.5
        stored.is_started = True
        AttemptService.update(stored)

        stored.refresh_from_db()
        self.assertEqual(stored.remaining_time, -50)
        self.assertEqual(stored.total_point, -20.5)
        self.assertTrue(stored.is_started)

    def test_update_unknown_attempt(self):
        """Test updating a missing attempt is a no-op."""
        self.assertIsNone(AttemptService.update(ExamUser(pk=99999, is_started=True)))
        self.assertIsNone(AttemptService.update(ExamUser(is_started=True)))
        self.assertIsNone(AttemptService.update(None))
        self.assertEqual(ExamUser.objects.count(), 0)

    def test_lookups_with_invalid_keys(self):
        """Test invalid keys return empty results instead of raising."""
        self.assertIsNone(AttemptService.find_by_exam_and_user(None, 'alice'))
        self.assertIsNone(AttemptService.find_by_exam_and_user(self.exam.pk, ''))
        self.assertIsNone(AttemptService.find_by_id(-1))
        self.assertIsNone(AttemptService.find_by_id(99999))
        self.assertEqual(AttemptService.find_all_by_exam(0), [])
        self.assertEqual(AttemptService.list_by_username(None), [])
        self.assertEqual(AttemptService.get_complete_exams(None, 'alice'), [])
        self.assertEqual(AttemptService.get_graded_exams(self.course.pk, '   '), [])

    def test_lookups(self):
        """Test lookups by exam, user and id."""
        AttemptService.create(self.exam, [self.alice, self.bob])
        attempt = AttemptService.find_by_exam_and_user(self.exam.pk, 'alice')
        self.assertEqual(attempt.user, self.alice)
        self.assertEqual(AttemptService.find_by_id(attempt.pk), attempt)
        self.assertEqual(len(AttemptService.find_all_by_exam(self.exam.pk)), 2)
        self.assertEqual(len(AttemptService.list_by_username('bob')), 1)

    def test_complete_and_graded_exams(self):
        """Test course filters for finished and graded attempts."""
        other_course = Course.objects.create(name='Java', code='CS102')
        other_exam = Exam.objects.create(
            title='Java quiz', part=Part.objects.create(course=other_course), duration_minutes=10
        )
        second_exam = Exam.objects.create(title='Final', part=self.part, duration_minutes=90)
        AttemptService.create(self.exam, [self.alice])
        AttemptService.create(second_exam, [self.alice])
        AttemptService.create(other_exam, [self.alice])

        finished = self.stored(self.alice)
        finished.finish(total_point=12.0)
        ExamUser.objects.get(exam=other_exam).finish(total_point=3.0)
        graded_only = ExamUser.objects.get(exam=second_exam)
        graded_only.total_point = 4.0
        graded_only.save()

        complete = AttemptService.get_complete_exams(self.course.pk, 'alice')
        self.assertEqual([a.pk for a in complete], [finished.pk])
        graded = AttemptService.get_graded_exams(self.course.pk, 'alice')
        self.assertEqual({a.pk for a in graded}, {finished.pk, graded_only.pk})

    def test_start_and_finish(self):
        """Test the attempt state moves forward only."""
        AttemptService.create(self.exam, [self.alice])
        attempt = self.stored(self.alice)
        self.assertEqual(attempt.state, ExamUser.State.CREATED)

        self.assertTrue(attempt.start(now=NOW))
        self.assertEqual(attempt.state, ExamUser.State.STARTED)
        self.assertTrue(attempt.finish(total_point=8.0, now=NOW + timedelta(minutes=30)))

        attempt.refresh_from_db()
        self.assertEqual(attempt.state, ExamUser.State.FINISHED)
        self.assertTrue(attempt.is_graded)
        self.assertEqual(attempt.time_finish, NOW + timedelta(minutes=30))
        self.assertFalse(attempt.start())
        self.assertFalse(attempt.finish())


@override_settings(TIME_ZONE='UTC')
class DatePrimitiveTests(SimpleTestCase):
    """Tests for the day and week comparison helpers."""

    def test_same_day(self):
        """Test a timestamp is on its own day but not the next."""
        self.assertTrue(is_same_day(NOW, NOW))
        self.assertFalse(is_same_day(NOW, NOW + timedelta(days=1)))

    def test_same_week(self):
        """Test Monday-first weeks."""
        monday = datetime(2024, 5, 13, 9, 0, tzinfo=dt_timezone.utc)
        self.assertTrue(is_same_week(monday, monday + timedelta(days=2)))
        self.assertTrue(is_same_week(monday, monday + timedelta(days=6)))
        self.assertFalse(is_same_week(monday, monday + timedelta(days=7)))
        self.assertFalse(is_same_week(monday, monday - timedelta(hours=10)))

    def test_last_week(self):
        """Test the previous calendar week only."""
        self.assertTrue(is_last_week(NOW, NOW - timedelta(days=7)))
        self.assertFalse(is_last_week(NOW, NOW - timedelta(days=14)))
        self.assertFalse(is_last_week(NOW, NOW))

    def test_last_week_across_year_boundary(self):
        """Test week arithmetic across new year."""
        self.assertTrue(is_last_week(date(2021, 1, 4), date(2020, 12, 28)))
        self.assertTrue(is_last_week(date(2021, 1, 1), date(2020, 12, 21)))
        self.assertFalse(is_last_week(date(2021, 1, 4), date(2021, 1, 5)))

    @override_settings(TIME_ZONE='Asia/Ho_Chi_Minh')
    def test_reference_time_zone(self):
        """Test aware timestamps are bucketed in the configured zone."""
        late = datetime(2024, 5, 13, 23, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(to_reference_date(late), date(2024, 5, 14))

    def test_percentage_change(self):
        """Test the zero-baseline sentinels never produce NaN."""
        self.assertEqual(percentage_change(3, 0), 100.0)
        self.assertEqual(percentage_change(0, 0), 0.0)
        self.assertEqual(percentage_change(3, 2), 50.0)
        self.assertEqual(percentage_change(1, 4), -75.0)
        self.assertFalse(math.isnan(percentage_change(0, 0)))

    def test_week_over_week(self):
        """Test counts outside this and last week are ignored."""
        stamps = [NOW, NOW - timedelta(days=1), NOW - timedelta(days=7), NOW - timedelta(days=30), None]
        self.assertEqual(week_over_week_change(stamps, NOW), 100.0)

    def test_rolling_histogram(self):
        """Test one count per day over the trailing seven days."""
        stamps = [NOW - timedelta(days=offset) for offset in range(7)]
        counts = count_last_days(stamps, NOW)
        self.assertEqual(counts, [1] * 7)
        self.assertEqual(sum(counts), len(stamps))

    def test_rolling_histogram_order(self):
        """Test the oldest day comes first."""
        stamps = [NOW - timedelta(days=6), NOW, NOW, NOW - timedelta(days=8), None]
        self.assertEqual(count_last_days(stamps, NOW), [1, 0, 0, 0, 0, 0, 2])


@override_settings(TIME_ZONE='UTC')
class StatisticsServiceTests(QuestionBankMixin, TestCase):
    """Tests for the dashboard figures."""

    def setUp(self):
        self.make_bank()
        self.student = User.objects.create_user('student', 'student@test.com')

    def test_totals_exclude_deleted(self):
        """Test deleted questions and accounts are not counted."""
        kept = self.make_question('Kept')
        gone = self.make_question('Gone')
        QuestionService.delete(gone.pk)
        self.student.profile.status = Lifecycle.DELETED
        self.student.profile.save()

        self.assertEqual(StatisticsService.count_question_total(), 1)
        self.assertEqual(StatisticsService.count_account_total(), 1)
        self.assertEqual(list(QuestionService.find_questions_by_part(self.part)), [kept])

    def test_change_exam(self):
        """Test week-over-week change in created exams."""
        for created_at in [NOW, NOW - timedelta(days=1), NOW - timedelta(days=7)]:
            Exam.objects.create(title='Quiz', duration_minutes=10, created_at=created_at)
        self.assertEqual(StatisticsService.get_change_exam(NOW), 100.0)

    def test_change_account(self):
        """Test week-over-week change in new accounts."""
        User.objects.filter(pk__in=[self.lecturer.pk, self.student.pk]).update(date_joined=NOW - timedelta(days=8))
        User.objects.create_user('newcomer', date_joined=NOW)
        self.assertEqual(StatisticsService.get_change_account(NOW), -50.0)

    def test_exam_user_histogram(self):
        """Test finished attempts are counted per day, oldest first."""
        exam = Exam.objects.create(title='Quiz', duration_minutes=10)
        users = [User.objects.create_user(f'user{i}') for i in range(7)]
        AttemptService.create(exam, users)
        for offset, user in enumerate(users):
            ExamUser.objects.get(exam=exam, user=user).finish(now=NOW - timedelta(days=offset))
        AttemptService.create(exam, [self.student])

        counts = StatisticsService.count_exam_user_last_seven_days(NOW)
        self.assertEqual(counts, [1] * 7)
        self.assertEqual(StatisticsService.get_change_exam_user(NOW), percentage_change(3, 4))

    def test_dashboard(self):
        """Test the dashboard bundles every figure."""
        dashboard = StatisticsService.get_dashboard(NOW)
        self.assertEqual(dashboard['account_total'], 2)
        self.assertEqual(dashboard['exam_total'], 0)
        self.assertEqual(len(dashboard['exam_user_last_seven_days']), 7)
        self.assertEqual(dashboard['change_exam'], 0.0)

    def test_score_summary(self):
        """Test the spread of graded points for one exam."""
        exam = Exam.objects.create(title='Quiz', duration_minutes=10)
        self.assertIsNone(StatisticsService.get_score_summary(exam))

        users = [User.objects.create_user(f'taker{i}') for i in range(4)]
        AttemptService.create(exam, users)
        for user, point in zip(users, [4.0, 8.0, 6.0]):
            ExamUser.objects.get(exam=exam, user=user).finish(total_point=point)

        summary = StatisticsService.get_score_summary(exam)
        self.assertEqual(summary['graded_count'], 3)
        self.assertEqual(summary['average_point'], 6.0)
        self.assertEqual(summary['median_point'], 6.0)
        self.assertEqual(summary['highest_point'], 8.0)
        self.assertEqual(summary['lowest_point'], 4.0)
        self.assertEqual(summary['std_deviation'], 1.63)


class CatalogServiceTests(TestCase):
    """Tests for course, part, question type and intake lookups."""

    def setUp(self):
        self.course = CourseService.save_course(Course(name='Python', code='CS101'))

    def test_course_lookups(self):
        """Test invalid course ids return None."""
        self.assertEqual(CourseService.get_course_by_id(self.course.pk), self.course)
        for bad_id in (None, 0, -1, 99999):
            self.assertIsNone(CourseService.get_course_by_id(bad_id))
        self.assertTrue(CourseService.exists_by_code('CS101'))
        self.assertFalse(CourseService.exists_by_id(-1))

    def test_course_delete(self):
        """Test deleting unknown courses is a no-op."""
        CourseService.delete(99999)
        CourseService.delete(self.course.pk)
        self.assertEqual(CourseService.get_course_list(), [])

    def test_parts(self):
        """Test part listing by course."""
        part = PartService.save_part(Part(name='', course=self.course))
        PartService.save_part(Part(name='', course=self.course))
        self.assertEqual(len(PartService.get_part_list_by_course(self.course)), 2)
        self.assertEqual(PartService.get_part_list_by_course(Course(name='Unsaved', code='X')), [])
        self.assertEqual(PartService.find_part_by_id(part.pk), part)
        self.assertIsNone(PartService.find_part_by_id(None))

    def test_duplicate_question_type(self):
        """Test a taken type code is refused."""
        first = QuestionTypeService.save_question_type(QuestionType(type_code='MC'))
        self.assertIsNotNone(first)
        self.assertIsNone(QuestionTypeService.save_question_type(QuestionType(type_code='MC')))
        self.assertEqual(QuestionType.objects.filter(type_code='MC').count(), 1)
        self.assertEqual(QuestionTypeService.get_question_type_by_code('MC'), first)
        self.assertTrue(QuestionTypeService.exists_by_id(first.pk))

    def test_intakes(self):
        """Test intake lookups."""
        intake = Intake.objects.create(code='K2024', name='Intake 2024')
        self.assertEqual(IntakeService.find_by_code('K2024'), intake)
        self.assertIsNone(IntakeService.find_by_code(''))
        self.assertIsNone(IntakeService.find_by_code(None))
        self.assertIsNone(IntakeService.find_by_id(-5))
        self.assertEqual(IntakeService.find_all(), [intake])


class QuestionServiceTests(QuestionBankMixin, TestCase):
    """Tests for the question bank and choice lookups."""

    def setUp(self):
        self.make_bank()
        self.question = self.make_question('What is 2 + 2?', flags=(0, 1))

    def test_save_attaches_choices(self):
        """Test choices are stored with the question."""
        self.assertEqual(self.question.choices.count(), 2)
        self.assertEqual(QuestionService.find_question_text_by_id(self.question.pk), 'What is 2 + 2?')

    def test_soft_delete(self):
        """Test deleted questions drop out of listings but stay stored."""
        self.assertTrue(QuestionService.delete(self.question.pk))
        self.assertFalse(QuestionService.delete(99999))
        self.question.refresh_from_db()
        self.assertTrue(self.question.is_deleted)
        self.assertEqual(QuestionService.find_questions_by_creator('lecturer'), [])
        self.assertEqual(QuestionService.find_questions_by_part_and_creator(self.part.pk, 'lecturer'), [])
        self.assertEqual(QuestionService.get_questions_by_part(self.part), [self.question])

    def test_find_lookups_return_lists(self):
        """Test the find lookups return lists like the get lookups."""
        self.assertEqual(QuestionService.find_questions_by_part(self.part), [self.question])
        self.assertEqual(QuestionService.find_questions_by_creator('lecturer'), [self.question])
        self.assertEqual(
            QuestionService.find_questions_by_part_and_creator(self.part.pk, 'lecturer'), [self.question]
        )
        self.assertIsInstance(QuestionService.find_questions_by_part(self.part), list)
        self.assertIsInstance(QuestionService.find_questions_by_creator(None), list)

    def test_lookups_by_type(self):
        """Test listing by question type."""
        self.assertEqual(QuestionService.get_questions_by_question_type(self.mc), [self.question])
        self.assertEqual(QuestionService.get_questions_by_question_type(self.essay), [])
        self.assertIsNone(QuestionService.get_question_by_id(0))

    def test_choice_lookups(self):
        """Test choice flags and text by id."""
        correct = self.question.choices.get(is_corrected=Choice.Correctness.CORRECT)
        self.assertEqual(ChoiceService.find_is_corrected_by_id(correct.pk), 1)
        self.assertEqual(ChoiceService.find_choice_text_by_id(correct.pk), correct.choice_text)
        self.assertIsNone(ChoiceService.find_is_corrected_by_id(None))
        self.assertIsNone(ChoiceService.find_choice_text_by_id(-1))


class ExamServiceTests(QuestionBankMixin, TestCase):
    """Tests for exam persistence and assignment."""

    def setUp(self):
        self.make_bank()

    def test_save_discards_negative_id(self):
        """Test a non-positive id creates a new exam."""
        exam = ExamService.save_exam(Exam(pk=-5, title='Quiz', duration_minutes=15, created_by=self.lecturer))
        self.assertGreater(exam.pk, 0)
        self.assertEqual(ExamService.get_exam_by_id(exam.pk), exam)
        self.assertEqual(ExamService.find_all_by_created_by_username('lecturer'), [exam])
        self.assertEqual(ExamService.find_all_by_created_by_username(''), [])

    def test_duration_is_required(self):
        """Test an exam needs a positive duration."""
        self.assertFalse(Exam._meta.get_field('duration_minutes').has_default())
        with self.assertRaises(ValidationError):
            Exam(title='Quiz', duration_minutes=0).full_clean()
        with self.assertRaises(ValidationError):
            Exam(title='Quiz').full_clean()

    def test_cancel(self):
        """Test cancel flags the exam and ignores unknown ids."""
        exam = Exam.objects.create(title='Quiz', duration_minutes=15)
        self.assertTrue(ExamService.cancel_exam(exam.pk))
        self.assertFalse(ExamService.cancel_exam(99999))
        exam.refresh_from_db()
        self.assertTrue(exam.canceled)
        self.assertFalse(exam.is_available)

    def test_question_points_roundtrip(self):
        """Test question points are stored as questionId/point pairs."""
        question = self.make_question()
        exam = Exam(title='Quiz', duration_minutes=15)
        exam.set_question_points([ExamQuestionPoint(question_id=question.pk, point=5)])
        ExamService.save_exam(exam)
        exam.refresh_from_db()
        self.assertEqual(exam.question_data, [{'questionId': question.pk, 'point': 5}])
        self.assertEqual(exam.get_question_points()[0].point, 5)

    def test_assign(self):
        """Test assigning an exam to students."""
        exam = Exam.objects.create(title='Quiz', duration_minutes=15)
        student = User.objects.create_user('student')
        ExamService.assign(exam, [student])
        self.assertEqual(AttemptService.find_by_exam_and_user(exam.pk, 'student').remaining_time, 900)


class UserProfileTests(TestCase):
    """Tests for automatic profile creation."""

    def test_profile_created(self):
        """Test a new user gets an active profile with no roles."""
        user = User.objects.create_user('someone')
        self.assertEqual(user.profile.status, Lifecycle.ACTIVE)
        self.assertEqual(user.profile.role_names, [])
        self.assertFalse(user.profile.is_lecturer)


class UserServiceTests(TestCase):
    """Tests for account creation, lookups and updates."""

    def setUp(self):
        self.intake = Intake.objects.create(code='K2024', name='Intake 2024')

    def test_expand_roles(self):
        """Test each role brings every role below it."""
        self.assertEqual(expand_roles(None), ['student'])
        self.assertEqual(expand_roles([]), ['student'])
        self.assertEqual(expand_roles(['student']), ['student'])
        self.assertEqual(expand_roles([Role.Name.LECTURER]), ['lecturer', 'student'])
        self.assertEqual(expand_roles(['admin']), ['admin', 'lecturer', 'student'])
        self.assertEqual(expand_roles(['lecturer', 'admin']), ['admin', 'lecturer', 'student'])
        with self.assertRaises(ValueError):
            expand_roles(['janitor'])

    def test_create_without_roles_is_student(self):
        """Test a user created without roles is a student only."""
        user = UserService.create_user('dang', email='dang@test.com')
        self.assertEqual(user.profile.role_names, ['student'])
        self.assertIsNone(user.profile.intake)

    def test_create_admin_gets_all_roles(self):
        """Test an admin is also a lecturer and a student."""
        user = UserService.create_user('boss', roles=[Role.Name.ADMIN])
        self.assertEqual(user.profile.role_names, ['admin', 'lecturer', 'student'])
        self.assertTrue(user.profile.is_admin)
        self.assertTrue(user.profile.is_lecturer)
        self.assertEqual(Role.objects.count(), 3)

    def test_create_lecturer(self):
        """Test a lecturer is also a student but not an admin."""
        user = UserService.create_user('giangvien', roles=['lecturer'])
        self.assertEqual(user.profile.role_names, ['lecturer', 'student'])
        self.assertFalse(user.profile.is_admin)

    def test_password_defaults_to_username(self):
        """Test the default password is the username, stored hashed."""
        user = UserService.create_user('thanh', email='thanh@test.com')
        user.refresh_from_db()
        self.assertNotEqual(user.password, 'thanh')
        self.assertTrue(user.check_password('thanh'))

    def test_given_password_is_hashed(self):
        """Test an explicit password wins over the username."""
        user = UserService.create_user('thanh', password='s3cret-pass')
        self.assertTrue(user.check_password('s3cret-pass'))
        self.assertFalse(user.check_password('thanh'))

    def test_profile_fields_copied(self):
        """Test names, image and intake are stored on create."""
        UserService.create_user(
            'minh', email='minh@test.com', intake=self.intake,
            first_name='Minh', last_name='Tran', image='avatars/minh.png'
        )
        user = UserService.get_user_by_username('minh')
        self.assertEqual((user.first_name, user.last_name), ('Minh', 'Tran'))
        self.assertEqual(user.profile.intake, self.intake)
        self.assertEqual(user.profile.image, 'avatars/minh.png')

    def test_exists_checks(self):
        """Test username and email existence checks."""
        UserService.create_user('minh', email='minh@test.com')
        self.assertTrue(UserService.exists_by_username('minh'))
        self.assertFalse(UserService.exists_by_username('nobody'))
        self.assertFalse(UserService.exists_by_username(None))
        self.assertTrue(UserService.exists_by_email('MINH@test.com'))
        self.assertFalse(UserService.exists_by_email('nobody@test.com'))
        self.assertFalse(UserService.exists_by_email(None))

    def test_lookups(self):
        """Test lookups by username and id, with unusable keys."""
        user = UserService.create_user('minh')
        self.assertEqual(UserService.get_user_by_username('minh'), user)
        self.assertIsNone(UserService.get_user_by_username('nobody'))
        self.assertIsNone(UserService.get_user_by_username(''))
        self.assertEqual(UserService.find_user_by_id(user.pk), user)
        self.assertIsNone(UserService.find_user_by_id(99999))
        self.assertIsNone(UserService.find_user_by_id(-1))
        self.assertIsNone(UserService.find_user_by_id(None))

    def test_update_user(self):
        """Test updates persist fields and replace roles as given."""
        user = UserService.create_user('minh', roles=['admin'])
        user.email = 'new@test.com'
        UserService.update_user(user, roles=['lecturer'])

        updated = UserService.find_user_by_id(user.pk)
        self.assertEqual(updated.email, 'new@test.com')
        self.assertEqual(updated.profile.role_names, ['lecturer'])

    def test_update_keeps_roles_when_not_given(self):
        """Test roles stay untouched without a new role set."""
        user = UserService.create_user('minh', roles=['lecturer'])
        user.first_name = 'Minh'
        UserService.update_user(user)
        self.assertEqual(UserService.find_user_by_id(user.pk).profile.role_names, ['lecturer', 'student'])

    def test_update_missing_user(self):
        """Test updating nothing or an unsaved user returns None."""
        self.assertIsNone(UserService.update_user(None))
        self.assertIsNone(UserService.update_user(User(username='ghost')))
        self.assertIsNone(UserService.update_user(User(pk=99999, username='ghost')))
        self.assertFalse(User.objects.filter(username='ghost').exists())


class RoleServiceTests(TestCase):
    """Tests for role lookups."""

    def test_find_by_name(self):
        """Test roles are found by name and blank names give None."""
        admin = RoleService.get_or_create('admin')
        self.assertEqual(RoleService.find_by_name('admin'), admin)
        self.assertEqual(RoleService.find_by_name(Role.Name.ADMIN), admin)
        self.assertIsNone(RoleService.find_by_name('lecturer'))
        self.assertIsNone(RoleService.find_by_name(None))
        self.assertIsNone(RoleService.find_by_name(''))

    def test_get_or_create_is_idempotent(self):
        """Test a role name is stored once."""
        RoleService.get_or_create('student')
        RoleService.get_or_create(Role.Name.STUDENT)
        self.assertEqual([role.name for role in RoleService.find_all()], ['student'])


class ProfileServiceTests(TestCase):
    """Tests for profile persistence."""

    def test_create_profile_overwrites_existing(self):
        """Test saving a fresh profile for a user replaces the one it has."""
        user = User.objects.create_user('minh')
        existing_pk = user.profile.pk
        intake = Intake.objects.create(code='K2025', name='Intake 2025')

        profile = ProfileService.create_profile(UserProfile(user=user, intake=intake, image='a.png'))
        self.assertEqual(profile.pk, existing_pk)
        self.assertEqual(UserProfile.objects.filter(user=user).count(), 1)
        stored = UserProfile.objects.get(user=user)
        self.assertEqual(stored.intake, intake)
        self.assertEqual(stored.image, 'a.png')

    def test_get_all_profiles(self):
        """Test every user's profile is listed."""
        UserService.create_user('minh')
        UserService.create_user('thanh', roles=['lecturer'])
        profiles = ProfileService.get_all_profiles()
        self.assertIsInstance(profiles, list)
        self.assertEqual(sorted(p.user.username for p in profiles), ['minh', 'thanh'])


class ManagementCommandTests(TestCase):
    """Tests for the demo and statistics commands."""

    def test_setup_demo_and_statistics(self):
        """Test demo data is seeded and summarised."""
        call_command('setup_demo', stdout=StringIO())
        exam = Exam.objects.get(title='Python Basics Quiz')
        attempt = AttemptService.find_by_exam_and_user(exam.pk, 'student')
        self.assertTrue(attempt.is_finished)
        self.assertEqual(attempt.total_point, 5.0)

        out = StringIO()
        call_command('exam_statistics', exam=exam.pk, stdout=out)
        self.assertIn('Average: 5.0', out.getvalue())

    def test_setup_demo_is_idempotent(self):
        """Test running the demo twice keeps one exam."""
        call_command('setup_demo', stdout=StringIO())
        call_command('setup_demo', stdout=StringIO())
        self.assertEqual(Exam.objects.filter(title='Python Basics Quiz').count(), 1)

    def test_setup_demo_roles(self):
        """Test demo accounts get expanded roles and the student an intake."""
        call_command('setup_demo', stdout=StringIO())
        admin = UserService.get_user_by_username('admin')
        self.assertEqual(admin.profile.role_names, ['admin', 'lecturer', 'student'])
        self.assertTrue(admin.check_password('admin123'))
        self.assertEqual(UserService.get_user_by_username('lecturer').profile.role_names, ['lecturer', 'student'])
        student = UserService.get_user_by_username('student')
        self.assertEqual(student.profile.role_names, ['student'])
        self.assertEqual(student.profile.intake.code, 'K2024')
