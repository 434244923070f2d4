"""
Management command to set up demo data for the Online Examination backend.
Creates demo users, a course with a part, a small question bank and an exam
assigned to the student.
"""
from django.core.management.base import BaseCommand

from examinations.models import (
    Course, Part, Intake, QuestionType, Question, Choice, Exam, DifficultyLevel, Role,
)
from examinations.services import (
    AttemptService, ExamQuestionPoint, ExamService, QuestionService, UserService,
    convert_from_question_list, get_choice_list, grade_choice_lists,
)


DEMO_QUESTIONS = [
    (
        QuestionType.TypeCode.MULTIPLE_CHOICE,
        DifficultyLevel.EASY,
        'What is the output of print(type([]))?',
        [("<class 'list'>", 1), ("<class 'tuple'>", 0), ("<class 'dict'>", 0)],
    ),
    (
        QuestionType.TypeCode.TRUE_FALSE,
        DifficultyLevel.MEDIUM,
        'Python is a statically typed programming language.',
        [('True', 0), ('False', 1)],
    ),
    (
        QuestionType.TypeCode.ESSAY,
        DifficultyLevel.HARD,
        'Compare and contrast Python lists and tuples.',
        [],
    ),
]


class Command(BaseCommand):
    help = 'Set up demo data for testing'

    def _user(self, username, password, role, **fields):
        user = UserService.get_user_by_username(username)
        if user is not None:
            self.stdout.write(f'  {username} already exists')
            return user
        user = UserService.create_user(
            username, email=f'{username}@example.com', password=password, roles=[role], **fields
        )
        self.stdout.write(self.style.SUCCESS(f'✓ Created {role}: {username} / {password}'))
        return user

    def handle(self, *args, **options):
        self.stdout.write(self.style.NOTICE('\nSetting up Online Examination demo data...\n'))

        intake, _ = Intake.objects.get_or_create(code='K2024', defaults={'name': 'Intake 2024'})

        student = self._user('student', 'student123', Role.Name.STUDENT,
                             first_name='Test', last_name='Student', intake=intake)
        lecturer = self._user('lecturer', 'lecturer123', Role.Name.LECTURER,
                              first_name='Test', last_name='Lecturer', is_staff=True)
        self._user('admin', 'admin123', Role.Name.ADMIN, is_staff=True, is_superuser=True)

        course, _ = Course.objects.get_or_create(
            code='CS101',
            defaults={
                'name': 'Introduction to Python',
                'description': 'Learn Python programming fundamentals'
            }
        )
        part, _ = Part.objects.get_or_create(course=course, name='Chapter 1')
        self.stdout.write(self.style.SUCCESS(f'✓ Course: {course.name} ({course.code}) / {part.name}'))

        for code in QuestionType.TypeCode:
            QuestionType.objects.get_or_create(type_code=code, defaults={'description': code.label})

        if Exam.objects.filter(title='Python Basics Quiz').exists():
            self.stdout.write('  Exam already exists: Python Basics Quiz')
            return

        questions = []
        for type_code, difficulty, text, choices in DEMO_QUESTIONS:
            question = Question(
                question_text=text,
                difficulty_level=difficulty,
                question_type=QuestionType.objects.get(type_code=type_code),
                part=part,
                created_by=lecturer
            )
            questions.append(QuestionService.save(
                question,
                [Choice(choice_text=label, is_corrected=flag) for label, flag in choices]
            ))

        exam = Exam(title='Python Basics Quiz', part=part, duration_minutes=30, created_by=lecturer)
        exam.set_question_points([ExamQuestionPoint(question_id=q.pk, point=q.point) for q in questions])
        ExamService.save_exam(exam)
        ExamService.assign(exam, [student])
        self.stdout.write(self.style.SUCCESS(f'✓ Exam: {exam.title} with {len(questions)} questions'))

        # the student answers the multiple-choice question correctly
        sheets = convert_from_question_list(questions)
        for choice in sheets[0].choices:
            choice.is_corrected = 1 if choice.choice_text == "<class 'list'>" else 0
        result = grade_choice_lists(get_choice_list(sheets, exam.get_question_points()))

        attempt = AttemptService.find_by_exam_and_user(exam.pk, student.username)
        attempt.start()
        attempt.finish(total_point=result.total_point)
        self.stdout.write(self.style.SUCCESS(
            f'✓ Graded attempt for {student.username}: {result.total_point}/{result.max_points}'
        ))

        self.stdout.write(self.style.SUCCESS('\n' + '=' * 60))
        self.stdout.write(self.style.SUCCESS('Demo Setup Complete!'))
        self.stdout.write(self.style.SUCCESS('=' * 60))
        self.stdout.write('\nDemo Accounts:')
        self.stdout.write('  student  / student123')
        self.stdout.write('  lecturer / lecturer123')
        self.stdout.write('  admin    / admin123')
        self.stdout.write('')
