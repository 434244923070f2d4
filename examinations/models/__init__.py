from .lifecycle import Lifecycle
from .course import Course, Part, Intake
from .user_profile import Role, UserProfile
from .question import QuestionType, Question, Choice, DifficultyLevel, DIFFICULTY_POINTS
from .exam import Exam
from .exam_user import ExamUser

__all__ = [
    'Lifecycle', 'Course', 'Part', 'Intake', 'Role', 'UserProfile',
    'QuestionType', 'Question', 'Choice', 'DifficultyLevel', 'DIFFICULTY_POINTS',
    'Exam', 'ExamUser',
]
