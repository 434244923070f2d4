from .scoring import (
    AnswerSheet, SubmittedChoice, ExamQuestionPoint, ChoiceCorrect, ChoiceList,
    QuestionNotFound, QuestionScore, ScoreSheet,
    find_question, get_choice_list, grade_choice_lists,
    convert_from_question_list, get_question_point_list, question_point_for,
)
from .attempts import AttemptService
from .statistics import StatisticsService
from .catalog import CourseService, PartService, QuestionTypeService, IntakeService
from .questions import QuestionService, ChoiceService
from .exams import ExamService
from .users import RoleService, ProfileService, UserService, expand_roles

__all__ = [
    'AnswerSheet', 'SubmittedChoice', 'ExamQuestionPoint', 'ChoiceCorrect', 'ChoiceList',
    'QuestionNotFound', 'QuestionScore', 'ScoreSheet',
    'find_question', 'get_choice_list', 'grade_choice_lists',
    'convert_from_question_list', 'get_question_point_list', 'question_point_for',
    'AttemptService', 'StatisticsService',
    'CourseService', 'PartService', 'QuestionTypeService', 'IntakeService',
    'QuestionService', 'ChoiceService', 'ExamService',
    'RoleService', 'ProfileService', 'UserService', 'expand_roles',
]
