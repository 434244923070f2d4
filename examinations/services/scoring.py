"""
Scoring Engine.
Reconciles the choices a user submitted against the stored question data
and tallies the points earned for an exam attempt.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from examinations.models import Question, QuestionType, DIFFICULTY_POINTS
from .keys import coerce_id, is_valid_id

logger = logging.getLogger(__name__)


class QuestionNotFound(LookupError):
    """Raised when an answer sheet names a question that cannot be resolved."""

    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__(f"Question not found: {question_id!r}")


@dataclass
class SubmittedChoice:
    id: Optional[int]
    choice_text: str = ""
    is_corrected: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> 'SubmittedChoice':
        return cls(
            id=coerce_id(data.get('id')),
            choice_text=data.get('choiceText', data.get('choice_text', '')) or '',
            is_corrected=int(data.get('isCorrected', data.get('is_corrected', 0)) or 0),
        )


@dataclass
class AnswerSheet:
    question_id: Optional[int]
    choices: List[SubmittedChoice] = field(default_factory=list)
    point: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'AnswerSheet':
        return cls(
            question_id=coerce_id(data.get('questionId', data.get('question_id'))),
            choices=[SubmittedChoice.from_dict(c) for c in data.get('choices') or []],
            point=data.get('point'),
        )


@dataclass
class ExamQuestionPoint:
    question_id: Optional[int]
    point: Optional[int]

    @classmethod
    def from_dict(cls, data: dict) -> 'ExamQuestionPoint':
        return cls(
            question_id=coerce_id(data.get('questionId', data.get('question_id'))),
            point=data.get('point'),
        )

    def to_dict(self) -> dict:
        return {'questionId': self.question_id, 'point': self.point}


@dataclass
class ChoiceCorrect:
    choice: SubmittedChoice
    is_real_correct: int

    @property
    def matches(self) -> bool:
        return int(self.choice.is_corrected or 0) == self.is_real_correct


@dataclass
class ChoiceList:
    question: Question
    choices: List[ChoiceCorrect]
    point: Optional[int]

    @property
    def is_selected_correct(self) -> bool:
        if self.question.type_code == QuestionType.TypeCode.ESSAY:
            return False
        return bool(self.choices) and all(c.matches for c in self.choices)


@dataclass
class QuestionScore:
    question_id: int
    max_points: float
    points_earned: float
    is_correct: bool


@dataclass
class ScoreSheet:
    questions: List[QuestionScore]

    @property
    def total_point(self) -> float:
        return sum(q.points_earned for q in self.questions)

    @property
    def max_points(self) -> float:
        return sum(q.max_points for q in self.questions)

    @property
    def correct_count(self) -> int:
        return sum(1 for q in self.questions if q.is_correct)

    @property
    def percentage(self) -> float:
        if self.max_points == 0:
            return 0.0
        return (self.total_point / self.max_points) * 100


def question_point_for(difficulty: str) -> int:
    return DIFFICULTY_POINTS[difficulty]


def find_question(question_id) -> Question:
    """Load a question with its choices, including soft-deleted ones."""
    if not is_valid_id(question_id):
        raise QuestionNotFound(question_id)
    try:
        return Question.objects.select_related('question_type').prefetch_related('choices').get(pk=question_id)
    except Question.DoesNotExist:
        raise QuestionNotFound(question_id) from None


def get_choice_list(
    answer_sheets: Iterable[AnswerSheet],
    exam_question_points: Iterable[ExamQuestionPoint],
    question_lookup: Callable[[Optional[int]], Question] = find_question
) -> List[ChoiceList]:
    """
    Pair every submitted choice with its stored correctness flag.

    Returns one entry per answer sheet in input order. Any unresolvable
    question id raises QuestionNotFound and nothing is returned.
    """
    points = {p.question_id: p.point for p in exam_question_points or []}
    results = []

    for sheet in answer_sheets or []:
        question = question_lookup(sheet.question_id)
        stored = {c.id: c.is_corrected for c in question.choices.all()}

        if not stored:
            reconciled = []
        else:
            reconciled = [
                ChoiceCorrect(choice=choice, is_real_correct=int(stored.get(choice.id, 0)))
                for choice in sheet.choices
            ]

        point = points.get(sheet.question_id, sheet.point)
        results.append(ChoiceList(question=question, choices=reconciled, point=point))

    return results


def grade_choice_lists(choice_lists: Iterable[ChoiceList]) -> ScoreSheet:
    scores = []
    for entry in choice_lists:
        max_points = float(entry.point or 0)
        is_correct = entry.is_selected_correct
        scores.append(QuestionScore(
            question_id=entry.question.pk,
            max_points=max_points,
            points_earned=max_points if is_correct else 0.0,
            is_correct=is_correct
        ))
    sheet = ScoreSheet(questions=scores)
    logger.info(f"Graded {len(scores)} questions: {sheet.correct_count} correct, {sheet.total_point} points")
    return sheet


def convert_from_question_list(questions: Iterable[Question]) -> List[AnswerSheet]:
    """Build blank answer sheets, every choice unmarked."""
    return [
        AnswerSheet(
            question_id=question.pk,
            choices=[
                SubmittedChoice(id=c.id, choice_text=c.choice_text, is_corrected=0)
                for c in question.choices.all()
            ],
            point=question.point
        )
        for question in questions or []
    ]


def get_question_point_list(exam_question_points: Iterable[ExamQuestionPoint]) -> List[Question]:
    """Questions named by the points list. Unknown ids are skipped."""
    ids = [p.question_id for p in exam_question_points or [] if p.question_id is not None]
    if not ids:
        return []
    by_id = Question.objects.prefetch_related('choices').in_bulk(ids)
    return [by_id[qid] for qid in ids if qid in by_id]
