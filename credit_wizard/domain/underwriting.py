"""Underwriting engine - eligibility scoring, approval policy and offer sizing"""

from decimal import Decimal
from typing import Mapping, Sequence

from credit_wizard.domain.models import Question, QuestionId

# Policy: a score must strictly exceed this to be approved
APPROVAL_THRESHOLD = 6

# Offer covers twelve months of net monthly cash flow
OFFER_MONTHS = 12

QUESTIONS: tuple[Question, ...] = (
    Question(QuestionId.PAYING_JOB, "Do you have a paying job?", 4),
    Question(
        QuestionId.CONSISTENT_JOB_12M,
        "Have you been employed continuously in the past 12 months?",
        2,
    ),
    Question(QuestionId.OWN_HOME, "Do you own a home?", 2),
    Question(QuestionId.OWN_CAR, "Do you own a car?", 1),
    Question(QuestionId.ADDITIONAL_INCOME, "Do you have any additional sources of income?", 2),
)


def list_questions() -> Sequence[Question]:
    """Return the fixed question catalog in display order"""
    return QUESTIONS


def score(answers: Mapping[QuestionId, bool], questions: Sequence[Question] = QUESTIONS) -> int:
    """
    Sum the weights of questions answered true.

    Questions absent from the mapping count as false. Defaults to the
    fixed catalog; a session with its own catalog passes it in.
    """
    return sum(q.weight for q in questions if answers.get(q.id, False))


def is_approved(points: int) -> bool:
    """Approve only when the score is strictly above the threshold (6 is declined)"""
    return points > APPROVAL_THRESHOLD


def compute_offer(income: Decimal, expenses: Decimal) -> Decimal:
    """
    Annualize net monthly cash flow into a credit offer.

    Example:
        income 4000, expenses 2500 → (4000 - 2500) * 12 = 18000
        income 1000, expenses 2500 → 0 (never negative)
    """
    offer = (Decimal(income) - Decimal(expenses)) * OFFER_MONTHS
    return max(offer, Decimal("0"))
