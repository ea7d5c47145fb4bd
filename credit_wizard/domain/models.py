"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class QuestionId(str, Enum):
    """Identifiers of the eligibility questions"""

    PAYING_JOB = "paying_job"
    CONSISTENT_JOB_12M = "consistent_job_12m"
    OWN_HOME = "own_home"
    OWN_CAR = "own_car"
    ADDITIONAL_INCOME = "additional_income"


class Step(str, Enum):
    """Wizard steps; NOT_ELIGIBLE is a terminal side-state off ELIGIBILITY"""

    ELIGIBILITY = "eligibility"
    FINANCIALS = "financials"
    OFFER = "offer"
    EMAIL = "email"
    NOT_ELIGIBLE = "not_eligible"


STEP_ORDER: List[Step] = [Step.ELIGIBILITY, Step.FINANCIALS, Step.OFFER, Step.EMAIL]

STEP_LABELS: Dict[Step, str] = {
    Step.ELIGIBILITY: "Eligibility",
    Step.FINANCIALS: "Financials",
    Step.OFFER: "Offer",
    Step.EMAIL: "Email",
}


@dataclass(frozen=True)
class Question:
    """Weighted yes/no eligibility question"""

    id: QuestionId
    label: str
    weight: int


@dataclass(frozen=True)
class Answer:
    """Recorded answer with the question's point value"""

    value: bool
    points: int


@dataclass(frozen=True)
class FinancialInput:
    """Monthly figures supplied by the applicant (both non-negative)"""

    income: Decimal
    expenses: Decimal


@dataclass
class Assessment:
    """Per-session aggregate mutated as each step is submitted"""

    questions: List[Question]
    step: Step = Step.ELIGIBILITY
    answers: Dict[QuestionId, Answer] = field(default_factory=dict)
    score: int = 0
    financials: Optional[FinancialInput] = None
    offer: Optional[Decimal] = None
    recipient_email: Optional[str] = None

    @property
    def income(self) -> Optional[Decimal]:
        return self.financials.income if self.financials else None

    @property
    def expenses(self) -> Optional[Decimal]:
        return self.financials.expenses if self.financials else None
