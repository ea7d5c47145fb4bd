"""Step state machine driving a single assessment session"""

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, Overflow
from enum import Enum
from typing import Callable, Dict, FrozenSet, Mapping, Optional, Sequence

from credit_wizard.domain import underwriting
from credit_wizard.domain.exceptions import (
    DeliveryError,
    ExportError,
    InputValidationError,
    InvalidTransitionError,
)
from credit_wizard.domain.models import Answer, Assessment, FinancialInput, Question, Step
from credit_wizard.domain.ports import DeliveryReceipt, DocumentExporter, NotificationDispatcher
from credit_wizard.domain.summary import render_summary

logger = logging.getLogger(__name__)

FINANCIALS_INVALID_MESSAGE = "Enter valid non-negative numbers."

# Plain decimal notation only: no exponents, underscores, NaN or Infinity
AMOUNT_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

# Upper bound on a monthly amount
MAX_AMOUNT = Decimal("1000000000000")

# Allowed moves; terminal steps have none
TRANSITIONS: Dict[Step, FrozenSet[Step]] = {
    Step.ELIGIBILITY: frozenset({Step.FINANCIALS, Step.NOT_ELIGIBLE}),
    Step.FINANCIALS: frozenset({Step.OFFER}),
    Step.OFFER: frozenset({Step.EMAIL}),
    Step.EMAIL: frozenset(),
    Step.NOT_ELIGIBLE: frozenset(),
}


class ErrorKind(str, Enum):
    """Recoverable failure categories surfaced to the user"""

    VALIDATION = "validation"
    EXPORT = "export"
    DELIVERY = "delivery"


@dataclass(frozen=True)
class StepOutcome:
    """What a submission did: the resulting step plus any user-facing message"""

    step: Step
    message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    receipt: Optional[DeliveryReceipt] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None


def parse_amount(raw: str) -> Decimal:
    """
    Parse a user-entered monthly amount.

    Raises:
        InputValidationError: Not a plain decimal number, negative, or above MAX_AMOUNT
    """
    text = str(raw).strip()
    if not AMOUNT_PATTERN.match(text):
        raise InputValidationError(f"Not a number: {raw!r}")

    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise InputValidationError(f"Not a number: {raw!r}") from e

    if value < 0:
        raise InputValidationError(f"Negative amount: {raw!r}")
    if value > MAX_AMOUNT:
        raise InputValidationError(f"Amount too large: {raw!r}")

    # Normalizes "-0" to "0"
    return value.copy_abs()


class FlowController:
    """
    Owns one session's Assessment and advances it through
    eligibility → financials → offer → email.

    A submission for any step other than the current one raises
    InvalidTransitionError and leaves the assessment untouched.
    """

    def __init__(
        self,
        exporter: DocumentExporter,
        dispatcher: NotificationDispatcher,
        questions: Optional[Sequence[Question]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.exporter = exporter
        self.dispatcher = dispatcher
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.assessment = Assessment(questions=list(questions or underwriting.list_questions()))
        self.last_outcome: Optional[StepOutcome] = None
        # Held for a whole email submission so overlapping sends run one at a time
        self._lock = asyncio.Lock()

    @property
    def step(self) -> Step:
        return self.assessment.step

    def submit_eligibility(self, raw_answers: Mapping[str, str]) -> StepOutcome:
        """
        Score yes/no answers and move to FINANCIALS or NOT_ELIGIBLE.

        Only the exact value "yes" counts as true; missing questions are "no".
        """
        self._require_step(Step.ELIGIBILITY)

        answers = {
            q.id: Answer(value=raw_answers.get(q.id.value, "no") == "yes", points=q.weight)
            for q in self.assessment.questions
        }
        points = underwriting.score(
            {qid: a.value for qid, a in answers.items()}, self.assessment.questions
        )

        self.assessment.answers = answers
        self.assessment.score = points

        if underwriting.is_approved(points):
            return self._advance(Step.FINANCIALS)
        return self._advance(Step.NOT_ELIGIBLE)

    def submit_financials(self, income: str, expenses: str) -> StepOutcome:
        """Validate monthly figures and compute the offer; invalid input keeps the step"""
        self._require_step(Step.FINANCIALS)

        try:
            financials = FinancialInput(income=parse_amount(income), expenses=parse_amount(expenses))
        except InputValidationError as e:
            logger.info(f"Financials rejected: {e}")
            return self._stay(FINANCIALS_INVALID_MESSAGE, ErrorKind.VALIDATION)

        try:
            offer = underwriting.compute_offer(financials.income, financials.expenses)
        except Overflow as e:
            logger.info(f"Financials rejected: {e!r}")
            return self._stay(FINANCIALS_INVALID_MESSAGE, ErrorKind.VALIDATION)

        self.assessment.financials = financials
        self.assessment.offer = offer
        return self._advance(Step.OFFER)

    async def send_email(self, address: str) -> StepOutcome:
        """
        Export the summary to PDF and mail it.

        Export and delivery failures keep the session on OFFER; nothing is
        retried automatically. A send arriving while another is in flight
        waits for it, then is rejected if the first one succeeded.
        """
        async with self._lock:
            self._require_step(Step.OFFER)

            document = self.render_summary()
            try:
                async with self.exporter.export(document) as artifact:
                    receipt = await self.dispatcher.dispatch(address, artifact)
            except ExportError as e:
                logger.error(f"Summary export failed: {e}")
                return self._stay(f"Failed: {e}", ErrorKind.EXPORT)
            except DeliveryError as e:
                logger.error(f"Summary delivery failed: {e}")
                return self._stay(f"Failed: {e}", ErrorKind.DELIVERY)

            self.assessment.recipient_email = address
            return self._advance(Step.EMAIL, receipt=receipt)

    def render_summary(self) -> str:
        return render_summary(self.assessment, now=self.clock())

    def _require_step(self, expected: Step) -> None:
        if self.assessment.step is not expected:
            raise InvalidTransitionError(self.assessment.step.value, expected.value)

    def _advance(self, target: Step, receipt: Optional[DeliveryReceipt] = None) -> StepOutcome:
        current = self.assessment.step
        if target not in TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value)

        self.assessment.step = target
        self.last_outcome = StepOutcome(step=target, receipt=receipt)
        return self.last_outcome

    def _stay(self, message: str, kind: ErrorKind) -> StepOutcome:
        self.last_outcome = StepOutcome(step=self.assessment.step, message=message, error_kind=kind)
        return self.last_outcome
