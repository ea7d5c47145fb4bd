"""Unit tests for the assessment step state machine"""

import asyncio
import pytest
from decimal import Decimal
from credit_wizard.domain.exceptions import InputValidationError, InvalidTransitionError
from credit_wizard.domain.flow import (
    FINANCIALS_INVALID_MESSAGE,
    TRANSITIONS,
    ErrorKind,
    FlowController,
    parse_amount,
)
from credit_wizard.domain.models import Answer, Question, QuestionId, Step
from conftest import APPROVED_ANSWERS, DECLINED_ANSWERS, FAKE_PDF, FakeDispatcher, FakeExporter


def test_new_session_starts_empty_at_eligibility(controller: FlowController):
    """Test initial assessment state"""
    assessment = controller.assessment
    assert assessment.step is Step.ELIGIBILITY
    assert assessment.answers == {}
    assert assessment.score == 0
    assert assessment.financials is None
    assert assessment.offer is None
    assert assessment.recipient_email is None
    assert len(assessment.questions) == 5


def test_eligibility_approved_moves_to_financials(controller: FlowController):
    """Test 4+2+2 = 8 points advances"""
    outcome = controller.submit_eligibility(APPROVED_ANSWERS)

    assert outcome.step is Step.FINANCIALS
    assert outcome.ok
    assert controller.assessment.score == 8
    assert controller.assessment.answers[QuestionId.PAYING_JOB] == Answer(value=True, points=4)
    assert controller.assessment.answers[QuestionId.OWN_CAR] == Answer(value=False, points=1)


def test_eligibility_declined_is_terminal(controller: FlowController):
    """Test 4 points goes to not_eligible and nothing else is accepted"""
    outcome = controller.submit_eligibility(DECLINED_ANSWERS)

    assert outcome.step is Step.NOT_ELIGIBLE
    assert controller.assessment.score == 4

    with pytest.raises(InvalidTransitionError):
        controller.submit_eligibility(APPROVED_ANSWERS)
    with pytest.raises(InvalidTransitionError):
        controller.submit_financials("4000", "2200")


def test_eligibility_boundary_score_six_declined(controller: FlowController):
    """Test exactly 6 points (4 + 2) is declined"""
    outcome = controller.submit_eligibility({"paying_job": "yes", "own_home": "yes"})

    assert controller.assessment.score == 6
    assert outcome.step is Step.NOT_ELIGIBLE


def test_eligibility_only_exact_yes_counts(controller: FlowController):
    """Test values other than 'yes' are false"""
    controller.submit_eligibility({"paying_job": "YES", "own_home": "true", "own_car": "yes"})
    assert controller.assessment.score == 1


def test_financials_valid_moves_to_offer(controller: FlowController):
    """Test 4000/2200 gives 21600 offer"""
    controller.submit_eligibility(APPROVED_ANSWERS)
    outcome = controller.submit_financials("4000", "2200")

    assert outcome.step is Step.OFFER
    assert controller.assessment.income == Decimal("4000")
    assert controller.assessment.expenses == Decimal("2200")
    assert controller.assessment.offer == Decimal("21600")


def test_financials_expenses_above_income_offer_zero(controller: FlowController):
    """Test negative cash flow still advances with a zero offer"""
    controller.submit_eligibility(APPROVED_ANSWERS)
    controller.submit_financials("1000", "2500")

    assert controller.step is Step.OFFER
    assert controller.assessment.offer == 0


@pytest.mark.parametrize(
    "income,expenses",
    [("-5", "100"), ("4000", "-1"), ("abc", "100"), ("", "100"), ("NaN", "1"), ("Infinity", "1"),
     ("1e999999", "0"), ("1e3", "0"), ("1_000", "0"), ("1000000000001", "0")],
)
def test_financials_invalid_stays_without_mutation(controller: FlowController, income, expenses):
    """Test rejected input leaves step and assessment untouched"""
    controller.submit_eligibility(APPROVED_ANSWERS)
    outcome = controller.submit_financials(income, expenses)

    assert outcome.step is Step.FINANCIALS
    assert outcome.error_kind is ErrorKind.VALIDATION
    assert outcome.message == FINANCIALS_INVALID_MESSAGE
    assert controller.assessment.financials is None
    assert controller.assessment.offer is None


def test_financials_retry_after_validation_error(controller: FlowController):
    """Test a corrected resubmission is accepted"""
    controller.submit_eligibility(APPROVED_ANSWERS)
    controller.submit_financials("-5", "0")
    outcome = controller.submit_financials("4000", "2200")

    assert outcome.step is Step.OFFER
    assert controller.last_outcome.message is None


def test_parse_amount():
    """Test numeric parsing rules"""
    assert parse_amount(" 4000.50 ") == Decimal("4000.50")
    assert parse_amount("0") == 0
    assert str(parse_amount("-0")) == "0"

    with pytest.raises(InputValidationError):
        parse_amount("-0.01")
    with pytest.raises(InputValidationError):
        parse_amount("12abc")
    with pytest.raises(InputValidationError):
        parse_amount("1E+5")
    assert parse_amount("1000000000000") == Decimal("1000000000000")


async def test_send_email_success(offer_controller: FlowController, exporter: FakeExporter, dispatcher: FakeDispatcher):
    """Test export + dispatch moves to the email step"""
    outcome = await offer_controller.send_email("user@example.com")

    assert outcome.step is Step.EMAIL
    assert outcome.receipt.message_id == "msg-1"
    assert offer_controller.assessment.recipient_email == "user@example.com"

    recipient, artifact = dispatcher.sent[0]
    assert recipient == "user@example.com"
    assert artifact.content == FAKE_PDF
    assert artifact.filename == "credit_assessment.pdf"
    assert artifact.content_type == "application/pdf"

    # Summary handed to the exporter carries the offer; temp file is gone
    assert "21600.00" in exporter.documents[0]
    assert not exporter.paths[0].exists()


async def test_send_email_export_failure_stays_on_offer(offer_controller: FlowController, tmp_path, dispatcher: FakeDispatcher):
    """Test export failure surfaces as EXPORT and sends nothing"""
    offer_controller.exporter = FakeExporter(tmp_path, error="renderer down")

    outcome = await offer_controller.send_email("user@example.com")

    assert outcome.step is Step.OFFER
    assert outcome.error_kind is ErrorKind.EXPORT
    assert outcome.message == "Failed: renderer down"
    assert dispatcher.sent == []
    assert offer_controller.assessment.recipient_email is None


async def test_send_email_delivery_failure_stays_on_offer(offer_controller: FlowController, exporter: FakeExporter):
    """Test delivery failure surfaces as DELIVERY and cleans up the artifact"""
    offer_controller.dispatcher = FakeDispatcher(error="smtp refused")

    outcome = await offer_controller.send_email("user@example.com")

    assert outcome.step is Step.OFFER
    assert outcome.error_kind is ErrorKind.DELIVERY
    assert outcome.message == "Failed: smtp refused"
    assert not exporter.paths[0].exists()


async def test_send_email_retry_after_failure(offer_controller: FlowController, dispatcher: FakeDispatcher, tmp_path):
    """Test a manual resubmission after a failure can succeed"""
    good_exporter = offer_controller.exporter
    offer_controller.exporter = FakeExporter(tmp_path, error="renderer down")
    await offer_controller.send_email("user@example.com")

    offer_controller.exporter = good_exporter
    outcome = await offer_controller.send_email("user@example.com")

    assert outcome.step is Step.EMAIL
    assert len(dispatcher.sent) == 1


async def test_send_email_rejected_before_offer(controller: FlowController, dispatcher: FakeDispatcher):
    """Test jumping from eligibility straight to email is refused"""
    with pytest.raises(InvalidTransitionError):
        await controller.send_email("user@example.com")
    assert dispatcher.sent == []


async def test_stale_submissions_do_not_mutate(offer_controller: FlowController):
    """Test resubmitting earlier steps after advancing leaves the assessment as is"""
    await offer_controller.send_email("user@example.com")
    before = (offer_controller.assessment.score, offer_controller.assessment.offer)

    with pytest.raises(InvalidTransitionError):
        offer_controller.submit_eligibility(DECLINED_ANSWERS)
    with pytest.raises(InvalidTransitionError):
        offer_controller.submit_financials("1", "0")
    with pytest.raises(InvalidTransitionError):
        await offer_controller.send_email("other@example.com")

    assert (offer_controller.assessment.score, offer_controller.assessment.offer) == before
    assert offer_controller.assessment.recipient_email == "user@example.com"
    assert offer_controller.step is Step.EMAIL


def test_transitions_only_move_forward():
    """Test the transition table has no back-edges and terminal steps have none"""
    assert TRANSITIONS[Step.EMAIL] == frozenset()
    assert TRANSITIONS[Step.NOT_ELIGIBLE] == frozenset()
    assert Step.EMAIL not in TRANSITIONS[Step.ELIGIBILITY]
    assert Step.ELIGIBILITY not in set().union(*TRANSITIONS.values())


async def test_overlapping_sends_deliver_once(controller: FlowController, dispatcher: FakeDispatcher, tmp_path):
    """Test a second send waiting on an in-flight one is rejected without mailing"""
    controller.exporter = FakeExporter(tmp_path, delay=0.05)
    controller.submit_eligibility(APPROVED_ANSWERS)
    controller.submit_financials("4000", "2200")

    first, second = await asyncio.gather(
        controller.send_email("a@example.com"),
        controller.send_email("b@example.com"),
        return_exceptions=True,
    )

    assert first.step is Step.EMAIL
    assert isinstance(second, InvalidTransitionError)
    assert [recipient for recipient, _ in dispatcher.sent] == ["a@example.com"]
    assert controller.assessment.recipient_email == "a@example.com"


async def test_overlapping_send_retries_after_failed_first(controller: FlowController, dispatcher: FakeDispatcher, tmp_path):
    """Test the queued send goes through when the first one failed"""
    controller.exporter = FakeExporter(tmp_path, error="renderer down", delay=0.05)
    controller.submit_eligibility(APPROVED_ANSWERS)
    controller.submit_financials("4000", "2200")

    async def send_after_recovery():
        await asyncio.sleep(0)
        controller.exporter = FakeExporter(tmp_path)
        return await controller.send_email("b@example.com")

    first, second = await asyncio.gather(controller.send_email("a@example.com"), send_after_recovery())

    assert first.error_kind is ErrorKind.EXPORT
    assert second.step is Step.EMAIL
    assert [recipient for recipient, _ in dispatcher.sent] == ["b@example.com"]


def test_custom_catalog_scores_with_its_own_weights(exporter, dispatcher):
    """Test the score agrees with recorded points for an injected catalog"""
    catalog = [Question(QuestionId.PAYING_JOB, "Do you have a paying job?", 7)]
    controller = FlowController(exporter=exporter, dispatcher=dispatcher, questions=catalog)

    outcome = controller.submit_eligibility({"paying_job": "yes"})

    assert controller.assessment.score == 7
    assert controller.assessment.answers[QuestionId.PAYING_JOB].points == 7
    assert outcome.step is Step.FINANCIALS
