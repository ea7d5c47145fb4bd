"""GET /v1/questions - Eligibility question catalog"""

from fastapi import APIRouter

from credit_wizard.api.v1.schemas import QuestionSchema, QuestionsResponse
from credit_wizard.domain.underwriting import APPROVAL_THRESHOLD, list_questions

router = APIRouter()


@router.get("/questions", response_model=QuestionsResponse)
def get_questions():
    """Return the fixed question catalog in display order"""
    return QuestionsResponse(
        questions=[
            QuestionSchema(id=q.id.value, label=q.label, weight=q.weight)
            for q in list_questions()
        ],
        approval_threshold=APPROVAL_THRESHOLD,
    )
