"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, EmailStr, Field, StrictFloat, StrictInt, StrictStr
from typing import Dict, List, Literal, Optional, Union


class QuestionSchema(BaseModel):
    """Single eligibility question"""

    id: str
    label: str
    weight: int


class QuestionsResponse(BaseModel):
    """Response for GET /v1/questions"""

    questions: List[QuestionSchema]
    approval_threshold: int


class EligibilityRequest(BaseModel):
    """Request body for POST /v1/assessments/{session_id}/eligibility"""

    answers: Dict[str, Literal["yes", "no"]] = Field(
        default_factory=dict, description="Question id to 'yes'/'no'; missing questions count as 'no'"
    )


class FinancialsRequest(BaseModel):
    """Request body for POST /v1/assessments/{session_id}/financials"""

    income: Union[StrictStr, StrictInt, StrictFloat] = Field(..., description="Monthly income")
    expenses: Union[StrictStr, StrictInt, StrictFloat] = Field(..., description="Monthly expenses")


class EmailRequest(BaseModel):
    """Request body for POST /v1/assessments/{session_id}/email"""

    address: EmailStr


class StepSchema(BaseModel):
    """Entry of the progress indicator"""

    key: str
    label: str


class AnswerSchema(BaseModel):
    """Recorded answer with its point value"""

    value: bool
    points: int


class AssessmentResponse(BaseModel):
    """Current state of an assessment session"""

    session_id: str
    step: str
    steps: List[StepSchema]
    answers: Dict[str, AnswerSchema]
    score: int
    income: Optional[str] = None
    expenses: Optional[str] = None
    offer: Optional[str] = None
    recipient_email: Optional[str] = None
    message: Optional[str] = None
    error_kind: Optional[str] = None
