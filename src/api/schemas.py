from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator

REVIEW_CATEGORY = "REVIEW"


class ClassificationRequest(BaseModel):
    """
    DTO for incoming classification requests.
    """
    description: StrictStr = Field(..., min_length=1, description="The raw text of the ticket")
    request_id: Optional[str] = Field(None, description="Optional external ID for tracing")


class ClassificationResult(BaseModel):
    """
    Result produced by a classifier (remote model or local keyword stub).

    `category` is the final decision and may be the REVIEW sentinel, while
    `category_label` is always the top-1 label the model actually predicted.
    Extra fields sent by the model server are kept and forwarded untouched.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    category: str = Field(..., min_length=1)
    category_label: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    threshold_used: Optional[float] = Field(None, ge=0.0, le=1.0)
    top3: Optional[List[Tuple[str, float]]] = Field(None, description="Top candidates, highest first")

    @field_validator("top3")
    @classmethod
    def validate_top3(cls, v: Optional[List[Tuple[str, float]]]) -> Optional[List[Tuple[str, float]]]:
        if v is None:
            return v
        if len(v) > 3:
            raise ValueError("top3 holds at most three candidates")
        scores = [score for _, score in v]
        if any(score < 0.0 or score > 1.0 for score in scores):
            raise ValueError("top3 scores must lie in [0, 1]")
        if scores != sorted(scores, reverse=True):
            raise ValueError("top3 must be ordered by descending score")
        return v

    @model_validator(mode="after")
    def validate_review_decision(self) -> "ClassificationResult":
        # REVIEW iff the top-1 confidence fell below the threshold
        if self.threshold_used is not None:
            below = self.confidence < self.threshold_used
            if below != (self.category == REVIEW_CATEGORY):
                raise ValueError(
                    f"category '{self.category}' is inconsistent with confidence "
                    f"{self.confidence} and threshold {self.threshold_used}"
                )
        return self


class TicketData(ClassificationResult):
    ticket_id: str = Field(..., min_length=1, serialization_alias="ticketId")


class TicketResponse(BaseModel):
    """
    Envelope returned by the proxy. Exactly one of `data` / `error` is set.
    """
    success: bool
    data: Optional[TicketData] = None
    error: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
