from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from datetime import datetime
import logging, uuid, typing as t

from assessment_core.config import LOG_LEVEL
from assessment_core.codec import response_summary, to_basic
from assessment_core.reliability import check_reliability
from assessment_core.samples import SAMPLE_ASSESSMENT_ID, load_definition as load_sample
from assessment_core.scoring import score_assessment
from assessment_core.share import generate_compare_payload, generate_share_payload
from assessment_core.types import (
    Answer,
    AssessmentDefinition,
    AssessmentResponse,
    Dimension,
    Item,
    SubmissionMetadata,
)
from assessment_core.validators import AnswerValidationError, validate_answers, validate_definition
from .storage import (
    list_responses_for_user,
    load_definition,
    load_response,
    save_definition,
    save_response,
    utcnow,
)

logging.basicConfig(level=LOG_LEVEL, format="[%(levelname)s] %(name)s: %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="Assessment Scoring API")

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Schemas ----
class DimensionIn(BaseModel):
    dimensionId: str
    name: str
    description: str = ""
    itemIds: list[str] = Field(default_factory=list)


class ItemIn(BaseModel):
    itemId: str
    dimensionId: str
    text: str = ""
    isReversed: bool = False
    weight: float = 1.0
    minValue: float = 1
    maxValue: float = 5


class DefinitionIn(BaseModel):
    assessmentId: str
    title: str
    description: str = ""
    dimensions: list[DimensionIn]
    items: list[ItemIn]


class AnswerIn(BaseModel):
    itemId: str
    value: float | None = None
    answeredAt: datetime | None = None


class MetadataIn(BaseModel):
    startedAt: datetime | None = None
    timeSpent: float | None = None  # seconds
    userAgent: str | None = None


class SubmitReq(BaseModel):
    userId: str
    assessmentId: str
    answers: list[AnswerIn]
    metadata: MetadataIn | None = None


class CompareReq(BaseModel):
    responseId1: str
    responseId2: str


# ---- Helpers ----
def _definition_from_req(req: DefinitionIn) -> AssessmentDefinition:
    return AssessmentDefinition(
        id=req.assessmentId,
        title=req.title,
        description=req.description,
        dimensions=tuple(
            Dimension(id=d.dimensionId, name=d.name, description=d.description, item_ids=tuple(d.itemIds))
            for d in req.dimensions
        ),
        items=tuple(
            Item(
                id=it.itemId,
                dimension_id=it.dimensionId,
                text=it.text,
                is_reversed=it.isReversed,
                weight=it.weight,
                min_value=it.minValue,
                max_value=it.maxValue,
            )
            for it in req.items
        ),
    )


def _metadata_from_req(req: MetadataIn | None, request: Request) -> SubmissionMetadata:
    req = req or MetadataIn()
    return SubmissionMetadata(
        started_at=req.startedAt,
        completed_at=utcnow(),
        time_spent=req.timeSpent,
        ip_address=request.client.host if request.client else None,
        user_agent=req.userAgent or request.headers.get("user-agent"),
    )


def _get_response(response_id: str, label: str = "Assessment response") -> AssessmentResponse:
    stored = load_response(response_id)
    if stored is None:
        raise HTTPException(404, f"{label} not found")
    return stored


# ---- Health ----
@app.get("/")
def root():
    return {
        "message": "Assessment Scoring API",
        "status": "running",
        "endpoints": {
            "health": "GET /health",
            "createSample": "POST /api/assessments/sample",
            "createAssessment": "POST /api/assessments",
            "submit": "POST /api/assessments/submit",
            "results": "GET /api/assessments/results/{responseId}",
            "share": "GET /api/assessments/share/{responseId}",
            "compare": "POST /api/assessments/compare",
        },
    }


@app.get("/health")
def health():
    return {"status": "ok", "service": "assessment-scoring-api"}


# ---- Definitions ----
@app.post("/api/assessments/sample")
def create_sample(response: Response):
    existing = load_definition(SAMPLE_ASSESSMENT_ID)
    if existing is not None:
        return {"message": "Sample assessment already exists", "assessmentId": existing.id}
    definition = load_sample(SAMPLE_ASSESSMENT_ID)
    save_definition(definition)
    response.status_code = 201
    return {
        "message": "Sample assessment created successfully",
        "assessmentId": definition.id,
        "itemCount": len(definition.items),
        "dimensionCount": len(definition.dimensions),
    }


@app.post("/api/assessments", status_code=201)
def create_assessment(req: DefinitionIn):
    definition = _definition_from_req(req)
    problems = validate_definition(definition)
    if problems:
        raise HTTPException(422, {"error": "Invalid assessment definition", "problems": problems})
    if load_definition(definition.id) is not None:
        raise HTTPException(409, "Assessment already exists")
    save_definition(definition)
    return {
        "assessmentId": definition.id,
        "itemCount": len(definition.items),
        "dimensionCount": len(definition.dimensions),
    }


# ---- Submission ----
@app.post("/api/assessments/submit", status_code=201)
def submit(req: SubmitReq, request: Request):
    definition = load_definition(req.assessmentId)
    if definition is None:
        raise HTTPException(404, "Assessment not found")

    raw_answers = [Answer(item_id=a.itemId, value=a.value, answered_at=a.answeredAt) for a in req.answers]
    try:
        answers = validate_answers(raw_answers, definition)
    except AnswerValidationError as e:
        raise HTTPException(400, str(e))

    metadata = _metadata_from_req(req.metadata, request)
    scores = score_assessment(definition, answers)
    reliability = check_reliability(definition, answers, metadata)

    stored = AssessmentResponse(
        id=str(uuid.uuid4()),
        user_id=req.userId,
        assessment_id=definition.id,
        answers=answers,
        scores=scores,
        reliability=reliability,
        metadata=metadata,
        created_at=utcnow(),
    )
    save_response(stored)
    log.info(
        "stored response %s for assessment %s rating=%s",
        stored.id, definition.id, reliability.overall_rating,
    )
    return {
        "responseId": stored.id,
        "isUsable": reliability.is_usable,
        "overallRating": reliability.overall_rating,
        "overallScore": scores.overall_score,
        "message": (
            "Assessment completed successfully"
            if reliability.is_usable
            else "Assessment completed but quality concerns detected"
        ),
    }


# ---- Read side ----
@app.get("/api/assessments/results/{response_id}")
def get_results(response_id: str):
    return response_summary(_get_response(response_id))


@app.get("/api/assessments/share/{response_id}")
def get_share_profile(response_id: str, include_percentiles: bool = Query(True)) -> dict[str, t.Any]:
    return generate_share_payload(_get_response(response_id), include_percentiles=include_percentiles)


@app.post("/api/assessments/compare")
def compare(req: CompareReq) -> dict[str, t.Any]:
    first = _get_response(req.responseId1, "First assessment response")
    second = _get_response(req.responseId2, "Second assessment response")
    return generate_compare_payload(first, second)


@app.get("/api/assessments/users/{user_id}/responses")
def list_responses(user_id: str):
    return {"responses": to_basic(list_responses_for_user(user_id))}
