"""
SickoHoops API - FastAPI backend for NBA quiz generation.

Provides REST endpoints for:
- Generating a quiz from a free-text topic
- Suggested topics by difficulty level
- Health checks
"""

import logging
import time
from http import HTTPStatus
from typing import Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from sickohoops import __version__
from sickohoops.config import API_HOST, API_PORT, DEBUG, DEFAULT_TIME_LIMIT, LOG_LEVEL
from sickohoops.errors import EmptyResultError, SourceUnavailableError
from sickohoops.intent.classifier import classify_topic
from sickohoops.llm.prompts import QUIZ_PROMPTS, random_prompt
from sickohoops.sources.resolver import DataSourceResolver, build_default_resolver

logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response
# =============================================================================

class GenerateQuizRequest(BaseModel):
    """Request body for quiz generation."""
    topic: Optional[str] = Field(default=None, description="Quiz topic", max_length=500)
    maxQuestions: Optional[int] = Field(default=None, description="Cap on generated answers", ge=1, le=200)
    timeLimit: Optional[int] = Field(default=None, description="Time limit in seconds", ge=1)

    class Config:
        json_schema_extra = {
            "example": {
                "topic": "Top 5 leaders in points per game each year from 2020 to 2022",
                "maxQuestions": 100,
            }
        }


class AnswerModel(BaseModel):
    """One quiz answer."""
    points: Union[int, float]
    player: str
    team: str
    year: str


class QuizResponse(BaseModel):
    """A generated quiz."""
    title: str
    description: str
    answers: list[AnswerModel]
    timeLimit: int


class ErrorResponse(BaseModel):
    """Failure body shared by every error status."""
    error: str
    message: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    strategies: list[str]
    generative_providers: int


class PromptResponse(BaseModel):
    """A suggested quiz topic."""
    level: int
    topic: str


# =============================================================================
# Application Setup
# =============================================================================

app = FastAPI(
    title="SickoHoops API",
    description="""
    Generate NBA trivia quizzes from a free-text topic.

    Topics are resolved through, in order:
    - Curated answer tables for a few well-known lists
    - Live stats.nba.com league leaders (points per game by season)
    - Generative providers (OpenAI, then Anthropic)
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global resolver instance (initialized on startup)
resolver: Optional[DataSourceResolver] = None


# =============================================================================
# Startup/Shutdown Events
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Build the resolver chain on startup."""
    global resolver

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    resolver = build_default_resolver()
    logger.info(f"SickoHoops API ready with {len(resolver.strategies)} strategies")


@app.on_event("shutdown")
async def shutdown_event():
    global resolver
    resolver = None
    logger.info("SickoHoops API shutdown complete")


# =============================================================================
# Helper Functions
# =============================================================================

def get_resolver() -> DataSourceResolver:
    """Get the resolver instance or raise an error."""
    if resolver is None:
        raise HTTPException(
            status_code=503,
            detail="Quiz resolver not initialized. Check server logs.",
        )
    return resolver


def error_response(status_code: int, error: str, message: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def describe_validation_errors(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into 'field: message' pairs."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        parts.append(f"{field or 'body'}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    # A missing JSON body means no topic was sent at all
    if any(tuple(err.get("loc", ())) == ("body",) and err.get("type") == "missing" for err in exc.errors()):
        return error_response(400, "TopicRequired", "Topic is required")
    return error_response(400, "InvalidRequest", "Invalid request parameters", describe_validation_errors(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        error = HTTPStatus(exc.status_code).phrase.replace(" ", "").replace("-", "")
    except ValueError:
        error = "HTTPError"
    message = exc.detail if isinstance(exc.detail, str) else error
    return error_response(exc.status_code, error, message)


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "SickoHoops API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse, tags=["Info"])
async def health_check(r: DataSourceResolver = Depends(get_resolver)):
    """Report the configured strategy chain."""
    names = [s.name for s in r.strategies]
    generative = sum(1 for name in names if name.startswith("generative_"))
    return HealthResponse(
        status="healthy" if generative else "degraded",
        strategies=names,
        generative_providers=generative,
    )


@app.post(
    "/api/generate-quiz",
    response_model=QuizResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    tags=["Quiz"],
)
def generate_quiz(request: GenerateQuizRequest, r: DataSourceResolver = Depends(get_resolver)):
    """
    Generate a quiz for a topic.

    Errors:
    - 400 TopicRequired: topic missing or blank
    - 503 SourceUnavailable: every data source failed
    - 500 EmptyResult: sources answered but found nothing; refine the topic
    """
    topic = (request.topic or "").strip()
    if not topic:
        return error_response(400, "TopicRequired", "Topic is required")

    start_time = time.time()
    intent = classify_topic(topic)
    logger.info(f"Generating quiz for '{topic}' ({intent.stat_category.value}, rule={intent.rule})")

    try:
        payload = r.resolve(
            intent,
            topic,
            time_limit=request.timeLimit or DEFAULT_TIME_LIMIT,
            max_questions=request.maxQuestions,
        )
    except SourceUnavailableError as e:
        return error_response(503, e.code, e.message, e.details)
    except EmptyResultError as e:
        return error_response(500, e.code, e.message, e.details)

    elapsed_ms = (time.time() - start_time) * 1000
    logger.info(f"Quiz from {payload.source}: {len(payload.answers)} answers in {elapsed_ms:.0f}ms")
    return payload.to_dict()


@app.get("/prompts/random", response_model=PromptResponse, tags=["Quiz"])
async def get_random_prompt(
    level: int = Query(default=3, description="Sicko level", ge=min(QUIZ_PROMPTS), le=max(QUIZ_PROMPTS)),
):
    """
    Suggest a quiz topic.

    Example: /prompts/random?level=5
    """
    return PromptResponse(level=level, topic=random_prompt(level))


# =============================================================================
# Run with Uvicorn
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    print(f"Starting SickoHoops API on {API_HOST}:{API_PORT}")
    print(f"Documentation: http://localhost:{API_PORT}/docs")

    uvicorn.run(
        "sickohoops.api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=DEBUG,
    )
