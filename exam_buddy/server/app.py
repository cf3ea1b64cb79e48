# server/app.py
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List

from dateutil import parser as dateparser
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from .config import Settings, load_settings
from .errors import ExamBuddyError, InputValidationError
from .gateway_client import GatewayClient
from .llm import analyze_exam_impact_with_llm, make_study_plan_with_llm
from .schemas import ExamImpactIn, PlannerIn

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

if settings.api_key:
    logger.info("Gateway key prefix: %s", settings.key_prefix)
else:
    logger.warning("No LLM_GATEWAY_API_KEY found; AI endpoints will answer 500.")

app = FastAPI(title="Exam Buddy AI Backend")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, "
        "x-supabase-client-platform, x-supabase-client-platform-version, "
        "x-supabase-client-runtime, x-supabase-client-runtime-version"
    ),
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}

MAX_DAILY_HOURS = 24


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    return settings


def get_gateway(cfg: Settings = Depends(get_settings)) -> GatewayClient:
    return GatewayClient(cfg)


# ---------------------------------------------------------------------------
# CORS + error boundary
# ---------------------------------------------------------------------------


@app.middleware("http")
async def cors_and_errors(request: Request, call_next):
    # Pre-flight: empty body, CORS headers, nothing else.
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = JSONResponse(
            status_code=500,
            content={"error": str(exc) or "Unknown error"},
        )

    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(ExamBuddyError)
async def exam_buddy_error_handler(request: Request, exc: ExamBuddyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s on %s: %s%s",
            type(exc).__name__,
            request.url.path,
            exc.message,
            f" ({exc.detail})" if exc.detail else "",
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for e in exc.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()) if p != "body")
        problems.append(f"{loc or 'body'}: {e.get('msg')}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body: " + "; ".join(problems)},
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


# ---------------------------------------------------------------------------
# /exam-impact
# ---------------------------------------------------------------------------


@app.post("/exam-impact")
def exam_impact(
    payload: ExamImpactIn,
    gateway: GatewayClient = Depends(get_gateway),
) -> Dict[str, Any]:
    profile = payload.profile
    if profile is None or not (profile.examName or "").strip():
        raise InputValidationError("Profile with exam name is required")

    return analyze_exam_impact_with_llm(profile, gateway)


# ---------------------------------------------------------------------------
# /study-planner
# ---------------------------------------------------------------------------


def normalize_start_date(value: str) -> str:
    """Coerce a date-like string into YYYY-MM-DD."""
    try:
        return dateparser.parse(value).strftime("%Y-%m-%d")
    except (ValueError, OverflowError, TypeError):
        raise InputValidationError(f"startDate is not a valid date: {value!r}")


def validate_planner_input(payload: PlannerIn) -> PlannerIn:
    missing: List[str] = []
    if not (payload.examName or "").strip():
        missing.append("examName")
    if not payload.subjects:
        missing.append("subjects")
    if not payload.daysLeft:
        missing.append("daysLeft")
    if not payload.dailyHours:
        missing.append("dailyHours")
    if missing:
        raise InputValidationError("Missing required fields: " + ", ".join(missing))

    if payload.daysLeft < 1:
        raise InputValidationError("daysLeft must be at least 1")
    if not 1 <= payload.dailyHours <= MAX_DAILY_HOURS:
        raise InputValidationError(f"dailyHours must be between 1 and {MAX_DAILY_HOURS}")
    if any(not s.name.strip() for s in payload.subjects):
        raise InputValidationError("Every subject needs a name")

    start = payload.startDate
    start = normalize_start_date(start) if start else date.today().isoformat()
    return payload.model_copy(update={"startDate": start})


@app.post("/study-planner")
def study_planner(
    payload: PlannerIn,
    gateway: GatewayClient = Depends(get_gateway),
) -> Dict[str, Any]:
    planner_input = validate_planner_input(payload)
    return make_study_plan_with_llm(planner_input, gateway)


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
