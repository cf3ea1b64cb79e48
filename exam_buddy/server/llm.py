# server/llm.py
# ---------------------------------------------------------
# LLM orchestration for the Exam Buddy backend.
#
# Public helpers used by routes:
#   - make_study_plan_with_llm(planner_input, gateway)
#   - analyze_exam_impact_with_llm(profile, gateway)
#
# Each helper: build prompts -> one gateway call -> normalize.
# Gateway/normalizer errors are relabelled with the message the
# browser should show for that endpoint.
# ---------------------------------------------------------

import logging
from typing import Any, Dict, Type

from .errors import (
    EmptyResponse,
    ExamBuddyError,
    ParseFailure,
    QuotaExhausted,
    RateLimited,
    SchemaViolation,
    UpstreamFailure,
)
from .gateway_client import GatewayClient
from .normalizer import normalize_response
from .plan_checks import check_plan_against_input
from .prompts import build_exam_impact_prompts, build_study_plan_prompts
from .schemas import ExamImpactResult, ExamProfile, PlannerIn, StudyPlan

logger = logging.getLogger(__name__)

# Order matters: subclasses before their bases.
STUDY_PLAN_MESSAGES: Dict[Type[ExamBuddyError], str] = {
    RateLimited: "Rate limit exceeded. Please try again in a moment.",
    QuotaExhausted: "Usage limit reached. Please try again later.",
    UpstreamFailure: "Failed to generate study plan. Please try again.",
    EmptyResponse: "No response from AI",
    ParseFailure: "Failed to parse study plan. Please try again.",
    SchemaViolation: "Study plan did not match the expected format. Please try again.",
}

EXAM_IMPACT_MESSAGES: Dict[Type[ExamBuddyError], str] = {
    RateLimited: "Rate limit exceeded. Please try again later.",
    QuotaExhausted: "Service credits exhausted. Please try again later.",
    UpstreamFailure: "Failed to fetch exam updates",
    EmptyResponse: "No response from AI",
    ParseFailure: "Failed to parse exam updates",
    SchemaViolation: "Exam updates did not match the expected format",
}


def _relabel(exc: ExamBuddyError, messages: Dict[Type[ExamBuddyError], str]) -> None:
    for kind, text in messages.items():
        if isinstance(exc, kind):
            exc.message = text
            return


# -------------------------------------------------------------------
# /study-planner
# -------------------------------------------------------------------

def make_study_plan_with_llm(planner_input: PlannerIn, gateway: GatewayClient) -> Dict[str, Any]:
    """
    Ask the model for a week-by-week plan and check it fits the request.

    Parse and shape failures keep `raw` so the browser can show what the
    model actually said.
    """
    system_prompt, user_prompt = build_study_plan_prompts(planner_input)

    try:
        content = gateway.complete(
            gateway.settings.study_planner_model, system_prompt, user_prompt
        )
        plan = normalize_response(content, StudyPlan)

        problems = check_plan_against_input(plan, planner_input)
        if problems:
            logger.error(
                "Study plan does not fit the request: %s\nRaw: %s",
                "; ".join(problems),
                content,
            )
            raise SchemaViolation(
                "Study plan does not fit the request",
                raw=content,
                problems=problems,
            )
    except ExamBuddyError as exc:
        _relabel(exc, STUDY_PLAN_MESSAGES)
        raise

    return plan


# -------------------------------------------------------------------
# /exam-impact
# -------------------------------------------------------------------

def analyze_exam_impact_with_llm(profile: ExamProfile, gateway: GatewayClient) -> Dict[str, Any]:
    """Generate profile-specific exam notices; returned verbatim on success."""
    system_prompt, user_prompt = build_exam_impact_prompts(profile)

    try:
        content = gateway.complete(
            gateway.settings.exam_impact_model, system_prompt, user_prompt
        )
        return normalize_response(content, ExamImpactResult)
    except ExamBuddyError as exc:
        _relabel(exc, EXAM_IMPACT_MESSAGES)
        # raw output is logged by the normalizer; this endpoint never echoes it
        exc.raw = None
        raise
