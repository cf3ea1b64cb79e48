# server/prompts.py
# ---------------------------------------------------------
# Prompt templates for the two LLM-backed endpoints.
#
# Everything here is a pure string transform: no network, no clock,
# no randomness. Same input -> byte-identical prompts.
#
#   - build_study_plan_prompts(planner_input)  -> (system, user)
#   - build_exam_impact_prompts(profile)       -> (system, user)
# ---------------------------------------------------------

import math
from typing import Tuple

from .schemas import ExamProfile, PlannerIn

SEARCH_KEYWORDS = "exam news updates notifications syllabus pattern changes dates schedule"


# -------------------------------------------------------------------
# /study-planner
# -------------------------------------------------------------------

STUDY_PLAN_SYSTEM_PROMPT = """You are an expert academic planner with 20+ years of experience helping students prepare for exams. Create effective, realistic study schedules.

CRITICAL RULES:
1. Distribute subjects evenly across available days
2. Allocate more time to complex/difficult topics
3. Include revision days (at least 20% of total time)
4. Never schedule more than the daily hours limit
5. Consider topic dependencies - basics before advanced
6. Include short breaks between subjects
7. Leave the last 1-2 days purely for revision
8. Mix heavy and light subjects each day
9. Prioritize topics the student listed first (assume higher importance)

OUTPUT FORMAT (STRICT JSON):
Return ONLY valid JSON with this exact structure:
{
  "weeks": [
    {
      "weekNumber": 1,
      "startDate": "YYYY-MM-DD",
      "endDate": "YYYY-MM-DD",
      "days": [
        {
          "date": "YYYY-MM-DD",
          "dayName": "Monday",
          "sessions": [
            {
              "subject": "Subject Name",
              "topic": "Specific Topic",
              "duration": 2,
              "type": "study" | "revision" | "practice"
            }
          ],
          "totalHours": 4
        }
      ]
    }
  ],
  "summary": {
    "totalStudyDays": 14,
    "revisionDays": 3,
    "subjectHours": { "Subject1": 20, "Subject2": 15 }
  },
  "tips": ["Tip 1", "Tip 2", "Tip 3"]
}

Each day's "totalHours" must equal the sum of its session durations.
Do NOT include any text before or after the JSON. Return ONLY the JSON object."""


def _subject_lines(planner_input: PlannerIn) -> str:
    lines = []
    for subject in planner_input.subjects:
        topics = ", ".join(subject.topics) if subject.topics else "All topics"
        lines.append(f"- {subject.name}: {topics}")
    return "\n".join(lines)


def build_study_plan_user_prompt(planner_input: PlannerIn) -> str:
    days = planner_input.daysLeft or 0
    weeks = math.ceil(days / 7)
    return (
        "Create a study plan with these details:\n\n"
        f"EXAM: {planner_input.examName}\n"
        f"DAYS LEFT: {days} days\n"
        f"DAILY STUDY HOURS: {planner_input.dailyHours} hours\n"
        f"START DATE: {planner_input.startDate}\n\n"
        "SUBJECTS AND TOPICS:\n"
        f"{_subject_lines(planner_input)}\n\n"
        f"Cover exactly {days} consecutive days starting on {planner_input.startDate}, "
        f"grouped into {weeks} week(s) of 7 days (the last week may be shorter). "
        f"No day may exceed {planner_input.dailyHours} hours.\n\n"
        "Generate a complete day-by-day study schedule organized by weeks. "
        "Make it realistic and effective."
    )


def build_study_plan_prompts(planner_input: PlannerIn) -> Tuple[str, str]:
    return STUDY_PLAN_SYSTEM_PROMPT, build_study_plan_user_prompt(planner_input)


# -------------------------------------------------------------------
# /exam-impact
# -------------------------------------------------------------------

EXAM_IMPACT_SCHEMA = """{
  "notices": [
    {
      "id": "unique-id",
      "title": "Notice title",
      "summary": "Brief summary of the notice (2-3 sentences)",
      "source": "Source name (e.g., NTA, CBSE, State Board)",
      "sourceUrl": "https://example.com/notice",
      "date": "2025-02-01",
      "priority": "urgent" | "important" | "info",
      "impactScore": 1-10,
      "impactAnalysis": "How this specifically affects the candidate",
      "actionItems": ["Action 1", "Action 2"],
      "affectedSubjects": ["Subject1", "Subject2"] or [],
      "category": "syllabus" | "schedule" | "pattern" | "eligibility" | "result" | "general"
    }
  ],
  "lastUpdated": "ISO date string",
  "profileSummary": "Brief summary of the candidate's exam situation"
}"""


def subjects_context(profile: ExamProfile) -> str:
    return ", ".join(profile.subjects) if profile.subjects else "all subjects"


def build_search_context(profile: ExamProfile) -> str:
    """Profile fields that are set, followed by generic news keywords."""
    parts = [profile.examName, profile.attemptYear, profile.state, profile.board]
    parts = [p.strip() for p in parts if p and p.strip()]
    parts.append(SEARCH_KEYWORDS)
    return " ".join(parts)


def build_exam_impact_system_prompt(profile: ExamProfile) -> str:
    return (
        "You are an expert exam news analyst for Indian competitive exams and board exams. "
        "Your task is to:\n\n"
        "1. Search for the latest news, updates, and official notifications related to "
        "the candidate's exam\n"
        "2. Analyze each news item and determine its impact on the specific candidate\n"
        "3. Categorize news by priority (urgent, important, info)\n"
        "4. Provide actionable insights\n\n"
        "Candidate Profile:\n"
        f"- Exam: {profile.examName}\n"
        f"- Attempt Year: {profile.attemptYear}\n"
        f"- State/Region: {profile.state}\n"
        f"- Board/University: {profile.board}\n"
        f"- Subjects: {subjects_context(profile)}\n\n"
        "Return a JSON object with the following structure:\n"
        f"{EXAM_IMPACT_SCHEMA}\n\n"
        "Generate 4-8 realistic and relevant notices based on current exam trends and "
        "typical announcements for this exam type. Make them realistic and helpful for "
        "exam preparation. Return ONLY the JSON object."
    )


def build_exam_impact_user_prompt(profile: ExamProfile) -> str:
    return (
        f"Find the latest exam news and updates for: {build_search_context(profile)}. "
        f"Subjects: {subjects_context(profile)}. "
        "Analyze the impact on my profile and return the structured JSON response."
    )


def build_exam_impact_prompts(profile: ExamProfile) -> Tuple[str, str]:
    return build_exam_impact_system_prompt(profile), build_exam_impact_user_prompt(profile)
