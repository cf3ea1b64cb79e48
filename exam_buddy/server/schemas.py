# server/schemas.py
"""
Pydantic schemas for the Exam Buddy backend.

This file defines the structured payloads used by:
- /exam-impact     (ExamImpactIn -> ExamImpactResult)
- /study-planner   (PlannerIn -> StudyPlan)

Request models are lenient on purpose: missing fields fall back to empty
values so the route can answer with its own 400 message. Response models
are strict; they are used to check what the model sent back.
Field names stay camelCase because that is what the browser sends.
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# /exam-impact
# ---------------------------------------------------------------------------

class ExamProfile(BaseModel):
    examName: Optional[str] = None
    attemptYear: str = ""
    state: str = ""
    board: str = ""
    subjects: List[str] = Field(default_factory=list)


class ExamImpactIn(BaseModel):
    profile: Optional[ExamProfile] = None


Priority = Literal["urgent", "important", "info"]
Category = Literal["syllabus", "schedule", "pattern", "eligibility", "result", "general"]


class ExamNotice(BaseModel):
    # models number notices as often as they slug them
    id: Union[str, int]
    title: str
    summary: str
    source: Optional[str] = ""
    sourceUrl: Optional[str] = ""
    # ISO date, e.g. "2025-02-01"
    date: Optional[str] = ""
    priority: Priority
    impactScore: int = Field(..., ge=1, le=10)
    impactAnalysis: Optional[str] = ""
    actionItems: List[str] = Field(default_factory=list)
    affectedSubjects: List[str] = Field(default_factory=list)
    category: Category


class ExamImpactResult(BaseModel):
    notices: List[ExamNotice]
    lastUpdated: str
    profileSummary: str


# ---------------------------------------------------------------------------
# /study-planner
# ---------------------------------------------------------------------------

class SubjectIn(BaseModel):
    name: str = ""
    topics: List[str] = Field(default_factory=list)


class PlannerIn(BaseModel):
    """
    Payload from the planner form.

    The browser strips its local subject ids and sends only {name, topics}.
    startDate is an ISO date; it is normalized by the route before the
    prompt is built.
    """
    examName: Optional[str] = None
    subjects: List[SubjectIn] = Field(default_factory=list)
    daysLeft: Optional[int] = None
    dailyHours: Optional[int] = None
    startDate: Optional[str] = None


SessionType = Literal["study", "revision", "practice"]


class Session(BaseModel):
    subject: str
    topic: str
    # hours
    duration: float = Field(..., ge=0)
    type: SessionType


class Day(BaseModel):
    date: str
    dayName: str
    sessions: List[Session] = Field(default_factory=list)
    totalHours: float = Field(..., ge=0)


class Week(BaseModel):
    weekNumber: int = Field(..., ge=1)
    startDate: str
    endDate: str
    days: List[Day]


class PlanSummary(BaseModel):
    totalStudyDays: int
    revisionDays: int
    subjectHours: Dict[str, float] = Field(default_factory=dict)


class StudyPlan(BaseModel):
    weeks: List[Week]
    summary: PlanSummary
    tips: List[str] = Field(default_factory=list)
