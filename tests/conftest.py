import json
from datetime import date, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from exam_buddy.server.app import app, get_gateway, get_settings
from exam_buddy.server.config import Settings
from exam_buddy.server.gateway_client import GatewayClient


@pytest.fixture
def settings():
    return Settings(api_key="test-key-123456", base_url="https://gateway.test/v1")


def chat_response(content, status_code=200):
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
    )


@pytest.fixture
def chat():
    return chat_response


@pytest.fixture
def make_plan():
    """Build a plan that satisfies every check for the given request shape."""

    def _make(start="2025-03-03", days=10, hours=4):
        first = date.fromisoformat(start)
        all_days = []
        for i in range(days):
            d = first + timedelta(days=i)
            sessions = [
                {"subject": "Physics", "topic": "Kinematics", "duration": hours / 2, "type": "study"},
                {"subject": "Maths", "topic": "Calculus", "duration": hours / 2, "type": "practice"},
            ]
            all_days.append(
                {
                    "date": d.isoformat(),
                    "dayName": d.strftime("%A"),
                    "sessions": sessions,
                    "totalHours": hours,
                }
            )
        weeks = []
        for n, i in enumerate(range(0, days, 7), start=1):
            chunk = all_days[i:i + 7]
            weeks.append(
                {
                    "weekNumber": n,
                    "startDate": chunk[0]["date"],
                    "endDate": chunk[-1]["date"],
                    "days": chunk,
                }
            )
        return {
            "weeks": weeks,
            "summary": {
                "totalStudyDays": days - 1,
                "revisionDays": 1,
                "subjectHours": {"Physics": days * hours / 2, "Maths": days * hours / 2},
            },
            "tips": ["Sleep well", "Revise daily"],
        }

    return _make


@pytest.fixture
def impact_result():
    return {
        "notices": [
            {
                "id": "n1",
                "title": "Syllabus reduced for Physics",
                "summary": "Two chapters were removed.",
                "source": "NTA",
                "sourceUrl": "https://nta.example/notice",
                "date": "2025-02-01",
                "priority": "urgent",
                "impactScore": 9,
                "impactAnalysis": "You can drop two chapters.",
                "actionItems": ["Update your plan"],
                "affectedSubjects": ["Physics"],
                "category": "syllabus",
            }
        ],
        "lastUpdated": "2025-02-02T10:00:00Z",
        "profileSummary": "JEE Main 2025 aspirant from Karnataka.",
    }


@pytest.fixture
def gateway_calls():
    return []


@pytest.fixture
def client(settings, gateway_calls):
    """
    TestClient whose gateway answers through a swappable handler.

    Set `client.gateway_handler = fn(request) -> httpx.Response` in a test.
    """
    test_client = TestClient(app)
    test_client.gateway_handler = lambda request: chat_response("{}")

    def handler(request):
        gateway_calls.append(json.loads(request.content))
        return test_client.gateway_handler(request)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_gateway] = lambda: GatewayClient(
        settings, transport=httpx.MockTransport(handler)
    )
    yield test_client
    app.dependency_overrides.clear()
