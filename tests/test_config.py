import pytest

from exam_buddy.server.config import DEFAULT_GATEWAY_URL, Settings, load_settings
from exam_buddy.server.errors import ConfigurationError

ENV_VARS = [
    "LLM_GATEWAY_API_KEY",
    "LOVABLE_API_KEY",
    "LLM_GATEWAY_URL",
    "EXAM_IMPACT_MODEL",
    "STUDY_PLANNER_MODEL",
    "LLM_TEMPERATURE",
    "LLM_TIMEOUT_SECONDS",
    "LLM_TRANSPORT_RETRIES",
    "LLM_RETRY_BACKOFF_SECONDS",
    "EXAM_BUDDY_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = load_settings(load_env=False)
    assert cfg.api_key is None
    assert cfg.base_url == DEFAULT_GATEWAY_URL
    assert cfg.temperature == 0.7
    assert cfg.transport_retries == 0
    assert cfg.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("LLM_GATEWAY_API_KEY", "sk-abcdefghijk")
    monkeypatch.setenv("LLM_GATEWAY_URL", "http://localhost:9000/v1/")
    monkeypatch.setenv("STUDY_PLANNER_MODEL", "local/planner")
    monkeypatch.setenv("LLM_TRANSPORT_RETRIES", "2")
    monkeypatch.setenv("EXAM_BUDDY_LOG_LEVEL", "debug")

    cfg = load_settings(load_env=False)

    assert cfg.api_key == "sk-abcdefghijk"
    assert cfg.base_url == "http://localhost:9000/v1"
    assert cfg.study_planner_model == "local/planner"
    assert cfg.transport_retries == 2
    assert cfg.log_level == "DEBUG"


def test_lovable_key_is_a_fallback(monkeypatch):
    monkeypatch.setenv("LOVABLE_API_KEY", "lovable-key")
    assert load_settings(load_env=False).api_key == "lovable-key"


@pytest.mark.parametrize(
    "name, value",
    [("LLM_TIMEOUT_SECONDS", "soon"), ("LLM_TRANSPORT_RETRIES", "-1"), ("LLM_TEMPERATURE", "hot")],
)
def test_bad_numbers_fail_fast(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError) as info:
        load_settings(load_env=False)
    assert name in info.value.detail


def test_key_prefix_never_shows_full_key():
    assert Settings(api_key="sk-abcdefghijk").key_prefix == "sk-abcde..."
    assert Settings(api_key=None).key_prefix == "(none)"
