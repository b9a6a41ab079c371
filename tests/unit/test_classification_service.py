"""
Unit Tests: Gateway Classification Service

Covers the rule-guided classification tier against a mocked HTTP client:
- Request payload (model, temperature, prompt contents)
- Response parsing (code fences, steady, unknown types, bad indices)
- Fail-open handling of timeouts, transport errors and non-2xx responses
- End-to-end pass through CheckTrajectoryUseCase
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock

from coachpath.application.dto import CheckTrajectoryDTO, MessageDTO, TrajectoryRuleDTO
from coachpath.application.use_cases import CheckTrajectoryUseCase
from coachpath.domain.entities import Message
from coachpath.domain.services import HeuristicAnalysisService
from coachpath.domain.value_objects import (
    IndicatorType,
    Matched,
    NoMatch,
    ServiceUnavailable,
    SpeakerRole,
    TrajectoryRule,
    snapshot_rules,
)
from coachpath.infrastructure.external_services import GatewayClassificationService


RULES = snapshot_rules([
    TrajectoryRule(
        stage="awareness",
        indicator_type=IndicatorType.DRIFT,
        pattern="Keeps describing the conflict without naming feelings",
        message="What feeling sits underneath this?"
    ),
    TrajectoryRule(
        stage="action",
        indicator_type=IndicatorType.LEAP,
        pattern="Jumps to life-changing decisions overnight",
        message="What small step could come first?"
    ),
    TrajectoryRule(
        stage="action",
        indicator_type=IndicatorType.STALL,
        pattern="Talks about plans but reports no attempts",
        message="What got in the way this week?"
    ),
])

MESSAGES = [
    Message(role=SpeakerRole.AGENT, content="How did the week go?"),
    Message(role=SpeakerRole.SEEKER, content="I keep saying I'll update my CV but haven't."),
]


def completion(content, status_code=200):
    """Build a mocked chat-completions response"""
    response = Mock()
    response.status_code = status_code
    response.json = Mock(return_value={"choices": [{"message": {"content": content}}]})
    return response


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient"""
    client = AsyncMock()
    client.post = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def service(mock_http_client):
    """GatewayClassificationService with mocked HTTP client"""
    return GatewayClassificationService(
        api_key="test_gateway_key",
        base_url="https://gateway.test/v1",
        model="google/gemini-2.5-flash",
        client=mock_http_client
    )


# ============================================================================
# CONFIGURATION TESTS
# ============================================================================

def test_service_available_with_key(service):
    assert service.is_available is True


def test_service_unavailable_without_key():
    """
    Test: no API key means no client and no availability
    """
    service = GatewayClassificationService(
        api_key=None,
        base_url="https://gateway.test/v1",
        model="google/gemini-2.5-flash"
    )

    assert service.client is None
    assert service.is_available is False


@pytest.mark.asyncio
async def test_classify_without_key_returns_unavailable():
    service = GatewayClassificationService(
        api_key="",
        base_url="https://gateway.test/v1",
        model="google/gemini-2.5-flash"
    )

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)


@pytest.mark.asyncio
async def test_client_created_with_bearer_auth():
    service = GatewayClassificationService(
        api_key="secret",
        base_url="https://gateway.test/v1",
        model="google/gemini-2.5-flash",
        timeout=8.0
    )

    try:
        assert isinstance(service.client, httpx.AsyncClient)
        assert service.client.headers["Authorization"] == "Bearer secret"
        assert str(service.client.base_url).startswith("https://gateway.test/v1")
    finally:
        await service.close()


# ============================================================================
# REQUEST TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_request_payload(service, mock_http_client):
    """
    Test: one POST with model, temperature and enumerated rules in the prompt
    """
    mock_http_client.post.return_value = completion(
        '{"indicator_type": "steady", "matched_rule_index": null, "reason": "fine"}'
    )
    messages = [
        Message(
            role=SpeakerRole.SEEKER,
            content="I keep saying I'll update my CV but haven't.",
            created_at=None
        ),
    ]

    await service.classify(messages, RULES)

    mock_http_client.post.assert_awaited_once()
    args, kwargs = mock_http_client.post.await_args
    payload = kwargs["json"]

    assert args[0] == "/chat/completions"
    assert payload["model"] == "google/gemini-2.5-flash"
    assert payload["temperature"] == 0.3
    assert payload["messages"][0] == {
        "role": "system",
        "content": "You are a trajectory analysis expert. Respond only with valid JSON.",
    }

    prompt = payload["messages"][1]["content"]
    assert payload["messages"][1]["role"] == "user"
    assert json.dumps([{"role": "seeker", "content": messages[0].content}]) in prompt
    assert '"index": 2' in prompt
    assert "Talks about plans but reports no attempts" in prompt
    assert "created_at" not in prompt


# ============================================================================
# RESPONSE PARSING TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_matched_rule_index(service, mock_http_client):
    """
    Test: a stall on rule 2 resolves to that rule's snapshot
    """
    mock_http_client.post.return_value = completion(
        '{"indicator_type": "stall", "matched_rule_index": 2, "reason": "Plans without attempts"}'
    )

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, Matched)
    assert outcome.matched is True
    assert outcome.indicator_type == IndicatorType.STALL
    assert outcome.rule == RULES[2]
    assert outcome.reason == "Plans without attempts"


@pytest.mark.asyncio
async def test_code_fenced_json_is_accepted(service, mock_http_client):
    mock_http_client.post.return_value = completion(
        '```json\n{"indicator_type": "leap", "matched_rule_index": 1, "reason": "Big jump"}\n```'
    )

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, Matched)
    assert outcome.indicator_type == IndicatorType.LEAP
    assert outcome.rule.index == 1


@pytest.mark.asyncio
async def test_steady_is_no_match(service, mock_http_client):
    mock_http_client.post.return_value = completion(
        '{"indicator_type": "steady", "matched_rule_index": null, "reason": "no rule matched"}'
    )

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, NoMatch)
    assert outcome.matched is False
    assert outcome.reason == "no rule matched"


@pytest.mark.parametrize("raw_index", [None, 3, -1, "two", "3", True, 1.0])
def test_unusable_rule_index_matches_without_rule(service, raw_index):
    """
    Test: null, out-of-range and non-integer indices keep the type but drop the rule
    """
    content = json.dumps({"indicator_type": "drift", "matched_rule_index": raw_index, "reason": "r"})

    outcome = service.parse_response(content, RULES)

    assert isinstance(outcome, Matched)
    assert outcome.indicator_type == IndicatorType.DRIFT
    assert outcome.rule is None


@pytest.mark.parametrize("raw_index", ["2", " 2 "])
def test_integer_string_rule_index_resolves(service, raw_index):
    """
    Test: an index reported as a string still resolves to that rule
    """
    content = json.dumps({"indicator_type": "stall", "matched_rule_index": raw_index, "reason": "r"})

    outcome = service.parse_response(content, RULES)

    assert isinstance(outcome, Matched)
    assert outcome.rule == RULES[2]


@pytest.mark.parametrize("content", [
    "Sorry, I can't help with that.",
    '{"indicator_type": "drift"',
    '["drift", 0]',
])
def test_unparseable_content_is_no_match(service, content):
    outcome = service.parse_response(content, RULES)

    assert isinstance(outcome, NoMatch)
    assert outcome.reason == "unparseable classification response"


def test_deeply_nested_content_is_no_match(service):
    """
    Test: nesting deep enough to exhaust the decoder is a plain non-match
    """
    content = "[" * 100000 + "]" * 100000

    outcome = service.parse_response(content, RULES)

    assert isinstance(outcome, NoMatch)
    assert outcome.reason == "unparseable classification response"


@pytest.mark.asyncio
async def test_deeply_nested_reply_through_classify(service, mock_http_client):
    mock_http_client.post.return_value = completion("[" * 100000 + "]" * 100000)

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, NoMatch)


def test_unknown_indicator_type_is_no_match(service):
    outcome = service.parse_response(
        '{"indicator_type": "regress", "matched_rule_index": 0, "reason": "went backwards"}',
        RULES
    )

    assert isinstance(outcome, NoMatch)


def test_indicator_type_is_case_insensitive(service):
    outcome = service.parse_response('{"indicator_type": " Drift ", "matched_rule_index": 0}', RULES)

    assert isinstance(outcome, Matched)
    assert outcome.rule == RULES[0]
    assert outcome.reason == ""


# ============================================================================
# FAIL-OPEN TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_http_error_status_is_unavailable(service, mock_http_client):
    mock_http_client.post.return_value = completion("", status_code=500)

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)
    assert "HTTP 500" in outcome.reason


@pytest.mark.asyncio
async def test_timeout_is_unavailable(service, mock_http_client):
    """
    Test: a timeout is reported once, with no retry
    """
    mock_http_client.post.side_effect = httpx.ReadTimeout("timed out")

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)
    assert "request timed out" in outcome.reason
    assert mock_http_client.post.await_count == 1


@pytest.mark.asyncio
async def test_transport_error_is_unavailable(service, mock_http_client):
    mock_http_client.post.side_effect = httpx.ConnectError("connection refused")

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)
    assert "connection refused" in outcome.reason


@pytest.mark.asyncio
async def test_empty_choices_is_unavailable(service, mock_http_client):
    response = completion("")
    response.json = Mock(return_value={"choices": []})
    mock_http_client.post.return_value = response

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)
    assert "empty completion" in outcome.reason


@pytest.mark.asyncio
async def test_non_json_body_is_unavailable(service, mock_http_client):
    response = completion("")
    response.json = Mock(side_effect=ValueError("Expecting value"))
    mock_http_client.post.return_value = response

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)


@pytest.mark.asyncio
async def test_deeply_nested_body_is_unavailable(service, mock_http_client):
    response = completion("")
    response.json = Mock(side_effect=RecursionError("maximum recursion depth exceeded"))
    mock_http_client.post.return_value = response

    outcome = await service.classify(MESSAGES, RULES)

    assert isinstance(outcome, ServiceUnavailable)
    assert "not JSON" in outcome.reason


@pytest.mark.asyncio
async def test_close_closes_client(service, mock_http_client):
    await service.close()

    mock_http_client.aclose.assert_awaited_once()


# ============================================================================
# END-TO-END TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_rule_match_flows_into_persisted_indicator(service, mock_http_client):
    """
    Test: heuristics find nothing, the gateway matches rule 2, one row is stored
    """
    mock_http_client.post.return_value = completion(
        '{"indicator_type":"stall","matched_rule_index":2,"reason":"Talks about CV without attempts"}'
    )
    repository = AsyncMock()
    repository.create = AsyncMock(side_effect=lambda indicator: indicator)
    use_case = CheckTrajectoryUseCase(
        indicator_repository=repository,
        classification_service=service,
        heuristic_service=HeuristicAnalysisService()
    )
    request = CheckTrajectoryDTO(
        session_id="session-42",
        recent_messages=[
            MessageDTO(role="seeker", content="I have been thinking about my relationship with my brother lately."),
            MessageDTO(role="agent", content="What did you notice?"),
            MessageDTO(role="seeker", content="We talked on the phone yesterday and it went better than expected."),
            MessageDTO(role="seeker", content="I am going to call him again this weekend to follow up properly."),
        ],
        trajectory_rules=[
            TrajectoryRuleDTO(
                stage=rule.rule.stage,
                indicator_type=rule.rule.indicator_type.value,
                pattern=rule.pattern,
                message=rule.message
            )
            for rule in RULES
        ]
    )

    result = await use_case.execute(request)

    assert result.matched is True
    assert result.indicator.type == "stall"
    assert result.indicator.detail == {
        "rule_index": 2,
        "message": "What got in the way this week?",
        "reason": "Talks about CV without attempts",
        "pattern": "Talks about plans but reports no attempts",
    }
    repository.create.assert_awaited_once()
