"""
Tests for the Twilio webhook endpoints.

These tests verify that:
1. POST /twiml returns the greeting with gathers to /choice
2. POST /choice branches on SpeechResult and gathers to /practice
3. POST /practice always acknowledges and gathers to /choice
4. Missing fields default to an empty transcript, never an error
5. GET / and GET /health respond
"""

import xml.etree.ElementTree as ET

import pytest
from httpx import ASGITransport, AsyncClient

from callready import __version__
from callready.config import Settings
from callready.main import app, create_app
from callready.script import (
    GREETING_TEXT,
    NO_INPUT_TEXT,
    PRACTICE_TEXT,
    SCENARIO_TEXTS,
    ScenarioChoice,
)


@pytest.fixture
async def client():
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _parse(text: str) -> ET.Element:
    return ET.fromstring(text.encode("utf-8"))


def _gathers(root: ET.Element):
    return root.findall("Gather")


class TestGreetingWebhook:
    """Tests for POST /twiml"""

    @pytest.mark.asyncio
    async def test_empty_body_returns_greeting(self, client: AsyncClient):
        response = await client.post("/twiml")

        assert response.status_code == 200
        assert "application/xml" in response.headers["content-type"]

        root = _parse(response.text)
        assert root.find("Say").text == GREETING_TEXT

        gathers = _gathers(root)
        assert len(gathers) == 2
        for g in gathers:
            assert g.get("action") == "/choice"
            assert g.get("timeout") == "6"
            assert g.get("input") == "speech dtmf"
            assert g.get("method") == "POST"

    @pytest.mark.asyncio
    async def test_ignores_speech(self, client: AsyncClient):
        response = await client.post("/twiml", data={"SpeechResult": "doctor"})

        assert response.status_code == 200
        assert _parse(response.text).find("Say").text == GREETING_TEXT

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, client: AsyncClient):
        response = await client.get("/twiml")
        assert response.status_code == 405


class TestChoiceWebhook:
    """Tests for POST /choice"""

    @pytest.mark.asyncio
    async def test_doctor_branch_case_insensitive(self, client: AsyncClient):
        response = await client.post("/choice", data={"SpeechResult": "I want to call my Doctor"})

        assert response.status_code == 200
        root = _parse(response.text)
        assert root.find("Say").text == SCENARIO_TEXTS[ScenarioChoice.DOCTOR_APPOINTMENT]

        gathers = _gathers(root)
        assert len(gathers) == 2
        for g in gathers:
            assert g.get("action") == "/practice"
            assert g.get("timeout") == "10"
            assert g.get("input") == "speech"

    @pytest.mark.asyncio
    async def test_operator_choice_branch(self, client: AsyncClient):
        response = await client.post("/choice", data={"SpeechResult": "you decide for me"})

        text = _parse(response.text).find("Say").text
        assert text == SCENARIO_TEXTS[ScenarioChoice.OPERATOR_CHOICE]
        assert text != SCENARIO_TEXTS[ScenarioChoice.DOCTOR_APPOINTMENT]

    @pytest.mark.asyncio
    async def test_empty_speech_is_general(self, client: AsyncClient):
        response = await client.post("/choice", data={"SpeechResult": ""})

        assert response.status_code == 200
        assert _parse(response.text).find("Say").text == SCENARIO_TEXTS[ScenarioChoice.GENERAL]

    @pytest.mark.asyncio
    async def test_missing_speech_is_general(self, client: AsyncClient):
        response = await client.post("/choice")

        assert response.status_code == 200
        assert _parse(response.text).find("Say").text == SCENARIO_TEXTS[ScenarioChoice.GENERAL]

    @pytest.mark.asyncio
    async def test_digits_accepted_but_ignored(self, client: AsyncClient):
        response = await client.post("/choice", data={"Digits": "1"})

        assert response.status_code == 200
        assert _parse(response.text).find("Say").text == SCENARIO_TEXTS[ScenarioChoice.GENERAL]

    @pytest.mark.asyncio
    async def test_fallback_prompt_present(self, client: AsyncClient):
        response = await client.post("/choice", data={"SpeechResult": "doctor"})

        says = _parse(response.text).findall("Say")
        assert len(says) == 2
        assert says[1].text == NO_INPUT_TEXT


class TestPracticeWebhook:
    """Tests for POST /practice"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("speech", ["", "Hi, I'd like to book a checkup", "<b>&</b>", "restart"])
    async def test_same_acknowledgment(self, client: AsyncClient, speech):
        response = await client.post("/practice", data={"SpeechResult": speech})

        assert response.status_code == 200
        root = _parse(response.text)
        assert root.find("Say").text == PRACTICE_TEXT

        for g in _gathers(root):
            assert g.get("action") == "/choice"


class TestOperationalEndpoints:
    """Tests for GET / and GET /health"""

    @pytest.mark.asyncio
    async def test_index(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.text == "CallReady server up"

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "version": __version__}


class TestCreateApp:
    """Tests for create_app()"""

    @pytest.mark.asyncio
    async def test_settings_voice_used(self):
        custom = create_app(Settings(voice="Polly.Matthew"))
        transport = ASGITransport(app=custom)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/twiml")

        assert 'voice="Polly.Matthew"' in response.text
        assert custom.state.settings.voice == "Polly.Matthew"
