"""
CallReady - FastAPI application for Twilio voice webhooks.

Twilio POSTs each phase of a practice call to one of three webhooks and
gets back TwiML saying what to speak and which webhook to call next:

    /twiml     greeting, gathers to /choice
    /choice    scenario selection, gathers to /practice
    /practice  practice acknowledgment, gathers to /choice

Every request is handled on its own - no call state is kept between turns.

Python 3.9 compatible.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import PlainTextResponse, Response

from . import __version__
from .config import Settings, configure_logging
from .models import HealthResponse, IncomingTurn
from .script import DialogueScript, DialogueState, select_scenario

logger = logging.getLogger(__name__)

XML_MEDIA_TYPE = "application/xml"


def _twiml_response(twiml: str) -> Response:
    return Response(content=twiml, media_type=XML_MEDIA_TYPE)


def _get_script(request: Request) -> DialogueScript:
    return request.app.state.script


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the webhook application.

    Args:
        settings: Startup settings. Defaults to Settings() when omitted,
            so the app can be built without touching the environment.

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info(f"CallReady webhooks {__version__} listening on {settings.host}:{settings.port}")
        logger.info("POST /twiml, POST /choice, POST /practice")
        logger.info("=" * 60)
        yield
        logger.info("Shutting down CallReady webhooks")

    app = FastAPI(
        title="CallReady",
        description="Twilio webhooks for practicing phone calls",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.script = DialogueScript(voice=settings.voice)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "CallReady server up"

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(ok=True, version=__version__)

    @app.post(DialogueState.GREETING.path)
    async def twilio_greeting(request: Request):
        """
        Twilio voice webhook - called when the call connects.

        Always speaks the same welcome and asks whether the caller wants to
        pick a scenario. No request fields are read.
        """
        logger.info(f"{DialogueState.GREETING.path}: call started")
        return _twiml_response(_get_script(request).respond(DialogueState.GREETING))

    @app.post(DialogueState.SCENARIO_SELECTION.path)
    async def twilio_choice(
        request: Request,
        SpeechResult: str = Form(""),
        Digits: Optional[str] = Form(None),
    ):
        """
        Scenario selection webhook.

        Branches on keywords in SpeechResult. Digits are accepted but ignored.
        """
        turn = IncomingTurn.from_form(SpeechResult, Digits)
        logger.info(
            f"{DialogueState.SCENARIO_SELECTION.path}: speech='{turn.speech_text[:50]}' "
            f"scenario={select_scenario(turn.speech_text).value}"
        )
        twiml = _get_script(request).respond(DialogueState.SCENARIO_SELECTION, turn.speech_text)
        return _twiml_response(twiml)

    @app.post(DialogueState.PRACTICE.path)
    async def twilio_practice(
        request: Request,
        SpeechResult: str = Form(""),
        Digits: Optional[str] = Form(None),
    ):
        """
        Practice turn webhook.

        The caller's words are accepted but not inspected; the reply is
        always the same acknowledgment.
        """
        turn = IncomingTurn.from_form(SpeechResult, Digits)
        logger.info(f"{DialogueState.PRACTICE.path}: speech='{turn.speech_text[:50]}'")
        twiml = _get_script(request).respond(DialogueState.PRACTICE, turn.speech_text)
        return _twiml_response(twiml)

    return app


app = create_app()


def run(settings: Optional[Settings] = None) -> None:
    """Start the server. Port bind failures propagate out of uvicorn."""
    import uvicorn

    settings = settings or Settings.from_env()
    configure_logging(settings)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
