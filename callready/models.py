"""
Pydantic models for the webhook API.
Python 3.9 compatible - uses typing.Optional
"""

from typing import Optional

from pydantic import BaseModel, Field


class IncomingTurn(BaseModel):
    """One caller turn as posted by Twilio. Never stored."""
    speech_text: str = Field(default="", description="Twilio SpeechResult")
    digits: Optional[str] = Field(default=None, description="Twilio Digits (accepted, not used)")

    @classmethod
    def from_form(cls, speech_result: Optional[str], digits: Optional[str] = None) -> "IncomingTurn":
        return cls(speech_text=speech_result or "", digits=digits or None)


class HealthResponse(BaseModel):
    ok: bool
    version: str
