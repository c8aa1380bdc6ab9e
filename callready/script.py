"""
Practice-call dialogue script.

This module is the single source of truth for call flow. It declares:
- The dialogue states and the webhook path each one is served on
- Which state every state hands off to (TRANSITIONS)
- How input is gathered for each target state (GATHER_CONFIGS)
- The keyword branch used to pick a practice scenario

Nothing here remembers earlier turns. Every response is computed from
the current state and the transcript of the current request only.
"""
import logging
from enum import Enum
from typing import Dict, Optional, Tuple

from .markup import GatherConfig, gather, render_document, say, say_static

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "alice"


class DialogueState(str, Enum):
    """Dialogue states. The value is the webhook path."""
    GREETING = "/twiml"
    SCENARIO_SELECTION = "/choice"
    PRACTICE = "/practice"

    @property
    def path(self) -> str:
        return self.value


class ScenarioChoice(str, Enum):
    """Scenario picked from the caller's answer to the greeting."""
    DOCTOR_APPOINTMENT = "doctor-appointment"
    OPERATOR_CHOICE = "operator-choice"
    GENERAL = "general"


TRANSITIONS: Dict[DialogueState, DialogueState] = {
    DialogueState.GREETING: DialogueState.SCENARIO_SELECTION,
    DialogueState.SCENARIO_SELECTION: DialogueState.PRACTICE,
    DialogueState.PRACTICE: DialogueState.SCENARIO_SELECTION,
}

# Keyed by the state that will receive the gathered input.
# Digits are accepted when choosing a scenario but never read.
GATHER_CONFIGS: Dict[DialogueState, GatherConfig] = {
    DialogueState.SCENARIO_SELECTION: GatherConfig(
        input_modes=("speech", "dtmf"),
        timeout=6,
        action=DialogueState.SCENARIO_SELECTION.path,
    ),
    DialogueState.PRACTICE: GatherConfig(
        input_modes=("speech",),
        timeout=10,
        action=DialogueState.PRACTICE.path,
    ),
}

# (scenario, keywords) in precedence order - first match wins
SCENARIO_KEYWORDS: Tuple[Tuple[ScenarioChoice, Tuple[str, ...]], ...] = (
    (ScenarioChoice.DOCTOR_APPOINTMENT, ("doctor", "appointment")),
    (ScenarioChoice.OPERATOR_CHOICE, ("choose", "you decide")),
)

GREETING_TEXT = (
    "Welcome to CallReady, a safe place to practice real phone calls before they matter. "
    "Do you want to choose a type of call to practice, "
    "or should I choose an easy scenario to start?"
)

SCENARIO_TEXTS: Dict[ScenarioChoice, str] = {
    ScenarioChoice.DOCTOR_APPOINTMENT: (
        "Great, let's practice calling a doctor's office to make an appointment. "
        "I'll be the receptionist. Ring ring. Hello, thanks for calling the clinic, "
        "how can I help you today?"
    ),
    ScenarioChoice.OPERATOR_CHOICE: (
        "Okay, I'll pick one for you. You're calling your doctor's office because you "
        "need a checkup. I'll play the front desk. Ring ring. Good morning, "
        "doctor's office, what can I do for you?"
    ),
    ScenarioChoice.GENERAL: (
        "Sure, let's practice a general call. I'll answer like a friendly business would. "
        "Ring ring. Hello, thanks for calling, how can I help you?"
    ),
}

PRACTICE_TEXT = (
    "Nice job, that sounded clear and polite. "
    "Say continue to keep practicing, or say restart to pick a new kind of call."
)

# Static prompt, never built from caller input
NO_INPUT_TEXT = "Sorry, I didn't hear anything. Let's try that again."


def select_scenario(speech_text: Optional[str]) -> ScenarioChoice:
    """Pick a scenario from a transcript.

    Matching is a case-insensitive substring check. Empty, missing or
    unmatched transcripts fall through to GENERAL.
    """
    text = (speech_text or "").lower()
    for choice, keywords in SCENARIO_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return choice
    return ScenarioChoice.GENERAL


def next_state(state: DialogueState) -> DialogueState:
    return TRANSITIONS[state]


def gather_config_for(state: DialogueState) -> GatherConfig:
    """Gather directive used by responses served from `state`."""
    return GATHER_CONFIGS[next_state(state)]


def spoken_text(state: DialogueState, speech_text: Optional[str] = "") -> str:
    """Text spoken back to the caller for a turn in `state`."""
    if state == DialogueState.GREETING:
        return GREETING_TEXT
    if state == DialogueState.SCENARIO_SELECTION:
        return SCENARIO_TEXTS[select_scenario(speech_text)]
    # PRACTICE accepts whatever was said without inspecting it
    return PRACTICE_TEXT


class DialogueScript:
    """Renders TwiML responses for the practice-call script.

    One instance is built at startup and shared by all requests; it holds
    no per-call state.
    """

    def __init__(self, voice: str = DEFAULT_VOICE):
        self.voice = voice

    def respond(self, state: DialogueState, speech_text: Optional[str] = "") -> str:
        """Build the full response document for one turn.

        Args:
            state: State whose webhook was called
            speech_text: Transcript of the caller's last utterance

        Returns:
            TwiML XML string
        """
        config = gather_config_for(state)
        collect = gather(config)

        inner = (
            say(spoken_text(state, speech_text), self.voice)
            + collect
            + say_static(NO_INPUT_TEXT, self.voice)
            + collect
            + "\n"
        )

        logger.debug(f"Rendered {state.name} response, gather action={config.action}")
        return render_document(inner)
