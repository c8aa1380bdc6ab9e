"""
TwiML markup builder.

Text that reaches the caller is escaped fragment by fragment with
escape_xml(); render_document() only assembles structure and never
re-escapes what it is given.

Python 3.9 compatible - uses typing.Optional, typing.Tuple
"""

from dataclasses import dataclass
from typing import Optional, Tuple

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


@dataclass(frozen=True)
class GatherConfig:
    """Configuration for a single <Gather> directive."""
    input_modes: Tuple[str, ...]  # "speech", "dtmf"
    timeout: int  # seconds the provider waits for input
    action: str  # path the provider POSTs the result to
    method: str = "POST"

    @property
    def input_attr(self) -> str:
        return " ".join(self.input_modes)


def escape_xml(text: Optional[str]) -> str:
    """Escape text for XML.

    Ampersand goes first so entities introduced by the later
    replacements are not escaped a second time.
    """
    if not text:
        return ""
    return (
        text
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def render_document(inner: str) -> str:
    """Wrap already-escaped directives in the TwiML envelope."""
    return f"""{XML_DECLARATION}
<Response>{inner}</Response>"""


def say(text: Optional[str], voice: str) -> str:
    """<Say> for caller-derived or computed text (escaped)."""
    return say_static(escape_xml(text), voice)


def say_static(text: str, voice: str) -> str:
    """<Say> for fixed prompts. The text is inserted as-is."""
    return f'\n    <Say voice="{escape_xml(voice)}">{text}</Say>'


def gather(config: GatherConfig) -> str:
    return (
        f'\n    <Gather input="{config.input_attr}"'
        f' timeout="{config.timeout}"'
        f' action="{escape_xml(config.action)}"'
        f' method="{config.method}"/>'
    )
