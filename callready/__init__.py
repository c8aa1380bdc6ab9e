"""
CallReady - Twilio webhooks for practicing real phone calls.
"""

__version__ = "1.0.0"
