from __future__ import annotations

from xml.sax.saxutils import escape

from fastapi import Response


def twiml_message(text: str) -> Response:
    """Wrap a reply for Twilio's messaging webhook (TwiML)."""
    body = f'<?xml version="1.0" encoding="UTF-8"?><Response><Message>{escape(text)}</Message></Response>'
    return Response(content=body, media_type="application/xml")
