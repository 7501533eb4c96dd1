"""
Shared API dependencies.
"""

from faqbot.services.responder import FAQResponder, create_responder

# Lazy initialization to avoid import-time GitHub/Slack client creation
_responder = None


def get_responder() -> FAQResponder:
    """Get the FAQResponder instance with lazy initialization."""
    global _responder
    if _responder is None:
        _responder = create_responder()
    return _responder
