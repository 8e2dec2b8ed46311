import logging

from langchain_groq import ChatGroq

from coastboard.core.config import settings
from coastboard.core.errors import AIUnavailable

logger = logging.getLogger(__name__)


def get_chat_model():
    """Groq chat model used for every drafting call."""
    if not settings.GROQ_API_KEY:
        logger.warning("GROQ_API_KEY not set, AI drafting disabled")
        raise AIUnavailable()
    return ChatGroq(
        temperature=0.2,
        model_name=settings.GROQ_MODEL,
        api_key=settings.GROQ_API_KEY,
    )
