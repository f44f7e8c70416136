# app/core/bots/facility_bot/texts.py
"""
Text accessor for the Facility Bot bundle.
"""
from __future__ import annotations

from app.core.bots.facility_bot.config import FACILITY_BOT_TEXTS


def get_text(key: str, **fields: str) -> str:
    """
    Get a message from the facility bot bundle.

    Args:
        key: Message key (e.g. ``"q_to_location"``, ``"err_to_location"``).
        **fields: Values for ``{placeholder}`` substitution.

    Returns:
        The formatted message, or *key* itself if no message exists.
    """
    template = FACILITY_BOT_TEXTS.get(key)
    if template is None:
        return key
    if not fields:
        return template
    return template.format(**fields)
