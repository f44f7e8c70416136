# app/core/handlers/__init__.py
"""
Dialog handlers.

Each handler owns one multi-turn dialog and its state table.
"""
from app.core.handlers.facility_bot_handler import FacilityBotHandler

__all__ = [
    "FacilityBotHandler",
]
