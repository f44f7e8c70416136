# app/core/bots/__init__.py
"""
Bot bundles.

- facility_bot -- intent/entity names, texts, reference data and validators
  for the campus navigation bot
"""
