# app/core/bots/facility_bot/__init__.py
"""
Facility Bot package layout.

Sub-modules:
    config          -- user-facing texts and entity/intent names
    texts           -- get_text(key, **fields) accessor
    reference_data  -- JSON reference lists + load-once lowercase index
    validators      -- location validation and path resolution
    data/           -- bundled reference JSON files
"""
