"""Unit tests for individual components in isolation.

Coverage:
    - conversation/: Store invariants, turn lifecycle, service wiring
    - provider/: Request format, error mapping and retry of the Gemini client
    - uploads/: Attachment validation rules
"""
