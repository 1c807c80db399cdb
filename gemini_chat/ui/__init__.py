"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat list with select, star and delete
    - Message display with a typing indicator for pending replies
    - Model selection and attachment upload
    - Failure notifications

Contains no conversation state of its own. Reads from the shared store and
re-renders on store events.
"""
