"""Transcript and tweet domain -- schemas, record store, lifecycle and generation.

Provides the Pydantic contracts shared with the HTTP layer, the JSON file
record store, the tweet lifecycle state machine and the transcript service
that schedules background tweet generation.
"""
