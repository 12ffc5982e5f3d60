"""
Pydantic request/response schemas for the Conductor API.
"""
