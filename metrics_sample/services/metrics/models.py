"""Pydantic V2 models for HTTP responses."""

from pydantic import BaseModel, ConfigDict


class HealthModel(BaseModel):
    """Static health check response: {"status": "UP", "runtime": "<name>"}"""
    model_config = ConfigDict(from_attributes=True)

    status: str = "UP"
    runtime: str
