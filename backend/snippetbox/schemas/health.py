"""
Snippetbox: Health Response Schema
====================================

What:  JSON contract of GET /health, used by Docker health checks and
       load balancer health checks.
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service and dependency status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
