# common/logger/logger_middleware/middleware_types.py
"""
Type definitions for request logging middleware.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, computed_field


class PerformanceBreakdown(BaseModel):
    """Breakdown of where time was spent during the request."""

    total_ms: float
    app_logic_ms: float
    db_session_total_ms: float
    sql_execution_total_ms: float
    query_count: int = Field(0, description="Number of SQL statements executed")

    @computed_field
    def db_overhead_ms(self) -> float:
        """Time spent in session management (pool checkout, commit) outside SQL."""
        return round(self.db_session_total_ms - self.sql_execution_total_ms, 2)


class RequestMetadata(BaseModel):
    """Core request metadata, always captured."""

    method: str = Field(..., description="HTTP method (GET, POST, etc.)")
    path: str = Field(..., description="Request path without query params")
    status_code: int = Field(..., ge=100, le=599, description="HTTP status code")
    duration_ms: float = Field(..., ge=0, description="Request duration in ms")

    model_config = {"frozen": True}


class RequestDetails(BaseModel):
    """Extended request details; optional."""

    request_id: Optional[str] = Field(None, description="Unique request ID")
    client_host: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User-Agent header")
    path_params: Optional[Dict[str, Any]] = Field(None, description="Path parameters")
    content_length: Optional[int] = Field(None, ge=0, description="Response bytes")

    model_config = {"frozen": True}


class RequestLogEntry(BaseModel):
    """
    Complete request log entry combining metadata and optional details.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: RequestMetadata
    details: Optional[RequestDetails] = None
    performance: Optional[PerformanceBreakdown] = None
    slow_request_threshold_ms: float = Field(1000.0, exclude=True)
    slow_query_threshold_ms: float = Field(500.0, exclude=True)

    model_config = {"frozen": True}

    @computed_field
    def is_slow(self) -> bool:
        return self.metadata.duration_ms > self.slow_request_threshold_ms

    @computed_field
    def is_error(self) -> bool:
        return self.metadata.status_code >= 500

    @computed_field
    def optimization_warnings(self) -> list[str]:
        """Warnings worth acting on: many statements or slow SQL."""
        warns: list[str] = []
        if not self.performance:
            return warns

        query_count = self.performance.query_count
        sql_time = self.performance.sql_execution_total_ms

        if query_count > 10:
            warns.append(f"HIGH_QUERY_COUNT: {query_count} statements in one request")
        if sql_time > self.slow_query_threshold_ms:
            warns.append(f"SLOW_SQL: statement execution took {sql_time:.0f}ms")
        return warns


__all__ = [
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
    "PerformanceBreakdown",
]
