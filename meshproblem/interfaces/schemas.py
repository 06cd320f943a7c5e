"""
Pydantic schemas for the HTTP surface of the service.

These schemas define the public contract: the problem document emitted
by the filter and the health endpoint payload.
No filter logic belongs here.
"""

from pydantic import BaseModel, Field


class ProblemDetailsSchema(BaseModel):
    """RFC 9457 problem document as emitted by the filter.

    Attributes:
        type: URI identifying the problem type, may be empty.
        title: Short human-readable summary.
        status: HTTP status code of the original response.
        instance: Request path of the failed request.
        trace_id: Correlation id (traceparent, x-request-id or default).
        detail: Original upstream response body, verbatim.
    """

    type: str = Field(..., description="Problem type URI")
    title: str
    status: int
    instance: str
    trace_id: str
    detail: str


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str
    version: str
    target_url_prefixes: int = Field(
        ..., description="Number of configured target URL prefixes"
    )
