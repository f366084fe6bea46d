from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal


class QueryRequest(BaseModel):
    """Raw SQL text, forwarded to the database without inspection."""
    query: str = Field(..., description="SQL text executed verbatim", examples=["SELECT 1 AS x"])


class QueryResponse(BaseModel):
    results: list[dict[str, Any]] = Field(
        ...,
        description="Result rows, one mapping of column name to value per row",
        examples=[[{"x": 1}]]
    )

    model_config = ConfigDict(frozen=True)


class TablesResponse(BaseModel):
    tables: list[str] = Field(..., examples=[["event", "person"]])

    model_config = ConfigDict(frozen=True)


class ErrorResponse(BaseModel):
    """Error payload. Clients check for the `error` key, not only the status."""
    error: str = Field(
        ...,
        description="Database driver message or request problem",
        examples=['relation "nonexistent_table" does not exist']
    )

    model_config = ConfigDict(frozen=True)


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    database: bool
