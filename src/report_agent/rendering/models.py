"""Structured report specification produced by the model and consumed by renderers."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Cell = Union[str, int, float]


class Severity(str, Enum):
    """Visual emphasis of a report section."""

    NONE = "none"
    WATCH = "watch"
    WARNING = "warning"
    CRITICAL = "critical"


class TableData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    headers: List[str] = Field(default_factory=list, description="Column headers")
    rows: List[List[Cell]] = Field(description="Table rows, each a list of cell values")

    @model_validator(mode="after")
    def _rows_match_headers(self) -> "TableData":
        if self.headers:
            width = len(self.headers)
            for index, row in enumerate(self.rows):
                if len(row) != width:
                    raise ValueError(f"row {index} has {len(row)} cells, expected {width} to match the headers")
        return self


class ReportSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    heading: str = Field(min_length=1, description="Section heading")
    content: str = Field(description="Paragraph content for this section")
    include_table: bool = Field(default=False, description="Whether to include a data table")
    table_data: Optional[TableData] = Field(
        default=None, description="Table with 'headers' and 'rows'; used when include_table is true"
    )
    alert_level: Severity = Field(default=Severity.NONE, description="Visual styling for this section")


class ReportSpec(BaseModel):
    """Everything a renderer needs to build the report document."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    subtitle: Optional[str] = None
    executive_summary: Optional[str] = None
    sections: List[ReportSection] = Field(min_length=1)
    recommendations: List[str] = Field(default_factory=list)
    methodology_notes: Optional[str] = None
