"""Chat and report request models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProjectMeta(BaseModel):
    """Project the question is about."""

    name: str = Field(..., description="Project name")
    audience: Literal["self", "team", "exec"] = Field(default="self", description="Intended audience")


class ChatRequest(BaseModel):
    """Chat request model."""

    role: Literal["analysis", "gossip"] = Field(default="analysis", description="Answer style")
    question: str = Field(..., description="User question")
    context_summary: str = Field(default="", description="Data summary the answer must rely on")
    project_meta: ProjectMeta = Field(..., description="Project metadata")

    class Config:
        json_schema_extra = {
            "example": {
                "role": "analysis",
                "question": "Which region declined the most last quarter?",
                "context_summary": "Table sales: 4 regions, Q1-Q4 revenue...",
                "project_meta": {"name": "Sales 2024", "audience": "team"},
            }
        }


class ChatResponse(BaseModel):
    """Full chat answer, for the non-streaming endpoint."""

    content: str = Field(..., description="Accumulated answer")


class ReportRequest(BaseModel):
    """Report drafting request."""

    template_type: str = Field(..., description="Report template, e.g. 'weekly summary'")
    audience: str = Field(default="self", description="Intended audience")
    data_summary: str = Field(..., description="Project data the report may use")


class ReportResponse(BaseModel):
    """Drafted report."""

    model_config = ConfigDict(protected_namespaces=())

    markdown: str = Field(..., description="Report body")
    model_name: str = Field(..., description="Model that produced the report")
