# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result shapes for structured AI features.

Field names follow the camelCase JSON the prompts ask for; Python code uses
the snake_case attributes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Level = Literal["low", "medium", "high"]
Priority = Literal["low", "medium", "high", "urgent"]


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuggestedTask(_Schema):
    id: str
    name: str
    description: str
    estimated_days: float = Field(ge=0.5)
    complexity: Level
    priority: Priority
    dependencies: list[str]
    risk_level: float = Field(ge=0, le=100)
    category: str
    skills: list[str]
    deliverables: list[str]


class SuggestedPhase(_Schema):
    id: str
    name: str
    description: str
    estimated_days: float = Field(ge=0)
    tasks: list[SuggestedTask]


class ResourceRequirements(_Schema):
    developers: int = Field(default=0, ge=0)
    designers: int = Field(default=0, ge=0)
    testers: int = Field(default=0, ge=0)
    managers: int = Field(default=0, ge=0)


class AnalysisInsights(_Schema):
    recommendations: list[str]
    warnings: list[str]
    optimizations: list[str]


class ProjectAnalysis(_Schema):
    """Task breakdown of a project description."""

    project_type: str
    complexity: Level
    estimated_duration: float = Field(ge=1)
    risk_level: float = Field(ge=0, le=100)
    suggested_phases: list[SuggestedPhase]
    task_suggestions: list[SuggestedTask]
    critical_path: list[str]
    resource_requirements: ResourceRequirements
    insights: AnalysisInsights | None = None


class DependencySuggestion(_Schema):
    from_task: str
    to_task: str
    type: Literal["finish-to-start", "start-to-start", "finish-to-finish"]
    confidence: float = Field(ge=0, le=1)
    reason: str


class DependencyResponse(_Schema):
    """Suggested dependencies between existing tasks."""

    dependencies: list[DependencySuggestion]
