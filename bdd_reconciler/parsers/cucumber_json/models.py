"""Pydantic models for the Cucumber JSON report format."""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, Field


class CucumberTag(BaseModel):
    """A tag attached to a feature or element."""

    name: str = ""


class CucumberEmbedding(BaseModel):
    """An attachment embedded in a step."""

    mime_type: str = ""
    data: str = ""


class CucumberResult(BaseModel):
    """Outcome of a step or hook; duration is in nanoseconds."""

    status: str | None = None
    duration: int = 0
    error_message: str | None = None


class CucumberStep(BaseModel):
    """A step (or hook) inside an element."""

    keyword: str = ""
    name: str = ""
    line: int | None = None
    result: CucumberResult | None = None
    embeddings: Sequence[CucumberEmbedding] = Field(default_factory=list)


class CucumberElement(BaseModel):
    """A scenario, one expanded outline row, or a background."""

    id: str = ""
    name: str = ""
    type: str = "scenario"
    keyword: str = ""
    line: int | None = None
    start_timestamp: datetime | None = None
    tags: Sequence[CucumberTag] = Field(default_factory=list)
    before: Sequence[CucumberStep] = Field(default_factory=list)
    steps: Sequence[CucumberStep] = Field(default_factory=list)
    after: Sequence[CucumberStep] = Field(default_factory=list)


class CucumberFeature(BaseModel):
    """A feature object at the top level of the report array."""

    name: str = ""
    uri: str = ""
    keyword: str = ""
    description: str = ""
    tags: Sequence[CucumberTag] = Field(default_factory=list)
    elements: Sequence[CucumberElement] = Field(default_factory=list)
