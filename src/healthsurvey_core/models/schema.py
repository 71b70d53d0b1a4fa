"""Pydantic models for the survey schema table.

These models mirror ``data/survey_v1.yaml``:

  - NumericField: raw numeric input (weight, height, systolic)
  - QuestionGroup: single-select or derived group with its closed label list
  - StepDefinition: one questionnaire step with its fields and required set
  - SurveySchema: the whole table, with cross-reference checks
"""

from typing import List, Literal

from pydantic import BaseModel, model_validator


class NumericField(BaseModel):
    """Raw numeric input.  Never encoded directly; feeds derived groups."""

    id: str
    name: str
    unit: str


class QuestionGroup(BaseModel):
    """Mutually exclusive labels; at most one is set to 1 in the vector.

    ``kind`` is "select" for user-chosen groups and "derived" for groups
    computed from numeric inputs (bmi, blood_pressure).
    """

    id: str
    name: str
    kind: Literal["select", "derived"] = "select"
    labels: List[str]


class StepDefinition(BaseModel):
    """One questionnaire step.

    ``required`` must be a subset of ``fields``.  ``symptoms`` marks the
    step that hosts the symptom checklist.
    """

    id: str
    name: str
    fields: List[str] = []
    required: List[str] = []
    symptoms: bool = False

    @model_validator(mode="after")
    def _required_subset_of_fields(self) -> "StepDefinition":
        extra = [f for f in self.required if f not in self.fields]
        if extra:
            raise ValueError(f"Step {self.id!r} requires undeclared fields: {extra}")
        return self


class SurveySchema(BaseModel):
    """The complete schema table."""

    version: str
    numeric_fields: List[NumericField]
    groups: List[QuestionGroup]
    symptoms: List[str]
    steps: List[StepDefinition]

    @model_validator(mode="after")
    def _check_references(self) -> "SurveySchema":
        if not self.steps:
            raise ValueError("Schema declares no steps")

        # Vector keys must be unique across every group and the symptom list
        seen: set[str] = set()
        for label in self.labels:
            if label in seen:
                raise ValueError(f"Duplicate label in schema: {label!r}")
            seen.add(label)

        known = {g.id for g in self.groups} | {f.id for f in self.numeric_fields}
        for step in self.steps:
            unknown = [f for f in step.fields if f not in known]
            if unknown:
                raise ValueError(f"Step {step.id!r} references unknown fields: {unknown}")
        return self

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def labels(self) -> list[str]:
        """Every vector key in schema order: group labels, then symptoms."""
        return [label for g in self.groups for label in g.labels] + list(self.symptoms)

    @property
    def group_map(self) -> dict[str, QuestionGroup]:
        return {g.id: g for g in self.groups}

    @property
    def numeric_ids(self) -> set[str]:
        return {f.id for f in self.numeric_fields}
