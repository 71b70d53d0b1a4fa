"""AnswerStateController — owns the answers and step pointer of one session.

Step layout and required fields come from the schema table:

    0  basic_info   — demographics + vitals (numeric inputs, derived buckets)
    1  quantities   — water intake, urine volume, mass, mass change
    2  symptoms     — optional symptom checklist

Transitions:

    step 0 ──advance (validated)──► step 1 ──advance (validated)──► step 2
    step 0 ◄──────retreat────────── step 1 ◄──────retreat────────── step 2

Advancing from the last step is a no-op; leaving it is only possible via
final submission, which lives in the pipeline, not here.

Derived groups are recomputed synchronously inside ``set_field`` whenever a
contributing numeric input changes, so any later read (validation or
encoding) always sees buckets consistent with the current inputs.
"""

from __future__ import annotations

import logging
from typing import Any

from healthsurvey_core.constants import DERIVED_INPUTS
from healthsurvey_core.derived import compute_derived, parse_positive
from healthsurvey_core.errors import ValidationError
from healthsurvey_core.models.state import SurveyState
from healthsurvey_core.schema import SchemaStore

logger = logging.getLogger(__name__)

_NUMERIC_INPUTS = {name for inputs in DERIVED_INPUTS.values() for name in inputs}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class AnswerStateController:
    """Multi-step answer state machine.

    Args:
        store: a loaded :class:`SchemaStore`
    """

    def __init__(self, store: SchemaStore) -> None:
        self._store = store
        self._step = 0
        self._values: dict[str, Any] = {}
        # dict preserves selection order and gives O(1) removal
        self._symptoms: dict[str, None] = {}
        self._derived: dict[str, str | None] = compute_derived({})
        self._errors: dict[str, str] = {}

    # ==================================================================
    # Read access
    # ==================================================================

    @property
    def step(self) -> int:
        return self._step

    @property
    def is_final_step(self) -> bool:
        return self._step == self._store.step_count - 1

    @property
    def derived(self) -> dict[str, str | None]:
        return dict(self._derived)

    @property
    def symptoms(self) -> list[str]:
        return list(self._symptoms)

    @property
    def answers(self) -> dict[str, Any]:
        """Raw values merged with derived buckets — the encoder's input."""
        return {**self._values, **self._derived}

    def snapshot(self) -> SurveyState:
        step = self._store.step(self._step)
        return SurveyState(
            step=self._step,
            step_id=step.id,
            step_name=step.name,
            step_count=self._store.step_count,
            values=dict(self._values),
            derived=dict(self._derived),
            symptoms=self.symptoms,
            errors=dict(self._errors),
        )

    # ==================================================================
    # Edits
    # ==================================================================

    def set_field(self, group: str, value: Any) -> None:
        """Store *value* verbatim for a single-select or numeric field.

        Raises ``KeyError`` for unknown field ids and ``ValueError`` for
        derived groups, which can only change through their inputs.
        """
        if not self._store.is_known_field(group):
            raise KeyError(f"Unknown field: {group}")
        if self._store.is_derived(group):
            raise ValueError(f"Field {group!r} is derived and cannot be set directly")

        self._values[group] = value
        if group in _NUMERIC_INPUTS:
            self._derived = compute_derived(self._values)

    def toggle_symptom(self, name: str, included: bool) -> None:
        if included:
            self._symptoms[name] = None
        else:
            self._symptoms.pop(name, None)

    # ==================================================================
    # Navigation
    # ==================================================================

    def advance(self) -> int:
        """Validate the current step and move forward.

        Raises :class:`ValidationError` (step unchanged) when a required
        field is empty.  Returns the new step index.
        """
        errors = self._check_step(self._step)
        self._errors = errors
        if errors:
            step_id = self._store.step(self._step).id
            logger.info("Advance blocked at step %s: %s", step_id, sorted(errors))
            raise ValidationError(self._step, step_id, errors)

        if not self.is_final_step:
            self._step += 1
        return self._step

    def retreat(self) -> int:
        """Move back one step (floored at the first).  Never validates."""
        self._errors = {}
        if self._step > 0:
            self._step -= 1
        return self._step

    def reset(self) -> None:
        """Discard all answers and return to the first step."""
        self._step = 0
        self._values = {}
        self._symptoms = {}
        self._derived = compute_derived({})
        self._errors = {}

    # ==================================================================
    # Validation
    # ==================================================================

    def validate_step(self, index: int) -> None:
        """Raise :class:`ValidationError` if step *index* is incomplete."""
        errors = self._check_step(index)
        if errors:
            raise ValidationError(index, self._store.step(index).id, errors)

    def validate_all(self) -> None:
        """Validate every step in order; the first failing step is raised."""
        for index in range(self._store.step_count):
            self.validate_step(index)

    def _check_step(self, index: int) -> dict[str, str]:
        """Return field id -> reason for every failing required field."""
        step = self._store.step(index)
        errors: dict[str, str] = {}
        for field_id in step.required:
            if self._store.is_numeric(field_id):
                if parse_positive(self._values.get(field_id)) is None:
                    errors[field_id] = "must be a number greater than 0"
            elif self._store.is_derived(field_id):
                if _is_empty(self._derived.get(field_id)):
                    errors[field_id] = "could not be derived from the inputs"
            elif _is_empty(self._values.get(field_id)):
                errors[field_id] = "is required"
        return errors
