"""SchemaStore — loads the survey schema table into typed models.

The schema is the single source of truth for which groups exist, which
labels each group may take, how fields are laid out across steps, and which
fields each step requires.  Both the controller (validation) and the
encoder (vector keys) read from it.

Usage::

    store = SchemaStore()           # defaults to the bundled survey_v1.yaml
    store.load()

    store.schema.labels             # every feature-vector key, in order
    store.step(0).required          # required field ids of the first step
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from healthsurvey_core.constants import DEFAULT_SCHEMA_FILE
from healthsurvey_core.models.schema import QuestionGroup, StepDefinition, SurveySchema

logger = logging.getLogger(__name__)


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class SchemaStore:
    """Loads a survey schema YAML file and provides typed lookup.

    Args:
        schema_path: path to a schema YAML file; ``None`` selects the
            schema bundled with the package
    """

    def __init__(self, schema_path: str | Path | None = None) -> None:
        if schema_path is None:
            schema_path = Path(__file__).resolve().parent / DEFAULT_SCHEMA_FILE
        self._path = Path(schema_path)
        self._schema: SurveySchema | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse the YAML table.  Raises ``FileNotFoundError`` if missing and
        ``pydantic.ValidationError`` if the table is inconsistent."""
        raw = load_yaml(self._path)
        self._schema = SurveySchema.model_validate(raw)
        logger.info(
            "SchemaStore loaded %s: %d groups, %d symptoms, %d steps",
            self._schema.version,
            len(self._schema.groups),
            len(self._schema.symptoms),
            len(self._schema.steps),
        )

    @classmethod
    def default(cls) -> SchemaStore:
        """Return a loaded store for the bundled schema."""
        store = cls()
        store.load()
        return store

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def schema(self) -> SurveySchema:
        if self._schema is None:
            raise RuntimeError("SchemaStore.load() has not been called")
        return self._schema

    @property
    def step_count(self) -> int:
        return len(self.schema.steps)

    def step(self, index: int) -> StepDefinition:
        return self.schema.steps[index]

    def group(self, group_id: str) -> QuestionGroup:
        """Return a group by id.  Raises ``KeyError`` for unknown ids."""
        try:
            return self.schema.group_map[group_id]
        except KeyError:
            raise KeyError(f"Unknown question group: {group_id}") from None

    def is_numeric(self, field_id: str) -> bool:
        return field_id in self.schema.numeric_ids

    def is_derived(self, field_id: str) -> bool:
        group = self.schema.group_map.get(field_id)
        return group is not None and group.kind == "derived"

    def is_known_field(self, field_id: str) -> bool:
        return self.is_numeric(field_id) or field_id in self.schema.group_map
