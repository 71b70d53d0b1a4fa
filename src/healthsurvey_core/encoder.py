"""FeatureVectorEncoder — one-hot encodes a complete answer set.

The vector's key set is closed: it is exactly ``schema.labels`` (every
single-select and derived group label, then every symptom name).  Encoding
never adds or drops a key, regardless of what the answers contain.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from healthsurvey_core.schema import SchemaStore

logger = logging.getLogger(__name__)


class FeatureVectorEncoder:
    """Builds ``{label: 0|1}`` vectors over the schema's closed label set.

    Args:
        store: a loaded :class:`SchemaStore`
    """

    def __init__(self, store: SchemaStore) -> None:
        self._store = store

    @property
    def labels(self) -> list[str]:
        return self._store.schema.labels

    def encode(
        self,
        answers: Mapping[str, Any],
        symptoms: Iterable[str] = (),
    ) -> dict[str, int]:
        """Encode *answers* (group id -> chosen label) and selected *symptoms*.

        ``answers`` may contain raw numeric fields and derived groups
        alongside the single-select groups; anything that is not a group id
        is skipped.  A value that is not one of its group's labels is
        ignored, as is an unknown symptom name.
        """
        schema = self._store.schema
        vector = {label: 0 for label in schema.labels}

        for group in schema.groups:
            value = answers.get(group.id)
            if value is None or value == "":
                continue
            # Membership is checked within the group so a label from another
            # group can never light up here.
            if value in group.labels:
                vector[value] = 1
            else:
                logger.debug("Ignoring out-of-schema value for %s: %r", group.id, value)

        known_symptoms = set(schema.symptoms)
        for name in symptoms:
            if name in known_symptoms:
                vector[name] = 1
            else:
                logger.debug("Ignoring unknown symptom: %r", name)

        return vector
