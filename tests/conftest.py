import pytest

from healthsurvey_core.schema import SchemaStore


@pytest.fixture(scope="session")
def store():
    """Load the bundled schema once for the entire test session."""
    return SchemaStore.default()
