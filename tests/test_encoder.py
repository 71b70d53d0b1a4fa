"""FeatureVectorEncoder tests — closed schema, one-hot groups, purity."""

import pytest

from healthsurvey_core.encoder import FeatureVectorEncoder

from helpers.answers import VALID_STEP1, VALID_STEP2


@pytest.fixture
def encoder(store):
    return FeatureVectorEncoder(store)


def _ones(vector):
    return {label for label, value in vector.items() if value == 1}


def test_empty_answers_give_all_zero_vector(encoder, store):
    vector = encoder.encode({})
    assert list(vector) == store.schema.labels, "Keys must follow schema order"
    assert set(vector.values()) == {0}


def test_each_answered_group_sets_its_label(encoder):
    answers = {**VALID_STEP2, "age": "30-39", "gender": "Female", "bmi": ">=25"}
    vector = encoder.encode(answers, ["Fever", "Itching"])
    assert _ones(vector) == {
        "30-39", "Female", ">=25",
        "<=2700", "800-2000", "Mass", "No change",
        "Fever", "Itching",
    }


def test_numeric_fields_are_not_encoded(encoder, store):
    vector = encoder.encode({"weight": 60, "height": 160, "systolic": 120})
    assert set(vector) == set(store.schema.labels)
    assert _ones(vector) == set()


def test_unknown_values_are_ignored(encoder, store):
    vector = encoder.encode(
        {"age": "90+", "gender": "Other", "mass": None, "mass_change": ""},
        ["Hiccups"],
    )
    assert set(vector) == set(store.schema.labels), "No keys may be added"
    assert _ones(vector) == set()


def test_label_from_another_group_is_not_accepted(encoder):
    """A value is only honoured inside the group that declares it."""
    vector = encoder.encode({"gender": "40+", "age": "Male"})
    assert _ones(vector) == set()


def test_at_most_one_label_per_group(encoder, store):
    """Whatever a group is answered with, it contributes at most one 1."""
    for group in store.schema.groups:
        for label in group.labels:
            vector = encoder.encode({group.id: label})
            in_group = [lbl for lbl in group.labels if vector[lbl] == 1]
            assert in_group == [label], f"{group.id}={label!r} lit {in_group}"


def test_symptoms_are_independent(encoder, store):
    symptoms = store.schema.symptoms
    vector = encoder.encode({}, symptoms)
    assert all(vector[name] == 1 for name in symptoms)
    vector = encoder.encode({}, symptoms[:1])
    assert [name for name in symptoms if vector[name]] == symptoms[:1]


def test_encoding_is_idempotent(encoder):
    answers = {**VALID_STEP1, **VALID_STEP2, "bmi": ">=18.5", "blood_pressure": "120/80"}
    first = encoder.encode(answers, ["Headache"])
    second = encoder.encode(answers, ["Headache"])
    assert first == second
    assert list(first) == list(second)


def test_no_residual_state_between_calls(encoder):
    encoder.encode({"gender": "Male"}, ["Headache"])
    vector = encoder.encode({})
    assert _ones(vector) == set()


def test_encoding_does_not_mutate_inputs(encoder):
    answers = {"gender": "Male"}
    symptoms = ["Headache"]
    encoder.encode(answers, symptoms)
    assert answers == {"gender": "Male"}
    assert symptoms == ["Headache"]
