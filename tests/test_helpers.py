from datetime import datetime, timezone

import pytest

from core.helpers import bmi_category, calculate_bmi, generate_record_id, split_list_input
from core.time_utils import ensure_utc, format_timestamp
from models.patient import Patient


@pytest.mark.parametrize(
    "weight, height, bmi, category",
    [
        (70, 175, 22.9, "Normal"),
        (90, 160, 35.2, "Obese"),
        (45, 170, 15.6, "Underweight"),
        (80, 170, 27.7, "Overweight"),
    ],
)
def test_bmi(weight, height, bmi, category):
    assert calculate_bmi(weight, height) == bmi
    assert bmi_category(bmi) == category


@pytest.mark.parametrize("weight, height", [(None, 170), (70, None), (0, 170), (70, 0)])
def test_bmi_needs_weight_and_height(weight, height):
    assert calculate_bmi(weight, height) is None


def test_patient_bmi_properties():
    assert Patient(weight=70.0, height=175.0).bmi == 22.9
    assert Patient(weight=70.0, height=175.0).bmi_category == "Normal"
    assert Patient(weight=70.0, height=None).bmi_category is None


def test_split_list_input():
    assert split_list_input("Penicillin, Sulfa ,, ") == ["Penicillin", "Sulfa"]
    assert split_list_input("") == []
    assert split_list_input(None) == []


def test_generate_record_id_is_prefixed_and_unique():
    ids = {generate_record_id("P") for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("P") and len(i) == 13 for i in ids)


def test_timestamps():
    naive = datetime(2024, 1, 2, 3, 4)
    assert ensure_utc(naive).tzinfo == timezone.utc
    assert ensure_utc(None) is None
    assert format_timestamp(naive) == "02 Jan 2024, 03:04"
    assert format_timestamp(None) == "—"
