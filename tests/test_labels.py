# File: tests/test_labels.py
import pytest

from site_catalog.catalog.labels import normalize_label, unique_normalized_labels


@pytest.mark.parametrize(
    "value, expected",
    [
        ("React", "React"),
        ("  Open   Source \n", "Open Source"),
        ("", None),
        ("   ", None),
        (None, None),
        ("x" * 64, "x" * 64),
        ("x" * 65, None),
    ],
)
def test_normalize_label(value, expected):
    assert normalize_label(value) == expected


def test_normalize_label_is_idempotent():
    once = normalize_label("  Web\t\tDesign ")
    assert normalize_label(once) == once


def test_unique_labels_dedupe_case_insensitively():
    assert unique_normalized_labels(["React", " react ", "React!!"]) == ["React", "React!!"]


def test_unique_labels_keep_first_spelling_and_order():
    values = ["typescript", "Go", "TypeScript", None, "", "go  ", "x" * 80, "Rust"]
    assert unique_normalized_labels(values) == ["typescript", "Go", "Rust"]


@pytest.mark.parametrize("value", [None, [], "React", 3])
def test_unique_labels_without_a_list(value):
    assert unique_normalized_labels(value) == []
