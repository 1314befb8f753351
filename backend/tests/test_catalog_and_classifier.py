from __future__ import annotations

import asyncio
import re

import pytest
from remote_utils import ANALYZE, RecordingHandler, make_remote

from intake_core import (
    GENERIC_SYMPTOMS,
    ClassificationFailure,
    ConcernClassifier,
    ConcernRule,
    SymptomCatalog,
    merge_remote_categories,
)
from intake_remote import ConcernAnalyzeRequest


@pytest.mark.parametrize(
    "text, expected_first",
    [
        ("I have chest pain", "Heart-related issue"),
        ("My HEART is racing", "Heart-related issue"),
        ("fever and a cough since monday", "Cold/Flu"),
        ("nausea after dinner", "Food Poisoning"),
        ("terrible headache", "Migraine"),
        ("I just feel off", "General Malaise"),
    ],
)
def test_classify_matches_first_rule(text, expected_first):
    categories = ConcernClassifier().classify(text)
    assert categories[0] == expected_first


def test_classify_migraine_returns_full_candidate_list():
    assert ConcernClassifier().classify("I have a bad migraine and headache") == [
        "Migraine",
        "Tension Headache",
        "Sinus Issue",
    ]


def test_classify_first_matching_rule_wins():
    # cardiac is checked before respiratory even though both keywords appear
    assert ConcernClassifier().classify("chest tightness and fever") == [
        "Heart-related issue",
        "Anxiety/Panic Attack",
        "Respiratory Issue",
    ]


def test_classify_empty_text_uses_catch_all():
    assert ConcernClassifier().classify("") == ["General Malaise", "Viral Infection", "Stress/Anxiety"]


def test_classifier_requires_trailing_catch_all():
    with pytest.raises(ValueError):
        ConcernClassifier(rules=(ConcernRule("only", re.compile("x"), ("X",)),))


def test_custom_rules_are_honored():
    classifier = ConcernClassifier(
        rules=(
            ConcernRule("skin", re.compile(r"rash|itch"), ("Dermatitis",)),
            ConcernRule("fallback", None, ("Other",)),
        )
    )
    assert classifier.classify("itchy rash") == ["Dermatitis"]
    assert classifier.classify("sore knee") == ["Other"]


def test_merge_remote_categories_keeps_primary_first_and_drops_duplicates():
    merged = merge_remote_categories("Migraine", ["Migraine", "", "  ", "Tension Headache", "Sinus Issue"])
    assert merged == ["Migraine", "Tension Headache", "Sinus Issue"]
    assert merge_remote_categories(None, ["Cold/Flu"]) == ["Cold/Flu"]
    assert merge_remote_categories("", None) == []


def test_catalog_known_and_fallback_symptoms():
    catalog = SymptomCatalog()
    assert catalog.symptoms_for("Migraine") == (
        "Severe headache",
        "Nausea",
        "Light sensitivity",
        "Sound sensitivity",
        "Visual disturbances",
    )
    assert catalog.knows("COVID-19")
    assert not catalog.knows("General Malaise")
    assert catalog.symptoms_for("General Malaise") == GENERIC_SYMPTOMS
    assert len(catalog.list_concerns()) == 10


def test_catalog_accepts_custom_table():
    catalog = SymptomCatalog(table={"Sprain": ["Swelling", "Bruising"]}, fallback=["Pain"])
    assert catalog.symptoms_for("Sprain") == ("Swelling", "Bruising")
    assert catalog.symptoms_for("Migraine") == ("Pain",)


def test_classify_remote_merges_categories():
    handler = RecordingHandler(
        {
            ANALYZE: (
                200,
                {
                    "sessionId": "remote-1",
                    "primaryCategory": "Migraine",
                    "candidateCategories": ["Migraine", "Tension Headache"],
                    "clinicalSummary": "Throbbing headache for two days.",
                    "safetyNotes": ["Seek care for sudden worst headache."],
                },
            )
        }
    )
    request = ConcernAnalyzeRequest(free_text_concern="throbbing headache", locale="en-US")
    result = asyncio.run(ConcernClassifier().classify_remote(make_remote(handler), request))

    assert result.source == "remote"
    assert result.categories == ("Migraine", "Tension Headache")
    assert result.clinical_summary == "Throbbing headache for two days."
    assert result.remote_session_id == "remote-1"
    assert result.safety_notes == ("Seek care for sudden worst headache.",)
    assert handler.body_for(ANALYZE) == {"freeTextConcern": "throbbing headache", "locale": "en-US"}


def test_classify_remote_raises_on_error_status():
    handler = RecordingHandler({ANALYZE: (503, {"error": "overloaded"})})
    request = ConcernAnalyzeRequest(free_text_concern="cough")
    with pytest.raises(ClassificationFailure) as excinfo:
        asyncio.run(ConcernClassifier().classify_remote(make_remote(handler), request))
    assert excinfo.value.status_code == 503
    assert excinfo.value.reason == "http_503: overloaded"


def test_classify_remote_raises_when_no_categories():
    handler = RecordingHandler({ANALYZE: (200, {"primaryCategory": " ", "candidateCategories": []})})
    request = ConcernAnalyzeRequest(free_text_concern="cough")
    with pytest.raises(ClassificationFailure) as excinfo:
        asyncio.run(ConcernClassifier().classify_remote(make_remote(handler), request))
    assert excinfo.value.reason == "empty_categories"
