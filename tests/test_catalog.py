import json

import pytest

from selfiq.core.assessment_catalog import AssessmentCatalog, parse_definition
from selfiq.exceptions import InvalidDefinitionError, UnknownAnswerError, UnknownAssessmentError


def test_parse_definition_reads_document(two_step_doc):
    d = parse_definition(two_step_doc)
    assert d.id == "two_step"
    assert d.total_questions == 2
    assert d.scoring_categories == ("openness", "conscientiousness", "extraversion")
    assert d.resolve("q2", "a").score == {"openness": 1, "conscientiousness": 4}
    assert not d.is_premium


def test_resolve_unknown_ids(two_step_doc):
    d = parse_definition(two_step_doc)
    with pytest.raises(UnknownAnswerError):
        d.resolve("q1", "nope")
    with pytest.raises(UnknownAnswerError):
        d.resolve("nope", "a")


def test_duplicate_question_ids_rejected(two_step_doc):
    two_step_doc["questions"][1]["id"] = "q1"
    with pytest.raises(InvalidDefinitionError):
        parse_definition(two_step_doc)


def test_undeclared_category_rejected(two_step_doc):
    two_step_doc["questions"][0]["answers"][0]["score"] = {"curiosity": 1}
    with pytest.raises(InvalidDefinitionError):
        parse_definition(two_step_doc)


def test_empty_assessment_rejected(two_step_doc):
    two_step_doc["questions"] = []
    with pytest.raises(InvalidDefinitionError):
        parse_definition(two_step_doc)


def test_malformed_document_rejected():
    with pytest.raises(InvalidDefinitionError):
        parse_definition({"testName": "no id"})


def test_catalog_lookup_and_filter(catalog):
    assert "two_step" in catalog
    assert len(catalog) == 2
    assert [d.id for d in catalog.by_category("career")] == ["premium_deep"]
    assert catalog.find("missing") is None
    with pytest.raises(UnknownAssessmentError):
        catalog.get("missing")


def test_catalog_rejects_duplicate_ids(two_step_doc):
    with pytest.raises(InvalidDefinitionError):
        AssessmentCatalog([parse_definition(two_step_doc), parse_definition(two_step_doc)])


def test_from_directory(tmp_path, two_step_doc, premium_doc):
    (tmp_path / "two.json").write_text(json.dumps(two_step_doc), encoding="utf-8")
    (tmp_path / "premium.json").write_text(json.dumps(premium_doc), encoding="utf-8")
    catalog = AssessmentCatalog.from_directory(tmp_path)
    assert sorted(d.id for d in catalog.all()) == ["premium_deep", "two_step"]


def test_from_missing_directory_is_empty(tmp_path):
    assert len(AssessmentCatalog.from_directory(tmp_path / "absent")) == 0


def test_bundled_content_loads():
    from selfiq.core.settings import settings
    catalog = AssessmentCatalog.from_directory(settings.content_dir)
    big_five = catalog.get("big_five_short")
    assert big_five.total_questions == 10
    assert not big_five.is_premium
