from __future__ import annotations

import copy

import pytest

from decyph.core.errors import InvalidShape
from decyph.models.schemas import BLOOD_ONLY_FIELDS, ReportKind, TaskKind
from decyph.services.normalization_service import (
    normalize,
    normalize_medical_report,
    normalize_prescription,
    normalize_product_label,
)

REPORT_LIST_FIELDS = (
    "key_findings",
    "abnormal_results",
    "recommendations",
    "possible_causes",
    "dietary_recommendations",
    "common_medications",
)

DISCLAIMER = "This analysis is AI-generated and for informational purposes only."


def test_product_label_optional_details_stay_absent() -> None:
    result = normalize_product_label({"ingredients": [{"name": "Water"}]})

    assert len(result.ingredients) == 1
    water = result.ingredients[0]
    assert water.name == "Water"
    assert water.description is None
    assert water.common_uses is None
    assert water.pros_cons is None
    assert water.side_effects_allergens is None
    assert water.warnings_regulatory is None


def test_product_label_blank_details_become_absent_and_camel_case_is_accepted() -> None:
    result = normalize_product_label(
        {
            "ingredients": [
                {
                    "name": "  Sodium Benzoate ",
                    "description": "   ",
                    "commonUses": "Preservative",
                    "sideEffectsAllergens": "",
                    "warningsRegulatory": "GRAS at low concentrations",
                }
            ]
        }
    )

    ingredient = result.ingredients[0]
    assert ingredient.name == "Sodium Benzoate"
    assert ingredient.description is None
    assert ingredient.common_uses == "Preservative"
    assert ingredient.side_effects_allergens is None
    assert ingredient.warnings_regulatory == "GRAS at low concentrations"


@pytest.mark.parametrize("raw", [{}, {"ingredients": None}, {"ingredients": []}])
def test_product_label_missing_list_defaults_to_empty(raw: dict) -> None:
    assert normalize_product_label(raw).ingredients == []


def test_product_label_ingredient_without_name_is_invalid() -> None:
    with pytest.raises(InvalidShape, match="ingredients.0.name"):
        normalize_product_label({"ingredients": [{"description": "Unknown"}]})


@pytest.mark.parametrize("raw", [{}, {"medicines": None}, {"medicines": []}])
def test_prescription_empty_medicines_is_a_valid_result(raw: dict) -> None:
    assert normalize_prescription(raw).medicines == []


def test_prescription_medicine_requires_every_detail() -> None:
    complete = {
        "name": "Amoxicillin 500mg",
        "description": "Antibiotic",
        "sideEffects": "Nausea, rash",
        "precautions": "Tell your doctor about penicillin allergy",
    }
    result = normalize_prescription({"medicines": [complete]})
    assert result.medicines[0].side_effects == "Nausea, rash"

    for field in ("name", "description", "sideEffects", "precautions"):
        incomplete = {key: value for key, value in complete.items() if key != field}
        with pytest.raises(InvalidShape):
            normalize_prescription({"medicines": [incomplete]})


@pytest.mark.parametrize("report_kind", list(ReportKind))
@pytest.mark.parametrize(
    "extra",
    [
        {},
        {"key_findings": ["LDL 190 mg/dL"]},
        {"abnormal_results": ["LDL high"], "recommendations": ["Repeat in 3 months"]},
        {"possible_causes": ["Diet"], "dietary_recommendations": ["Less saturated fat"]},
    ],
)
def test_medical_report_requires_summary_and_disclaimer(report_kind: ReportKind, extra: dict) -> None:
    with pytest.raises(InvalidShape, match="summary: "):
        normalize_medical_report({"disclaimer": DISCLAIMER, **extra}, report_kind)

    with pytest.raises(InvalidShape, match="disclaimer: "):
        normalize_medical_report({"summary": "Normal", **extra}, report_kind)

    with pytest.raises(InvalidShape, match="summary: "):
        normalize_medical_report({"summary": "  ", "disclaimer": DISCLAIMER, **extra}, report_kind)


@pytest.mark.parametrize("report_kind", list(ReportKind))
def test_medical_report_lists_default_to_empty(report_kind: ReportKind) -> None:
    result = normalize_medical_report({"summary": "Normal", "disclaimer": DISCLAIMER}, report_kind)

    for field in REPORT_LIST_FIELDS:
        assert getattr(result, field) == []


@pytest.mark.parametrize("report_kind", [ReportKind.ECG, ReportKind.XRAY, ReportKind.MRI, ReportKind.OTHER, None])
def test_blood_only_fields_are_cleared_for_other_reports(report_kind: ReportKind | None) -> None:
    raw = {
        "summary": "Mild cardiomegaly",
        "keyFindings": ["Enlarged cardiac silhouette"],
        "possibleCauses": ["Hypertension"],
        "dietaryRecommendations": ["Reduce sodium"],
        "commonMedications": ["ACE inhibitors"],
        "disclaimer": DISCLAIMER,
    }

    result = normalize_medical_report(raw, report_kind)

    assert result.key_findings == ["Enlarged cardiac silhouette"]
    for field in BLOOD_ONLY_FIELDS:
        assert getattr(result, field) == []


def test_blood_report_keeps_supplementary_fields() -> None:
    raw = {
        "summary": "Low hemoglobin",
        "abnormal_results": ["Hemoglobin 10.1 g/dL (13.0 - 17.0)", "", None],
        "possible_causes": ["General potential causes could include iron deficiency"],
        "dietary_recommendations": ["Increasing iron-rich foods like spinach"],
        "common_medications": ["Iron supplements for anemia"],
        "disclaimer": DISCLAIMER,
    }

    result = normalize_medical_report(raw, ReportKind.BLOOD)

    assert result.abnormal_results == ["Hemoglobin 10.1 g/dL (13.0 - 17.0)"]
    assert result.possible_causes == ["General potential causes could include iron deficiency"]
    assert result.dietary_recommendations == ["Increasing iron-rich foods like spinach"]
    assert result.common_medications == ["Iron supplements for anemia"]


@pytest.mark.parametrize("raw", [None, "summary", ["not", "an", "object"], 42])
def test_non_object_output_is_invalid(raw: object) -> None:
    for task in TaskKind:
        with pytest.raises(InvalidShape, match="must be a JSON object"):
            normalize(task, raw, ReportKind.BLOOD)


def test_wrong_list_type_is_invalid() -> None:
    with pytest.raises(InvalidShape):
        normalize_medical_report({"summary": "Normal", "key_findings": "none", "disclaimer": DISCLAIMER}, ReportKind.XRAY)


@pytest.mark.parametrize(
    ("task", "raw"),
    [
        (TaskKind.PRODUCT_LABEL, {"ingredients": [{"name": "Water", "description": "Solvent"}]}),
        (TaskKind.PRESCRIPTION, {"medicines": []}),
        (TaskKind.MEDICAL_REPORT, {"summary": "Normal", "possible_causes": ["x"], "disclaimer": DISCLAIMER}),
    ],
)
def test_normalize_is_idempotent_and_does_not_mutate_input(task: TaskKind, raw: dict) -> None:
    snapshot = copy.deepcopy(raw)

    first = normalize(task, raw, ReportKind.XRAY)
    second = normalize(task, raw, ReportKind.XRAY)

    assert first == second
    assert first.model_dump() == second.model_dump()
    assert raw == snapshot
    assert first.task is task
