from __future__ import annotations

import pytest

from decyph.models.schemas import (
    MedicalReportOutput,
    PrescriptionOutput,
    ProductLabelOutput,
    ReportKind,
    TaskKind,
)
from decyph.services.prompt_service import MEDICAL_DISCLAIMER, render_prompt
from decyph.services.tasks import MedicalReportTask, PrescriptionTask, ProductLabelTask, get_task


def test_product_label_prompt_covers_every_detail_field() -> None:
    prompt = render_prompt(TaskKind.PRODUCT_LABEL)

    assert "Ignore marketing text" in prompt
    for field in ("description", "common_uses", "pros_cons", "side_effects_allergens", "warnings_regulatory"):
        assert field in prompt
        assert field in ProductLabelOutput.model_json_schema()["$defs"]["IngredientOutput"]["properties"]


def test_prescription_prompt_ignores_identifiers_and_allows_empty_list() -> None:
    prompt = render_prompt(TaskKind.PRESCRIPTION)

    assert "Ignore patient names, doctor names, dates" in prompt
    assert "return an empty 'medicines' array" in prompt


def test_blood_report_prompt_requests_supplementary_fields() -> None:
    prompt = render_prompt(TaskKind.MEDICAL_REPORT, ReportKind.BLOOD)

    assert "'blood' report" in prompt
    assert "Provide Possible Causes" in prompt
    assert "Suggest Dietary Recommendations" in prompt
    assert "NOT a prescription or medical advice" in prompt
    assert MEDICAL_DISCLAIMER in prompt


@pytest.mark.parametrize("report_kind", [ReportKind.ECG, ReportKind.XRAY, ReportKind.MRI, ReportKind.OTHER])
def test_non_blood_report_prompt_leaves_supplementary_fields_empty(report_kind: ReportKind) -> None:
    prompt = render_prompt(TaskKind.MEDICAL_REPORT, report_kind)

    assert f"'{report_kind.value}' report" in prompt
    assert "Provide Possible Causes" not in prompt
    assert "leave the 'possible_causes', 'dietary_recommendations', and 'common_medications' fields as empty arrays" in prompt
    assert MEDICAL_DISCLAIMER in prompt


def test_get_task_builds_the_matching_variant() -> None:
    product = get_task(TaskKind.PRODUCT_LABEL)
    prescription = get_task(TaskKind.PRESCRIPTION)
    report = get_task(TaskKind.MEDICAL_REPORT, ReportKind.MRI)

    assert isinstance(product, ProductLabelTask)
    assert product.output_schema is ProductLabelOutput
    assert isinstance(prescription, PrescriptionTask)
    assert prescription.output_schema is PrescriptionOutput
    assert isinstance(report, MedicalReportTask)
    assert report.output_schema is MedicalReportOutput
    assert report.report_kind is ReportKind.MRI
    assert report.render_prompt() == render_prompt(TaskKind.MEDICAL_REPORT, ReportKind.MRI)
    assert "medical reports" in report.system_prompt()


def test_get_task_requires_report_kind_for_medical_reports() -> None:
    with pytest.raises(ValueError):
        get_task(TaskKind.MEDICAL_REPORT)
