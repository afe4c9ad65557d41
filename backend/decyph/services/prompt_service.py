from __future__ import annotations

from typing import Optional

from decyph.models.schemas import ReportKind, TaskKind

MEDICAL_DISCLAIMER = (
	"This analysis is AI-generated and for informational purposes only. "
	"It is NOT a substitute for professional medical advice. "
	"Consult with a qualified healthcare provider for any health concerns, diagnosis, or treatment decisions."
)

SYSTEM_PROMPTS = {
	TaskKind.PRODUCT_LABEL: "You are an expert product analyst specializing in ingredient labels.",
	TaskKind.PRESCRIPTION: "You are a helpful assistant knowledgeable about medications.",
	TaskKind.MEDICAL_REPORT: (
		"You are an expert medical assistant skilled at interpreting and summarizing various medical reports."
	),
}

PRODUCT_LABEL_PROMPT = """Analyze the attached product label image.

1.  Identify all ingredients listed on the label. Ignore marketing text, instructions, barcodes, or company information.
2.  For each identified ingredient, provide the following details based on your knowledge:
    *   name: The ingredient name as accurately as possible from the label.
    *   description: A brief description of what the ingredient is.
    *   common_uses: Common applications or functions of this ingredient in consumer products.
    *   pros_cons: Potential benefits and drawbacks or things to consider about this ingredient.
    *   side_effects_allergens: Any known potential side effects or common allergen concerns.
    *   warnings_regulatory: Any notable warnings, safety guidelines, or regulatory status (like FDA GRAS).

Return the results strictly in the specified JSON output format. If information for a field is not known, set it to null rather than inventing it. The 'name' field must always contain the ingredient name found on the label. If no ingredients can be identified, return an empty 'ingredients' array.
"""

PRESCRIPTION_PROMPT = """Analyze the attached prescription image.

1.  Identify each distinct medicine listed on the prescription. Include the dosage (e.g., 10mg, 500mg) if specified.
2.  For each identified medicine, provide the following information based on your knowledge:
    *   name: The full name of the medicine, including dosage (e.g., "Lisinopril 10mg", "Amoxicillin 500mg").
    *   description: Briefly explain what the medicine is used for or its drug class (e.g., "Treats high blood pressure", "Antibiotic").
    *   side_effects: List common and important potential side effects.
    *   precautions: Mention key warnings, precautions, or things to be aware of when taking this medication (e.g., interactions, pregnancy warnings, monitoring needed).

Focus solely on extracting medication information. Ignore patient names, doctor names, dates, pharmacy details unless part of the medication instruction itself.

Return the results strictly in the specified JSON output format. If multiple medicines are found, include each as an object in the 'medicines' array. If no medicines can be clearly identified, return an empty 'medicines' array.
"""

MEDICAL_REPORT_PROMPT = """Analyze the attached medical report, which is stated to be a '{report_type}' report.

Your tasks are:
1.  **Summarize:** Generate a clear, concise summary of the overall report in simple terms. Focus on the main conclusions or status.
2.  **Extract Key Findings:** Identify and list the most important specific measurements, observations, or findings mentioned.
3.  **Highlight Abnormal Results:** List any results explicitly flagged as abnormal, high, low, or outside the normal range. Include the value and reference range if available in the report.
4.  **Extract Recommendations:** List any specific recommendations, follow-up actions, or next steps mentioned within the report text. Do not add your own suggestions.
{blood_section}
{disclaimer_step}.  **Add Disclaimer:** ALWAYS include the following disclaimer in the 'disclaimer' field: "{disclaimer}"

**Important:**
*   Analyze both the text and any visual elements (like graphs in an ECG or images in X-ray/MRI), focusing primarily on textual information if present.
*   Be objective. Report only what is present in the document for tasks 1-4.
*   Ignore headers, footers, patient/doctor identifiers unless crucial for context.

Return the results strictly in the specified JSON output format. If a list field has no relevant information in the report or is not applicable, return an empty array for that field. The 'summary' and 'disclaimer' fields must always be populated.
"""

BLOOD_REPORT_SECTION = """
Because this is a blood report, also perform the following tasks:
5.  **Provide Possible Causes:** Based on the abnormal results or key findings, list some *general potential causes*. Preface with "General potential causes could include..." and keep it informational, not diagnostic.
6.  **Suggest Dietary Recommendations:** Based on the findings, provide *general dietary suggestions* that might be relevant (e.g., "Increasing iron-rich foods like spinach..." or "Reducing sodium intake..."). State clearly these are general suggestions, not personalized advice.
7.  **Mention Common Medications:** Briefly mention *examples of types of medications* that are *sometimes* used for conditions related to the findings (e.g., "Statins for high cholesterol", "Iron supplements for anemia"). Use phrases like "Examples of medications sometimes used include...". **State that this is informational only and NOT a prescription or medical advice.**
Base tasks 5-7 on general medical knowledge related to the findings, keeping them informational and non-specific to the individual.
"""

NON_BLOOD_REPORT_SECTION = """
This is not a blood report: leave the 'possible_causes', 'dietary_recommendations', and 'common_medications' fields as empty arrays.
"""


def render_prompt(task: TaskKind, report_kind: Optional[ReportKind] = None) -> str:
	"""Return the instruction text for a task; the document travels as an attachment."""
	if task is TaskKind.PRODUCT_LABEL:
		return PRODUCT_LABEL_PROMPT
	if task is TaskKind.PRESCRIPTION:
		return PRESCRIPTION_PROMPT
	if task is TaskKind.MEDICAL_REPORT:
		report = report_kind or ReportKind.OTHER
		is_blood = report is ReportKind.BLOOD
		return MEDICAL_REPORT_PROMPT.format(
			report_type=report.value,
			blood_section=BLOOD_REPORT_SECTION if is_blood else NON_BLOOD_REPORT_SECTION,
			disclaimer_step=8 if is_blood else 5,
			disclaimer=MEDICAL_DISCLAIMER,
		)
	raise ValueError(f"No prompt template for task {task!r}")


def system_prompt(task: TaskKind) -> str:
	return SYSTEM_PROMPTS[task]
