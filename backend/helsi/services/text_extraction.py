"""
Document Text Extraction - Produces plain text for an uploaded file.

Images go through the OCR service when it is enabled. PDFs and everything
else, and images when OCR is off or fails, get a simulated report chosen from
the file name so the rest of the pipeline always has text to work on.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from .ocr import OCRService

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """An uploaded file held in memory."""
    file_name: str
    mime_type: str
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)


def classify_file_type(mime_type: str) -> str:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type == "application/pdf":
        return "pdf"
    return "lab_report"


@dataclass(frozen=True)
class ReportScenario:
    title: str
    results: List[str]
    medications: List[str]
    diagnoses: List[str]
    recommendations: List[str]


SCENARIOS: Dict[str, ReportScenario] = {
    "lab": ReportScenario(
        title="Complete Blood Count & Metabolic Panel",
        results=[
            "Hemoglobin: 13.8 g/dL (Normal: 12-16)",
            "White Blood Cells: 7.2 K/μL (Normal: 4.5-11.0)",
            "Platelets: 285 K/μL (Normal: 150-450)",
            "Glucose: 88 mg/dL (Normal: 70-100)",
            "Creatinine: 0.9 mg/dL (Normal: 0.6-1.2)",
            "Total Cholesterol: 192 mg/dL (Normal: <200)",
            "HDL: 45 mg/dL (Normal: >40)",
            "LDL: 125 mg/dL (Normal: <100)",
        ],
        medications=["Multivitamin daily", "Omega-3 1000mg daily"],
        diagnoses=["Normal lab values", "Mild hyperlipidemia"],
        recommendations=["Continue current diet", "Consider statin therapy", "Annual follow-up"],
    ),
    "cardiac": ReportScenario(
        title="Cardiovascular Assessment",
        results=[
            "Blood Pressure: 128/82 mmHg (Elevated)",
            "Heart Rate: 72 bpm (Normal)",
            "EKG: Normal sinus rhythm",
            "Echocardiogram: EF 58% (Normal)",
            "Cholesterol: 210 mg/dL (Borderline high)",
            "Triglycerides: 145 mg/dL (Normal)",
        ],
        medications=["Lisinopril 10mg daily", "Atorvastatin 20mg daily"],
        diagnoses=["Hypertension", "Hyperlipidemia"],
        recommendations=["Low sodium diet", "Regular exercise", "Blood pressure monitoring",
                         "Cardiology follow-up"],
    ),
    "diabetes": ReportScenario(
        title="Diabetes Management Report",
        results=[
            "HbA1c: 6.8% (Pre-diabetes: 5.7-6.4%)",
            "Fasting Glucose: 108 mg/dL (Normal: <100)",
            "2-hour Glucose: 145 mg/dL (Normal: <140)",
            "BMI: 28.5 (Overweight)",
            "Blood Pressure: 135/85 mmHg (Elevated)",
        ],
        medications=["Metformin 500mg twice daily", "Lisinopril 5mg daily"],
        diagnoses=["Pre-diabetes", "Metabolic syndrome"],
        recommendations=["Weight loss 10-15 lbs", "Low carb diet", "Regular exercise",
                         "Glucose monitoring"],
    ),
    "nutrition": ReportScenario(
        title="Nutritional Assessment",
        results=[
            "Vitamin D: 22 ng/mL (Deficient: <30)",
            "B12: 450 pg/mL (Normal: >300)",
            "Folate: 8.5 ng/mL (Normal: >4)",
            "Iron: 85 μg/dL (Normal: 60-170)",
            "Ferritin: 45 ng/mL (Normal: 15-150)",
            "Calcium: 9.8 mg/dL (Normal: 8.5-10.5)",
        ],
        medications=["Vitamin D3 2000 IU daily", "Iron supplement 65mg daily"],
        diagnoses=["Vitamin D deficiency", "Mild iron deficiency"],
        recommendations=["Sun exposure 15-30 min daily", "Iron-rich foods", "Calcium supplementation"],
    ),
    "general": ReportScenario(
        title="General Health Assessment",
        results=[
            "Blood Pressure: 120/80 mmHg (Normal)",
            "Heart Rate: 68 bpm (Normal)",
            "BMI: 24.2 (Normal)",
            "Glucose: 92 mg/dL (Normal)",
            "Cholesterol: 185 mg/dL (Normal)",
            "Vitamin D: 35 ng/mL (Normal)",
        ],
        medications=["Multivitamin daily"],
        diagnoses=["Good overall health"],
        recommendations=["Maintain current lifestyle", "Annual physical", "Continue preventive care"],
    ),
}

# Checked in order, first hit wins
SCENARIO_KEYWORDS = (
    ("lab", ("blood", "lab")),
    ("cardiac", ("heart", "cardiac")),
    ("diabetes", ("diabetes", "glucose")),
    ("nutrition", ("vitamin", "nutrition")),
)


def select_scenario(file_name: str) -> str:
    lowered = file_name.lower()
    for scenario, keywords in SCENARIO_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return scenario
    return "general"


def generate_simulated_report(file_name: str, mime_type: str, today: Optional[date] = None) -> str:
    """Render the canned report for the scenario matching the file name."""
    scenario = SCENARIOS[select_scenario(file_name)]
    report_date = (today or date.today()).strftime("%m/%d/%Y")

    def bullets(items: List[str]) -> str:
        return "\n".join(f"- {item}" for item in items)

    return (
        f"{scenario.title}\n"
        f"Patient: Health Assessment\n"
        f"Date: {report_date}\n"
        f"File: {file_name}\n"
        f"File Type: {mime_type}\n"
        f"\n"
        f"Lab Results:\n{bullets(scenario.results)}\n"
        f"\n"
        f"Medications:\n{bullets(scenario.medications)}\n"
        f"\n"
        f"Diagnoses:\n{bullets(scenario.diagnoses)}\n"
        f"\n"
        f"Recommendations:\n{bullets(scenario.recommendations)}\n"
        f"\n"
        f"Note: This analysis is based on simulated medical data for demonstration purposes."
    )


class TextExtractor:
    """Chooses a text source per file type."""

    def __init__(self, ocr: Optional[OCRService] = None):
        """
        Args:
            ocr: OCR service for images; None disables OCR
        """
        self.ocr = ocr

    async def extract(self, file: UploadedFile) -> str:
        file_type = classify_file_type(file.mime_type)

        if file_type == "image" and self.ocr is not None:
            try:
                return await self.ocr.extract_text(file.content, file.mime_type)
            except Exception as e:
                logger.warning(
                    f"OCR failed for {file.file_name}, using simulated report: {e}",
                    extra={"extra_fields": {"file_name": file.file_name, "error_type": type(e).__name__}}
                )

        # PDF text extraction is not implemented; images without OCR land here too
        return generate_simulated_report(file.file_name, file.mime_type)
