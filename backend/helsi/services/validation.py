"""
Structural validation of extracted medical data.
"""

from typing import Any, Dict, Union

from pydantic import ValidationError

from ..core.exceptions import InvalidMedicalDataError
from ..models import ExtractedMedicalData

REQUIRED_LIST_FIELDS = ("biomarkers", "medications", "diagnoses", "recommendations")


def validate_medical_data(data: Union[Dict[str, Any], ExtractedMedicalData, None]) -> ExtractedMedicalData:
    """
    Check the shape of extracted data and parse it.

    The four collections must be present as lists (empty is fine) and
    ``documentType`` must be a string. Keys may be camelCase or snake_case.

    Raises:
        InvalidMedicalDataError: If the data does not have the required shape
    """
    if isinstance(data, ExtractedMedicalData):
        return data
    if not isinstance(data, dict):
        raise InvalidMedicalDataError("Extracted medical data must be an object")

    document_type = data.get("documentType", data.get("document_type"))
    if not isinstance(document_type, str):
        raise InvalidMedicalDataError("documentType must be a string")

    for field_name in REQUIRED_LIST_FIELDS:
        if not isinstance(data.get(field_name), list):
            raise InvalidMedicalDataError(f"{field_name} must be a list")

    try:
        return ExtractedMedicalData.model_validate(data)
    except ValidationError as e:
        raise InvalidMedicalDataError(f"Invalid medical data: {e.error_count()} field error(s)") from e
