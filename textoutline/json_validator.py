"""
JSON Schema Validator for PDF Text Outline Extractor

This module provides validation functionality to ensure output JSON
conforms to the required schema format.
"""

import json
import jsonschema
from pathlib import Path
from typing import Dict, List, Any

from .config import SUPPORTED_HEADING_LEVELS

OUTLINE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "minLength": 1
        },
        "outline": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "level": {
                        "type": "string",
                        "enum": SUPPORTED_HEADING_LEVELS
                    },
                    "text": {
                        "type": "string",
                        "minLength": 1
                    },
                    "page": {
                        "type": "integer",
                        "minimum": 0
                    }
                },
                "required": ["level", "text", "page"],
                "additionalProperties": False
            }
        }
    },
    "required": ["title", "outline"],
    "additionalProperties": False
}


class JSONValidator:
    """Validates JSON output against the required schema."""

    def __init__(self):
        self.schema = OUTLINE_SCHEMA

    def validate_json_data(self, data: Dict[str, Any]) -> bool:
        """
        Validate JSON data against the schema.

        Args:
            data: Dictionary containing the JSON data to validate

        Returns:
            True if valid, False otherwise
        """
        return not self.get_validation_errors(data)

    def validate_json_file(self, file_path: Path) -> bool:
        """
        Validate JSON file against the schema.

        Args:
            file_path: Path to JSON file to validate

        Returns:
            True if valid, False otherwise
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self.validate_json_data(data)
        except (json.JSONDecodeError, OSError):
            return False

    def get_validation_errors(self, data: Dict[str, Any]) -> List[str]:
        """
        Get detailed validation errors for JSON data.

        Args:
            data: Dictionary containing the JSON data to validate

        Returns:
            List of validation error messages
        """
        errors = []
        try:
            jsonschema.validate(data, self.schema)
        except jsonschema.ValidationError as e:
            errors.append(f"Validation error: {e.message}")
            if e.path:
                errors.append(f"Error path: {' -> '.join(str(p) for p in e.path)}")
        except jsonschema.SchemaError as e:
            errors.append(f"Schema error: {e.message}")

        return errors
