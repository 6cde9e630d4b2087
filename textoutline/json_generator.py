"""
JSON Generator for PDF Text Outline Extractor

This module handles the generation of JSON output files from assembled
documents, ensuring compliance with the required schema.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

from .error_handler import SerializationFailed, WriteFailed
from .json_validator import JSONValidator
from .models import Document

logger = logging.getLogger(__name__)


class JSONGenerator:
    """Handles JSON output generation and validation for outline data."""

    def __init__(self, validator: Optional[JSONValidator] = None, indent: int = 4):
        """
        Initialize JSONGenerator.

        Args:
            validator: Schema validator, built-in schema if None
            indent: Indentation of the written JSON
        """
        self.validator = validator or JSONValidator()
        self.indent = indent

    def generate_output_filename(self, input_filename: str) -> str:
        """
        Generate output JSON filename from input PDF filename.

        Args:
            input_filename: Input PDF filename (e.g., "document.pdf")

        Returns:
            Output JSON filename (e.g., "document.json")
        """
        if not isinstance(input_filename, str) or not input_filename.strip():
            raise ValueError("Invalid input filename")

        base_name = Path(input_filename).stem
        if not base_name:
            raise ValueError("Invalid input filename")

        return f"{base_name}.json"

    def encode_document(self, document: Document, file_name: str) -> str:
        """
        Validate and encode a document as JSON text.

        Args:
            document: Assembled document
            file_name: Source PDF name used in error reports

        Returns:
            JSON text

        Raises:
            SerializationFailed: If the record violates the schema or cannot be encoded
        """
        data = document.to_dict()

        errors = self.validator.get_validation_errors(data)
        if errors:
            raise SerializationFailed(file_name, "; ".join(errors))

        try:
            return json.dumps(data, indent=self.indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SerializationFailed(file_name, f"could not encode JSON: {e}") from e

    def write_json_file(self, content: str, output_path: Path, file_name: str) -> None:
        """
        Write encoded JSON to file.

        Raises:
            WriteFailed: If the file cannot be written
        """
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise WriteFailed(file_name, f"failed to write {output_path}: {e}") from e

    def write_document(self, pdf_path: Path, output_dir: Path, document: Document) -> Path:
        """
        Complete workflow to serialize a document and write its JSON output.

        Args:
            pdf_path: Path to the source PDF file
            output_dir: Directory where JSON should be written
            document: Assembled document

        Returns:
            Path to the created JSON file
        """
        try:
            output_filename = self.generate_output_filename(pdf_path.name)
        except ValueError as e:
            raise WriteFailed(pdf_path.name, str(e)) from e

        output_path = output_dir / output_filename
        content = self.encode_document(document, pdf_path.name)
        self.write_json_file(content, output_path, pdf_path.name)

        logger.debug(f"Wrote {output_path}")
        return output_path

    def check_output_directory_permissions(self, output_dir: Path) -> None:
        """
        Check if output directory has proper write permissions.

        Args:
            output_dir: Directory to check

        Raises:
            PermissionError: If directory is not writable
            OSError: If directory cannot be created
        """
        output_dir.mkdir(parents=True, exist_ok=True)

        test_file = output_dir / ".write_test"
        try:
            with open(test_file, 'w') as f:
                f.write("test")
            test_file.unlink()
        except OSError as e:
            raise PermissionError(f"Output directory {output_dir} is not writable: {e}") from e

    def validate_processing_results(self, pdf_files: List[Path], output_dir: Path) -> Dict[str, Any]:
        """
        Check which processed PDFs have a valid JSON output.

        Args:
            pdf_files: List of PDF files that were processed
            output_dir: Directory where JSON files should be located

        Returns:
            Dictionary with validation results containing:
            - 'success': bool indicating if all files have valid outputs
            - 'missing_outputs': list of PDF files without corresponding JSON
            - 'invalid_outputs': list of JSON files failing the schema
            - 'existing_outputs': list of JSON files that exist
        """
        missing_outputs = []
        invalid_outputs = []
        existing_outputs = []

        for pdf_path in pdf_files:
            output_path = output_dir / self.generate_output_filename(pdf_path.name)

            if not output_path.is_file():
                missing_outputs.append(pdf_path)
                continue

            existing_outputs.append(output_path)
            if not self.validator.validate_json_file(output_path):
                invalid_outputs.append(output_path)

        return {
            'success': not missing_outputs and not invalid_outputs,
            'missing_outputs': missing_outputs,
            'invalid_outputs': invalid_outputs,
            'existing_outputs': existing_outputs
        }

    def get_output_summary(self, output_dir: Path) -> Dict[str, Any]:
        """
        Get summary information about output directory contents.

        Args:
            output_dir: Directory to analyze

        Returns:
            Dictionary with 'json_files' count and 'total_size_mb'
        """
        json_count = 0
        total_size = 0

        if output_dir.exists():
            try:
                for file_path in output_dir.iterdir():
                    if file_path.is_file() and file_path.suffix.lower() == '.json':
                        json_count += 1
                        total_size += file_path.stat().st_size
            except OSError as e:
                logger.warning(f"Could not summarize output directory {output_dir}: {e}")

        return {
            'json_files': json_count,
            'total_size_mb': total_size / (1024 * 1024)
        }
