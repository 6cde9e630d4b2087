"""
Error Handler Component for PDF Text Outline Extractor

This module defines the per-document error taxonomy and the handler that
collects failures from concurrent document tasks, together with simple
timing and memory monitoring for the batch run.
"""

import logging
import threading
import time
import psutil
from pathlib import Path
from typing import Dict, Any, Optional, List, Callable, TypeVar
from dataclasses import dataclass
from enum import Enum

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Error severity levels for categorization."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories, one per failure kind of a document task."""
    EXTRACTION_FAILURE = "extraction_failure"
    EMPTY_DOCUMENT = "empty_document"
    SERIALIZATION_FAILURE = "serialization_failure"
    WRITE_FAILURE = "write_failure"
    UNKNOWN = "unknown"


class DocumentProcessingError(Exception):
    """Base class for failures that abort processing of a single document."""

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM

    def __init__(self, file_name: str, reason: str):
        super().__init__(reason)
        self.file_name = file_name
        self.reason = reason


class ExtractionFailed(DocumentProcessingError):
    """The text extraction step could not produce output for a document."""
    category = ErrorCategory.EXTRACTION_FAILURE


class EmptyDocument(DocumentProcessingError):
    """Extraction succeeded but yielded zero pages."""
    category = ErrorCategory.EMPTY_DOCUMENT
    severity = ErrorSeverity.LOW


class SerializationFailed(DocumentProcessingError):
    """The assembled record could not be validated or encoded."""
    category = ErrorCategory.SERIALIZATION_FAILURE
    severity = ErrorSeverity.HIGH


class WriteFailed(DocumentProcessingError):
    """The output artifact could not be persisted."""
    category = ErrorCategory.WRITE_FAILURE
    severity = ErrorSeverity.HIGH


@dataclass
class ErrorInfo:
    """Container for error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    file_name: str
    message: str
    exception: Optional[BaseException] = None


class ErrorHandler:
    """Collects document failures and monitors batch performance."""

    def __init__(self, enable_performance_monitoring: bool = True):
        """
        Initialize ErrorHandler.

        Args:
            enable_performance_monitoring: Whether to sample memory and timing
        """
        self.enable_performance_monitoring = enable_performance_monitoring

        # Append-only, shared by all document tasks
        self.error_history: List[ErrorInfo] = []
        self._lock = threading.Lock()

        # Performance monitoring
        self.start_time: Optional[float] = None
        self.peak_memory_mb: float = 0.0
        self.processed_files: int = 0
        self.processing_times: List[float] = []

        self.logger = logging.getLogger(__name__)

    def start_monitoring(self):
        """Start performance monitoring session."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()
        self.processed_files = 0
        self.logger.debug("Performance monitoring started")

    def record_error(self, file_name: str, exception: BaseException) -> ErrorInfo:
        """
        Record a failed document.

        Args:
            file_name: Name of the source PDF
            exception: The failure that aborted the document

        Returns:
            The recorded ErrorInfo
        """
        error_info = self._categorize_error(file_name, exception)
        with self._lock:
            self.error_history.append(error_info)
        self._log_error(error_info)
        return error_info

    def run_document_task(self, file_path: Path, processing_func: Callable[[Path], T]) -> Optional[T]:
        """
        Run one document's pipeline at the task boundary.

        Failures never propagate: they are recorded and None is returned.

        Args:
            file_path: Path to the PDF being processed
            processing_func: Pipeline to execute for the file

        Returns:
            The pipeline result, or None if the document failed
        """
        start_time = time.time()
        start_memory = self._get_memory_usage_mb()

        try:
            return processing_func(file_path)
        except Exception as e:
            # DocumentProcessingError and unexpected failures alike
            self.record_error(file_path.name, e)
            return None
        finally:
            processing_time = time.time() - start_time
            end_memory = self._get_memory_usage_mb()
            self._record_metrics(processing_time, end_memory)

            if self.enable_performance_monitoring:
                self.logger.debug(
                    f"File: {file_path.name}, Time: {processing_time:.2f}s, "
                    f"Memory: {start_memory:.1f}->{end_memory:.1f}MB"
                )

    def has_errors(self) -> bool:
        with self._lock:
            return bool(self.error_history)

    def get_error_messages(self) -> List[str]:
        """Formatted messages for every recorded failure, in recording order."""
        with self._lock:
            return [f"error processing {e.file_name}: {e.message}" for e in self.error_history]

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get summary of errors encountered during processing.

        Returns:
            Dictionary with error statistics and details
        """
        with self._lock:
            history = list(self.error_history)

        category_counts: Dict[str, int] = {}
        severity_counts: Dict[str, int] = {}

        for error in history:
            category_counts[error.category.value] = category_counts.get(error.category.value, 0) + 1
            severity_counts[error.severity.value] = severity_counts.get(error.severity.value, 0) + 1

        return {
            "total_errors": len(history),
            "error_categories": category_counts,
            "error_severities": severity_counts,
            "failed_files": [error.file_name for error in history]
        }

    def get_detailed_performance_metrics(self) -> Dict[str, Any]:
        """
        Get performance metrics for the session.

        Returns:
            Dictionary with timing and memory data
        """
        elapsed_time = time.time() - (self.start_time or time.time())

        with self._lock:
            times = list(self.processing_times)
            processed = self.processed_files
            peak = self.peak_memory_mb

        processing_stats = {}
        if times:
            processing_stats = {
                "min_time": min(times),
                "max_time": max(times),
                "avg_time": sum(times) / len(times),
                "total_processing_time": sum(times)
            }

        return {
            "session_metrics": {
                "elapsed_time_s": elapsed_time,
                "processed_files": processed,
                "current_memory_mb": self._get_memory_usage_mb(),
                "peak_memory_mb": peak
            },
            "processing_time_stats": processing_stats,
            "performance_ratios": {
                "files_per_second": processed / max(elapsed_time, 0.001)
            }
        }

    def _record_metrics(self, processing_time: float, memory_mb: float):
        with self._lock:
            self.processed_files += 1
            self.processing_times.append(processing_time)
            self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)

    def _categorize_error(self, file_name: str, exception: BaseException) -> ErrorInfo:
        """
        Categorize an error based on its type.

        Args:
            file_name: Name of the file being processed
            exception: The exception to categorize

        Returns:
            ErrorInfo object with categorization
        """
        if isinstance(exception, DocumentProcessingError):
            category = exception.category
            severity = exception.severity
            message = f"{type(exception).__name__}: {exception.reason}"
        else:
            category = ErrorCategory.UNKNOWN
            severity = ErrorSeverity.CRITICAL
            message = f"{type(exception).__name__}: {exception}"

        return ErrorInfo(
            category=category,
            severity=severity,
            file_name=file_name,
            message=message,
            exception=exception
        )

    def _log_error(self, error_info: ErrorInfo):
        """
        Log error with appropriate level based on severity.

        Args:
            error_info: Error information
        """
        message = f"Failed to process {error_info.file_name}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            # Unexpected failure, always with its traceback
            self.logger.critical(message, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.HIGH:
            self.logger.error(message)
        elif error_info.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(message)
        else:
            self.logger.info(message)

        if (error_info.exception and error_info.severity != ErrorSeverity.CRITICAL
                and self.logger.isEnabledFor(logging.DEBUG)):
            self.logger.debug(f"Stack trace for {error_info.file_name}:", exc_info=error_info.exception)

    def _get_memory_usage_mb(self) -> float:
        """
        Get current memory usage in MB.

        Returns:
            Memory usage in megabytes
        """
        if not self.enable_performance_monitoring:
            return 0.0
        try:
            process = psutil.Process()
            return process.memory_info().rss / (1024 * 1024)
        except psutil.Error:
            return 0.0
