"""
Common Components for the Question Bank

This package contains infrastructure shared by every layer of the application.

Key components:
1. Logging - Centralized logging configuration
2. Error Handling - Error hierarchy mapped onto HTTP status codes
3. Validation - Validator factories and violation collection
"""

# Initialize logging
from questionbank.common.logger import app_logger

from questionbank.common.error_handling import (
    QuestionBankError, ValidationError, NotFoundError, QuestionNotFoundError,
    UnexpectedError, DatabaseError, ErrorCode, ErrorSeverity
)

from questionbank.common.validation import FieldViolation, ValidationResult

__all__ = [
    'app_logger',
    'QuestionBankError', 'ValidationError', 'NotFoundError', 'QuestionNotFoundError',
    'UnexpectedError', 'DatabaseError', 'ErrorCode', 'ErrorSeverity',
    'FieldViolation', 'ValidationResult',
]
