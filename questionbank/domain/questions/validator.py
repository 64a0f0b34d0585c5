"""
Question Validation Engine

Evaluates the rule tables in ``schemas`` against raw wire payloads. Every
applicable rule runs and all violations are collected; within one field only
the first failing check is reported. The functions here are pure and never
touch storage.
"""

from typing import Any, List, Mapping, Optional

from questionbank.common.validation import FieldViolation, ValidationResult, is_blank
from questionbank.domain.questions.model import QuestionType
from questionbank.domain.questions.schemas import (
    BASE_SCHEMA,
    CONTENT_SCHEMAS,
    QUERY_SCHEMA,
    FieldRule,
    ObjectSchema,
)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _is_missing(rule: FieldRule, value: Any) -> bool:
    if rule.strip_blank:
        return is_blank(value)
    return value is None or value == ""


def _run_checks(checks, value: Any) -> Any:
    for check in checks:
        value = check(value)
    return value


def _evaluate_field(rule: FieldRule, value: Any, path: str) -> List[FieldViolation]:
    try:
        value = _run_checks(rule.checks, value)
    except ValueError as e:
        return [FieldViolation(path, str(e))]

    violations = []

    if rule.item_checks or rule.item_schema is not None:
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            if rule.item_checks:
                try:
                    _run_checks(rule.item_checks, item)
                except ValueError as e:
                    violations.append(FieldViolation(item_path, str(e)))
            if rule.item_schema is not None:
                if isinstance(item, dict):
                    violations.extend(evaluate(rule.item_schema, item, item_path))
                else:
                    violations.append(FieldViolation(item_path, "Each item must be an object"))

    if rule.schema is not None:
        violations.extend(evaluate(rule.schema, value, path))

    return violations


def evaluate(
    schema: ObjectSchema,
    data: Mapping[str, Any],
    prefix: str = "",
    partial: bool = False
) -> List[FieldViolation]:
    """
    Evaluate a rule table against one object.

    Args:
        schema: Rules to apply
        data: Object to validate
        prefix: Path of ``data`` inside the payload, e.g. ``content.options[1]``
        partial: Only report required values that are present but blank

    Returns:
        Violations in rule order, cross-field violations last
    """
    violations = []

    for rule in schema.fields:
        path = _join(prefix, rule.name)
        value = data.get(rule.name)

        if _is_missing(rule, value):
            if rule.required and not (partial and value is None):
                violations.append(FieldViolation(path, rule.required_message or f"{rule.name} is required"))
            continue

        violations.extend(_evaluate_field(rule, value, path))

    for cross_rule in schema.cross_rules:
        if not cross_rule.holds(data):
            violations.append(FieldViolation(_join(prefix, cross_rule.field), cross_rule.message))

    return violations


def validate_content(question_type: QuestionType, content: Any, prefix: str = "content") -> ValidationResult:
    """
    Validate a content variant against the rules of ``question_type``.

    Args:
        question_type: Declared (or stored) question type
        content: Raw content object from the wire
        prefix: Path reported for the content object

    Returns:
        ValidationResult with the collected violations
    """
    if is_blank(content):
        return ValidationResult([FieldViolation(prefix, "Content is required")])
    if not isinstance(content, dict):
        return ValidationResult([FieldViolation(prefix, "Content must be an object")])
    return ValidationResult(evaluate(CONTENT_SCHEMAS[question_type], content, prefix))


def validate(question_type: Optional[Any], payload: Any) -> ValidationResult:
    """
    Validate a full question payload.

    Base rules always run. Content rules are dispatched by ``question_type``
    and skipped when the type is absent or unknown.
    """
    if not isinstance(payload, dict):
        return ValidationResult([FieldViolation("body", "Request body must be an object")])

    violations = evaluate(BASE_SCHEMA, payload)

    resolved_type = QuestionType.parse(question_type)
    if resolved_type is not None:
        violations.extend(validate_content(resolved_type, payload.get("content")).violations)

    return ValidationResult(violations)


def validate_question(payload: Any) -> ValidationResult:
    """Validate a create payload, dispatching on its own ``type`` key."""
    question_type = payload.get("type") if isinstance(payload, dict) else None
    return validate(question_type, payload)


def validate_question_update(payload: Any) -> ValidationResult:
    """
    Validate the base fields present in an update payload.

    Absent keys are left alone. ``type`` is not checked since it never
    changes, and ``content`` is validated by the service against the stored
    type.
    """
    if not isinstance(payload, dict):
        return ValidationResult([FieldViolation("body", "Request body must be an object")])

    present = {key: value for key, value in payload.items() if key != "type"}
    return ValidationResult(evaluate(BASE_SCHEMA, present, partial=True))


def validate_query_params(params: Mapping[str, Any]) -> ValidationResult:
    return ValidationResult(evaluate(QUERY_SCHEMA, dict(params), partial=True))

