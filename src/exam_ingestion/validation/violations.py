"""
Violation records produced by the validation stages.

Unlike the exceptions in exceptions.py, these are plain data: every stage
returns the complete list of what is wrong with a document instead of
stopping at the first problem.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class StructuralViolation:
    """
    A shape, type or cardinality failure against the contract.

    Attributes:
        field_path: Dotted path to the offending value ("root" for the document)
        violation_kind: Machine-readable kind (e.g. "missing", "extra_forbidden")
        message: Human-readable description
    """

    field_path: str
    violation_kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BusinessRuleViolation:
    """
    A cross-field rule failure on a structurally valid package.

    Attributes:
        rule: Name of the violated rule (e.g. "total_marks_match")
        message: Human-readable description
        field_path: Path to the field the rule complains about
        question_id: Offending question, when the rule is question-scoped
        media_id: Offending media id, for media rules
        expected: Expected value, when the rule compares two values
        actual: Actual value found in the package
    """

    rule: str
    message: str
    field_path: str
    question_id: Optional[str] = None
    media_id: Optional[str] = None
    expected: Optional[Any] = None
    actual: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
