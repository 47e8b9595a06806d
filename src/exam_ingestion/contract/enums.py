"""
Enumerations for the exam package contract.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class AssessmentType(str, Enum):
    """Assessment programme the package is modelled on."""

    NAPLAN = "naplan"
    ICAS = "icas"


class ExamStatus(str, Enum):
    """Publication state of an exam package."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Subject(str, Enum):
    """Subject area covered by an exam package."""

    NUMERACY = "numeracy"
    READING = "reading"
    WRITING = "writing"
    LANGUAGE_CONVENTIONS = "language-conventions"
    MATHEMATICS = "mathematics"
    ENGLISH = "english"
    SCIENCE = "science"


class Difficulty(str, Enum):
    """Question difficulty, ordered from easy to hard."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ResponseType(str, Enum):
    """
    How a student answers a question.

    Doubles as the discriminant of the correct-answer union: every question's
    correctAnswer.type must equal its responseType.
    """

    MCQ = "mcq"
    SHORT = "short"
    EXTENDED = "extended"
    NUMERIC = "numeric"


class MediaType(str, Enum):
    """Kind of media asset."""

    IMAGE = "image"
    DIAGRAM = "diagram"
    GRAPH = "graph"


class MediaPlacement(str, Enum):
    """Where a referenced media asset sits relative to the prompt."""

    ABOVE = "above"
    INLINE = "inline"
    BELOW = "below"


MCQ_OPTION_IDS: tuple[str, ...] = ("A", "B", "C", "D")
"""Option ids every MCQ question declares, in display order."""
