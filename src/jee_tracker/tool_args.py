"""Typed argument records for each assistant tool.

The model sends an untyped argument bag per call. Each record below is built
from that bag with ``from_args``: values are coerced to the expected type and
anything absent or unusable becomes ``None``, so handlers can tell "not sent"
apart from a real value.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from jee_tracker.dates import coerce_iso_date
from jee_tracker.models import SubjectScore, TestScores
from jee_tracker.normalize import as_bool, as_int, as_text


def _bag(args) -> Mapping:
    return args if isinstance(args, Mapping) else {}


def _text(args: Mapping, key: str) -> Optional[str]:
    return as_text(args.get(key))


def _int(args: Mapping, key: str) -> Optional[int]:
    return as_int(args.get(key))


def _bool(args: Mapping, key: str) -> Optional[bool]:
    return as_bool(args.get(key))


def _date(args: Mapping, key: str) -> Optional[str]:
    return coerce_iso_date(args.get(key))


def _score(args: Mapping, prefix: str) -> SubjectScore:
    def count(suffix: str) -> int:
        return max(0, as_int(args.get(f"{prefix}_{suffix}"), 0))
    return SubjectScore(correct=count("correct"), incorrect=count("incorrect"), unattempted=count("unattempted"))


@dataclass(frozen=True)
class AddChapterArgs:
    name: Optional[str] = None
    subject: Optional[str] = None
    unit: Optional[str] = None
    priority: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "AddChapterArgs":
        args = _bag(args)
        return cls(
            name=_text(args, "name"),
            subject=_text(args, "subject"),
            unit=_text(args, "unit"),
            priority=_text(args, "priority"),
        )


@dataclass(frozen=True)
class UpdateChapterArgs:
    chapter_name: Optional[str] = None
    priority: Optional[str] = None
    confidence: Optional[int] = None
    rev1: Optional[bool] = None
    rev2: Optional[bool] = None
    remarks: Optional[str] = None
    unit: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "UpdateChapterArgs":
        args = _bag(args)
        return cls(
            chapter_name=_text(args, "chapterName"),
            priority=_text(args, "priority"),
            confidence=_int(args, "confidence"),
            rev1=_bool(args, "rev1"),
            rev2=_bool(args, "rev2"),
            remarks=_text(args, "remarks"),
            unit=_text(args, "unit"),
        )


@dataclass(frozen=True)
class BulkUpdateChaptersArgs:
    filter_unit: Optional[str] = None
    update_unit: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "BulkUpdateChaptersArgs":
        args = _bag(args)
        return cls(filter_unit=_text(args, "filterUnit"), update_unit=_text(args, "updateUnit"))


@dataclass(frozen=True)
class UpdatePYQArgs:
    chapter_name: Optional[str] = None
    year: Optional[int] = None
    completed: Optional[bool] = None
    done: Optional[int] = None

    @classmethod
    def from_args(cls, args) -> "UpdatePYQArgs":
        args = _bag(args)
        done = _int(args, "done")
        return cls(
            chapter_name=_text(args, "chapterName"),
            year=_int(args, "year"),
            completed=_bool(args, "completed"),
            done=max(0, done) if done is not None else None,
        )


@dataclass(frozen=True)
class AddTestArgs:
    name: Optional[str] = None
    date: Optional[str] = None
    type: Optional[str] = None
    notes: Optional[str] = None
    scores: TestScores = field(default_factory=TestScores)

    @classmethod
    def from_args(cls, args) -> "AddTestArgs":
        args = _bag(args)
        return cls(
            name=_text(args, "name"),
            date=_date(args, "date"),
            type=_text(args, "type"),
            notes=_text(args, "notes"),
            scores=TestScores(
                physics=_score(args, "physics"),
                chemistry=_score(args, "chemistry"),
                maths=_score(args, "maths"),
            ),
        )


@dataclass(frozen=True)
class AddRevisionPlanArgs:
    chapter_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    target_q: Optional[int] = None
    notes: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "AddRevisionPlanArgs":
        args = _bag(args)
        return cls(
            chapter_name=_text(args, "chapterName"),
            start_date=_date(args, "startDate"),
            end_date=_date(args, "endDate"),
            target_q=_int(args, "targetQ"),
            notes=_text(args, "notes"),
        )


@dataclass(frozen=True)
class LogDailyProgressArgs:
    date: Optional[str] = None
    physics_q: Optional[int] = None
    chemistry_q: Optional[int] = None
    math_q: Optional[int] = None
    study_time: Optional[int] = None
    remarks: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "LogDailyProgressArgs":
        args = _bag(args)

        def count(key: str) -> Optional[int]:
            value = _int(args, key)
            return max(0, value) if value is not None else None

        return cls(
            date=_date(args, "date"),
            physics_q=count("physicsQ"),
            chemistry_q=count("chemistryQ"),
            math_q=count("mathQ"),
            study_time=count("studyTime"),
            remarks=_text(args, "remarks"),
        )


@dataclass(frozen=True)
class DeleteItemArgs:
    type: Optional[str] = None
    identifier: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "DeleteItemArgs":
        args = _bag(args)
        return cls(type=_text(args, "type"), identifier=_text(args, "identifier"))
