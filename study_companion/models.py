"""Records exchanged between the client and the REST layer.

Wire names follow the camelCase JSON the API speaks; attributes are snake_case.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def round_half_up(value) -> int:
    return int(math.floor(float(value) + 0.5))


def compute_percentage(score, total_questions) -> int:
    """Half-up rounding of score/total as a whole percentage."""
    total = float(total_questions)
    if total == 0:
        raise ValueError('total_questions must be non-zero')
    return round_half_up(float(score) / total * 100)


@dataclass(frozen=True)
class User:
    email: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(email=str(data.get('email', '')))

    def to_dict(self) -> Dict[str, Any]:
        return {'email': self.email}


@dataclass(frozen=True)
class Summary:
    id: str
    title: str
    original_content: str
    summary_content: str
    created_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Summary':
        return cls(
            id=str(data.get('id', '')),
            title=str(data.get('title', '') or ''),
            original_content=str(data.get('originalContent', '') or ''),
            summary_content=str(data.get('summaryContent', '') or ''),
            created_at=str(data.get('createdAt', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'originalContent': self.original_content,
            'summaryContent': self.summary_content,
            'createdAt': self.created_at,
        }


@dataclass
class StudyTask:
    id: str
    summary_id: str
    summary_title: str
    hours: float
    is_completed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StudyTask':
        return cls(
            id=str(data.get('id', '')),
            summary_id=str(data.get('summaryId', '')),
            summary_title=str(data.get('summaryTitle', '') or ''),
            hours=float(data.get('hours', 0) or 0),
            is_completed=bool(data.get('isCompleted', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'summaryId': self.summary_id,
            'summaryTitle': self.summary_title,
            'hours': self.hours,
            'isCompleted': self.is_completed,
        }


@dataclass(frozen=True)
class QuizHistoryEntry:
    id: str
    summary_title: str
    score: int
    total_questions: int
    percentage: int
    created_at: str

    @classmethod
    def from_score(cls, summary_title: str, score: int, total_questions: int, *, entry_id: Optional[str] = None) -> 'QuizHistoryEntry':
        created_at = utc_now_iso()
        return cls(
            id=entry_id or str(int(datetime.now(timezone.utc).timestamp() * 1000)),
            summary_title=summary_title,
            score=score,
            total_questions=total_questions,
            percentage=compute_percentage(score, total_questions),
            created_at=created_at,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuizHistoryEntry':
        total = data.get('totalQuestions', data.get('total', 0))
        return cls(
            id=str(data.get('id', '')),
            summary_title=str(data.get('summaryTitle', data.get('topic', '')) or ''),
            score=int(data.get('score', 0) or 0),
            total_questions=int(total or 0),
            percentage=round_half_up(data.get('percentage', 0) or 0),
            created_at=str(data.get('createdAt', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'summaryTitle': self.summary_title,
            'score': self.score,
            'totalQuestions': self.total_questions,
            'percentage': self.percentage,
            'createdAt': self.created_at,
        }


@dataclass(frozen=True)
class QuizQuestion:
    question: str
    options: List[str]
    correct_answer: str
    explanation: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QuizQuestion':
        return cls(
            question=str(data.get('question', '')),
            options=[str(option) for option in data.get('options', []) or []],
            correct_answer=str(data.get('correctAnswer', '')),
            explanation=str(data.get('explanation', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'question': self.question,
            'options': list(self.options),
            'correctAnswer': self.correct_answer,
            'explanation': self.explanation,
        }
