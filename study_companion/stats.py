"""Quiz grading and schedule progress figures shown on the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from study_companion.models import QuizQuestion, StudyTask, compute_percentage


def grade_quiz(questions: Sequence[QuizQuestion], answers: Sequence[Optional[str]]) -> int:
    """Number of answers equal to the question's correct answer, matched by position.

    Unanswered questions (a missing or ``None`` answer) count as wrong.
    """
    return sum(
        1
        for index, question in enumerate(questions)
        if index < len(answers) and answers[index] == question.correct_answer
    )


@dataclass(frozen=True)
class ScheduleStats:
    total_tasks: int
    completed_tasks: int
    completion_percentage: int
    scheduled_hours: float
    completed_hours: float

    @property
    def all_completed(self) -> bool:
        return self.total_tasks > 0 and self.completed_tasks == self.total_tasks


def schedule_stats(tasks: Sequence[StudyTask]) -> ScheduleStats:
    completed = [task for task in tasks if task.is_completed]
    return ScheduleStats(
        total_tasks=len(tasks),
        completed_tasks=len(completed),
        completion_percentage=compute_percentage(len(completed), len(tasks)) if tasks else 0,
        scheduled_hours=sum(task.hours for task in tasks),
        completed_hours=sum(task.hours for task in completed),
    )


def study_hours_by_summary(tasks: Sequence[StudyTask]) -> Dict[str, float]:
    # Completed tasks only, keyed by title in first-seen order.
    hours: Dict[str, float] = {}
    for task in tasks:
        if task.is_completed:
            hours[task.summary_title] = hours.get(task.summary_title, 0) + task.hours
    return hours
