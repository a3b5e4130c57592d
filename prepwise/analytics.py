"""
Quiz Analytics
==============

Aggregates QuizAttempt records into per-subject, per-unit and overall
statistics. Attempts are plain dicts as stored in the quiz_attempts
collection; they are loaded into a DataFrame and grouped with pandas.

Two different notions of "average score" are used on purpose:

* per-student views average the per-attempt percentages
  (score / totalMarks * 100), every attempt weighing the same;
* the section overview divides summed scores by summed marks.
"""

from typing import Any, Dict, List

import pandas as pd

from prepwise.grading import round_half_up

ATTEMPT_COLUMNS = ["student", "quiz", "subject", "unit", "score", "totalMarks", "accuracy", "submittedAt"]


def attempts_frame(attempts: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = [{column: attempt.get(column) for column in ATTEMPT_COLUMNS} for attempt in attempts]
    df = pd.DataFrame(rows, columns=ATTEMPT_COLUMNS)
    if not df.empty:
        # populated references become dicts; group on the raw id
        df["student"] = df["student"].map(_ref_id)
        df["quiz"] = df["quiz"].map(_ref_id)
        df["unit"] = df["unit"].astype(int)
    return df


def _ref_id(value):
    return value.get("_id") if isinstance(value, dict) else value


def _mean(series: pd.Series) -> int:
    return round_half_up(series.mean()) if len(series) else 0


def _ratio(score: float, marks: float) -> int:
    return round_half_up(score / marks * 100) if marks else 0


def _key(value):
    return int(value) if not isinstance(value, str) else value


def _grouped_means(df: pd.DataFrame, key: str, sort: bool) -> List[Dict[str, Any]]:
    grouped = df.groupby(key, sort=sort).agg(
        totalAttempts=("score", "size"),
        averageScore=("score", "mean"),
        averageAccuracy=("accuracy", "mean"),
    )
    return [
        {
            key: _key(value),
            "totalAttempts": int(row.totalAttempts),
            "averageScore": round_half_up(row.averageScore),
            "averageAccuracy": round_half_up(row.averageAccuracy),
        }
        for value, row in grouped.iterrows()
    ]


def student_performance(attempts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Subject-wise and unit-wise means plus overall figures for one student."""
    df = attempts_frame(attempts)
    if df.empty:
        return {
            "totalAttempts": 0,
            "overallAverageAccuracy": 0,
            "overallAverageScore": 0,
            "subjectWise": [],
            "unitWise": [],
        }

    percentages = df["score"] / df["totalMarks"] * 100
    return {
        "totalAttempts": len(df),
        "overallAverageAccuracy": _mean(df["accuracy"]),
        "overallAverageScore": _mean(percentages),
        "subjectWise": _grouped_means(df, "subject", sort=False),
        "unitWise": _grouped_means(df, "unit", sort=True),
    }


def section_overview(attempts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Subject and unit totals across every student of a section."""
    df = attempts_frame(attempts)
    if df.empty:
        return {
            "totalAttempts": 0,
            "totalStudentsAttempted": 0,
            "overallAverageAccuracy": 0,
            "subjectAnalytics": [],
            "unitAnalytics": [],
        }

    by_subject = df.groupby("subject", sort=False).agg(
        totalAttempts=("score", "size"),
        uniqueStudents=("student", "nunique"),
        totalScore=("score", "sum"),
        totalMarks=("totalMarks", "sum"),
    )
    by_unit = df.groupby("unit", sort=True).agg(
        totalAttempts=("score", "size"),
        totalScore=("score", "sum"),
        totalMarks=("totalMarks", "sum"),
    )

    return {
        "totalAttempts": len(df),
        "totalStudentsAttempted": int(df["student"].nunique()),
        "overallAverageAccuracy": _mean(df["accuracy"]),
        "subjectAnalytics": [
            {
                "subject": subject,
                "totalAttempts": int(row.totalAttempts),
                "uniqueStudents": int(row.uniqueStudents),
                "averageScore": _ratio(row.totalScore, row.totalMarks),
            }
            for subject, row in by_subject.iterrows()
        ],
        "unitAnalytics": [
            {
                "unit": int(unit),
                "totalAttempts": int(row.totalAttempts),
                "averageScore": _ratio(row.totalScore, row.totalMarks),
            }
            for unit, row in by_unit.iterrows()
        ],
    }


def my_performance(attempts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """A student's own summary: the per-student view plus subject accuracy."""
    df = attempts_frame(attempts)
    summary = student_performance(attempts)

    subject_wise = []
    overall_percentage = 0
    if not df.empty:
        by_subject = df.groupby("subject", sort=False).agg(
            attempts=("accuracy", "size"),
            averageAccuracy=("accuracy", "mean"),
        )
        subject_wise = [
            {
                "subject": subject,
                "attempts": int(row.attempts),
                "averageAccuracy": round_half_up(row.averageAccuracy),
            }
            for subject, row in by_subject.iterrows()
        ]
        overall_percentage = _ratio(df["score"].sum(), df["totalMarks"].sum())

    return {
        "totalAttempts": summary["totalAttempts"],
        "overallAverageAccuracy": summary["overallAverageAccuracy"],
        "overallAverageScore": summary["overallAverageScore"],
        "overallPercentage": overall_percentage,
        "subjectWise": subject_wise,
        "unitWise": summary["unitWise"],
    }


def attempt_counts(attempts: List[Dict[str, Any]]) -> Dict[Any, int]:
    """Number of attempts per student id."""
    df = attempts_frame(attempts)
    if df.empty:
        return {}
    return {student: int(count) for student, count in df.groupby("student").size().items()}
