"""
Aggregation Module - Reduce per-question reports to an evaluation report.
=========================================================================
"""

from typing import Iterable, Sequence, TypeVar

from pydantic import BaseModel

from claimbench.shared.exceptions import EmptyReportSet
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import EvaluationReport, QuestionFailure, QuestionReport

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)


def average_reports(reports: Sequence[R]) -> R:
    """
    Field-by-field unweighted arithmetic mean of reports of one type.

    Raises:
        EmptyReportSet: If ``reports`` is empty
    """
    if not reports:
        raise EmptyReportSet("Cannot average zero reports")

    report_type = type(reports[0])
    n = len(reports)
    return report_type(
        **{
            name: sum(getattr(report, name) for report in reports) / n
            for name in report_type.model_fields
        }
    )


def summarize(
    question_reports: Iterable[QuestionReport],
    failed_questions: Iterable[QuestionFailure] = (),
) -> EvaluationReport:
    """
    Summarize question reports into an EvaluationReport.

    Args:
        question_reports: Per-question reports in evaluation order
        failed_questions: Questions skipped in failure-isolation mode

    Returns:
        EvaluationReport with averages of each report type

    Raises:
        EmptyReportSet: If there are no question reports
    """
    question_reports = list(question_reports)
    if not question_reports:
        raise EmptyReportSet("No question reports to summarize")

    logger.info(f"Summarizing {len(question_reports)} question reports")

    return EvaluationReport(
        question_reports=question_reports,
        average_llm_report=average_reports([q.llm_report for q in question_reports]),
        average_overall_claim_report=average_reports(
            [q.overall_claim_report for q in question_reports]
        ),
        average_retrieval_claim_report=average_reports(
            [q.retrieval_claim_report for q in question_reports]
        ),
        average_generation_claim_report=average_reports(
            [q.generation_claim_report for q in question_reports]
        ),
        failed_questions=list(failed_questions),
    )
