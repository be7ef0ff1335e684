"""Markdown / text / JSON reports over the retail queries."""

from reports.report_utils import ReportBuilder, format_number, format_percent
from reports.sales_report import generate_sales_report, pareto_classes

__all__ = [
    'ReportBuilder',
    'format_number',
    'format_percent',
    'generate_sales_report',
    'pareto_classes',
]
