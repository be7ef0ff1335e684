"""
Tests for the report builder and the sales report.
"""

import json

import pandas as pd
import pytest

from reports.report_utils import ReportBuilder, format_number, format_percent
from reports.sales_report import generate_sales_report, pareto_classes


class TestFormatting:

    @pytest.mark.parametrize('value,decimals,expected', [
        (1234.5, 2, '1,234.50'),
        (1234.5, 0, '1,234'),
        (7, 0, '7'),
        (None, 2, '-'),
        (float('nan'), 2, '-'),
        ('n/a', 2, 'n/a'),
    ])
    def test_format_number(self, value, decimals, expected):
        assert format_number(value, decimals) == expected

    def test_format_percent(self):
        assert format_percent(0.25) == '25.0%'
        assert format_percent(0.8, 0) == '80%'
        assert format_percent(None) == '-'


class TestReportBuilder:

    def test_table_shape_checked(self):
        report = ReportBuilder("T")
        with pytest.raises(ValueError):
            report.add_table("x", ["a", "b"], [["1"]])
        with pytest.raises(ValueError):
            report.add_table("x", ["a", "b"], [], alignments=['l'])

    def test_markdown_layout(self):
        report = ReportBuilder("Title", profile='demo')
        report.add_metric("Orders", 3)
        report.add_section("Notes", "hello")
        report.add_table("Numbers", ["k", "v"], [["a", "1"]], alignments=['l', 'r'])
        md = report.to_markdown()

        assert md.startswith("# Title")
        assert "profile `demo`" in md
        assert "- **Orders**: 3" in md
        assert "| :--- | ---: |" in md
        assert md.index("## Notes") < md.index("## Numbers")

    def test_text_empty_table(self):
        report = ReportBuilder("Title")
        report.add_table("Nothing", ["col"], [])
        assert "Nothing" in report.to_text()

    def test_save(self, tmp_path):
        report = ReportBuilder("Title")
        report.add_metric("Revenue", 12.5, unit='USD')

        md_path = report.save_markdown(tmp_path / 'nested' / 'r.md')
        json_path = report.save_json(tmp_path / 'r.json')

        assert md_path.read_text().startswith("# Title")
        data = json.loads(json_path.read_text())
        assert data['metrics'][0] == {'name': 'Revenue', 'value': 12.5, 'unit': 'USD'}


class TestSalesReport:

    def test_pareto_classes(self, orchestrator):
        classes = pareto_classes(orchestrator.run_query('product_pareto'))
        assert classes.to_dict() == {'A': 1, 'B': 2, 'C': 2}

    def test_pareto_classes_boundaries(self):
        df = pd.DataFrame({'cumulative_revenue_percentage': [0.80, 0.95, 1.0]})
        assert pareto_classes(df).tolist() == [1, 1, 1]

    def test_sections(self, orchestrator):
        report = generate_sales_report(orchestrator, profile_name='default')
        titles = [block['title'] for block in report.blocks]

        assert titles == [
            "Revenue by Category",
            "Monthly Sales",
            "Top Customers by Lifetime Value",
            "Product Revenue Concentration",
            "Top Products by Revenue",
            "Customers Without Orders",
        ]
        metrics = {m['name']: m['value'] for m in report.metrics}
        assert metrics['Orders'] == 7
        assert metrics['Line Revenue'] == pytest.approx(2250.0)
        assert metrics['Customers Without Orders'] == 2

    def test_markdown_content(self, orchestrator):
        md = generate_sales_report(orchestrator).to_markdown()
        assert "| Electronics | 2 | 2 | 2,000.00 |" in md
        assert "A (first 80% of revenue): 1 products" in md
        assert "Eve Stone <eve@example.com>" in md
        assert "| 2023-01 |" in md

    def test_monthly_rows(self, orchestrator):
        report = generate_sales_report(orchestrator)
        monthly = next(b for b in report.blocks if b['title'] == "Monthly Sales")
        assert len(monthly['rows']) == 7

    def test_without_views(self, orchestrator):
        orchestrator.get_stage('views').drop()
        report = generate_sales_report(orchestrator)
        monthly = next(b for b in report.blocks if b['title'] == "Monthly Sales")
        assert monthly['kind'] == 'section'

    def test_empty_database(self, empty_orchestrator):
        empty_orchestrator.run_all()
        report = generate_sales_report(empty_orchestrator)
        text = report.to_text()
        assert "No order lines loaded" in text
        assert "Every customer has ordered" in text
