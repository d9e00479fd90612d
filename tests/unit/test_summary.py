"""
Unit Tests - View Composition
"""
from decimal import Decimal

from salesviz.aggregation import (
    UNCATEGORIZED,
    Granularity,
    compose_dashboard,
    compose_person_detail,
)
from salesviz.aggregation.aggregator import RecordFrame
from salesviz.aggregation.records import SalesPerson
from salesviz.aggregation.summary import achievement_rate, average, summarize_person


class TestDashboard:
    """Tests for compose_dashboard"""

    def test_round_trip_scenario(self, make_record, colors):
        """Three records over two Mondays"""
        records = [
            make_record("1", "2024-01-01", 100),
            make_record("2", "2024-01-01", 50),
            make_record("3", "2024-01-08", 200),
        ]

        view = compose_dashboard(records, colors)

        daily = view.series[Granularity.DAY]
        assert [(b.key, b.amount) for b in daily] == [
            ("2024-01-01", Decimal("150")),
            ("2024-01-08", Decimal("200")),
        ]
        assert [b.running_total for b in daily] == [Decimal("150"), Decimal("350")]

        weekly = view.series[Granularity.WEEK]
        assert [(b.key, b.amount) for b in weekly] == [
            ("2023-12-31", Decimal("150")),
            ("2024-01-07", Decimal("200")),
        ]

        monthly = view.series[Granularity.MONTH]
        assert [(b.key, b.amount, b.count) for b in monthly] == [("2024-01", Decimal("350"), 3)]

    def test_kpis(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors)

        assert view.kpis.total_sales == Decimal("850")
        assert view.kpis.order_count == 6
        assert view.kpis.unique_customers == 4
        assert view.kpis.average_order_value == Decimal("850") / 6

    def test_empty_record_set(self, colors):
        view = compose_dashboard([], colors)

        assert view.kpis.total_sales == Decimal("0")
        assert view.kpis.average_order_value == Decimal("0")
        assert view.kpis.unique_customers == 0
        assert all(series == [] for series in view.series.values())
        assert view.categories == []
        assert view.salespeople == []
        assert view.recent_records == []

    def test_categories_first_seen_with_palette_colors(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors)

        assert [b.key for b in view.categories] == ["Hardware", UNCATEGORIZED, "Services"]
        assert view.category_colors == {
            "Hardware": colors.palette[0],
            UNCATEGORIZED: colors.palette[1],
            "Services": colors.palette[2],
        }
        assert view.categories[1].amount == Decimal("50")

    def test_salespeople_cards(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors)

        names = [s.name for s in view.salespeople]
        assert names == ["松澤", "坂口", "斉藤", "新人"]

        matsuzawa = view.salespeople[0]
        assert matsuzawa.total_amount == Decimal("400")
        assert matsuzawa.deal_count == 2
        assert matsuzawa.average_deal_size == Decimal("200")
        assert [b.key for b in matsuzawa.daily_series] == ["2024-01-01", "2024-01-03"]
        assert matsuzawa.color == "#60a5fa"

    def test_unknown_salesperson_gets_unowned_palette_color(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors)

        newcomer = view.salespeople[3]
        assert newcomer.name == "新人"
        assert newcomer.color in ("#ef4444", "#06b6d4")

    def test_unknown_salesperson_color_matches_detail(self, sample_records, colors):
        """Test a person keeps one color across the card and the detail view"""
        view = compose_dashboard(sample_records, colors)

        detail = compose_person_detail("新人", sample_records, None, colors)

        assert detail.summary.color == view.salespeople[3].color

    def test_recent_records_newest_first(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors, recent_limit=2)

        assert [r.id for r in view.recent_records] == ["r6", "r5"]

    def test_recent_limit_zero(self, sample_records, colors):
        view = compose_dashboard(sample_records, colors, recent_limit=0)

        assert view.recent_records == []


class TestPersonDetail:
    """Tests for compose_person_detail"""

    def test_detail_with_reference_data(self, sample_records, sample_person, colors):
        own = [r for r in sample_records if r.sales_person == "松澤"]

        detail = compose_person_detail("松澤", own, sample_person, colors)

        assert detail.summary.total_amount == Decimal("400")
        assert detail.achievement_rate == Decimal("50")
        assert detail.person is sample_person
        assert [e.key for e in detail.top_customers] == ["Initech", "Acme"]
        assert [s.key for s in detail.products] == ["Service Pack", "Widget"]
        assert [s.share for s in detail.products] == [Decimal("0.75"), Decimal("0.25")]

    def test_product_colors_follow_first_seen_order(self, sample_records, sample_person, colors):
        own = [r for r in sample_records if r.sales_person == "松澤"]

        detail = compose_person_detail("松澤", own, sample_person, colors)

        assert detail.product_colors == {"Widget": colors.palette[0], "Service Pack": colors.palette[1]}

    def test_missing_reference_row(self, sample_records, colors):
        own = [r for r in sample_records if r.sales_person == "坂口"]

        detail = compose_person_detail("坂口", own, None, colors)

        assert detail.person is None
        assert detail.summary.total_amount == Decimal("125")
        assert detail.achievement_rate == Decimal("0")

    def test_ignores_other_people(self, sample_records, sample_person, colors):
        detail = compose_person_detail("松澤", sample_records, sample_person, colors)

        assert detail.summary.deal_count == 2

    def test_top_customers_truncated(self, make_record, colors):
        records = [
            make_record(str(i), "2024-01-01", 10 * (i + 1), customer_name=f"c{i}")
            for i in range(7)
        ]

        detail = compose_person_detail("松澤", records, None, colors, top=5)

        assert [e.key for e in detail.top_customers] == ["c6", "c5", "c4", "c3", "c2"]

    def test_empty_detail(self, sample_person, colors):
        detail = compose_person_detail("松澤", [], sample_person, colors)

        assert detail.summary.average_deal_size == Decimal("0")
        assert detail.achievement_rate == Decimal("0")
        assert detail.products == []


class TestZeroGuards:
    """Tests for division guards"""

    def test_average_of_nothing(self):
        assert average(Decimal("0"), 0) == Decimal("0")

    def test_achievement_without_target(self):
        person = SalesPerson(name="x", monthly_target=Decimal("0"))

        assert achievement_rate(Decimal("100"), person) == Decimal("0")

    def test_achievement_without_person(self):
        assert achievement_rate(Decimal("100"), None) == Decimal("0")

    def test_summarize_empty(self):
        summary = summarize_person("誰か", RecordFrame([]))

        assert summary.deal_count == 0
        assert summary.average_deal_size == Decimal("0")
        assert summary.daily_series == []
