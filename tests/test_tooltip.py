from datetime import date, timedelta

import pytest

from ganttscale.headers import HeaderLayout, HeaderPeriod, HeaderTier
from ganttscale.tooltip import TooltipRequest, TooltipResult, ViewportTooltipCalculator


def _periods(count=5, width=100.0):
    start = date(2025, 1, 1)
    return [
        HeaderPeriod(
            start=start + timedelta(days=index),
            end=start + timedelta(days=index),
            width=width,
            x_offset=index * width,
            label=f"P{index}",
            tier=HeaderTier.SECONDARY,
        )
        for index in range(count)
    ]


@pytest.fixture
def calculator():
    return ViewportTooltipCalculator()


class TestLeftEdge:
    def test_mostly_hidden_period_is_named(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=60, viewport_width=200))
        assert result.left == "←P0"
        assert result.has_left

    def test_exactly_half_hidden_shows_nothing(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=50, viewport_width=200))
        assert result.left == ""

    def test_just_over_half_hidden(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=150.5, viewport_width=200))
        assert result.left == "←P1"

    def test_no_scroll_no_left_tooltip(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=0, viewport_width=450))
        assert result.left == ""

    def test_edge_on_boundary(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=200, viewport_width=200))
        assert result.is_empty()


class TestRightEdge:
    def test_mostly_hidden_period_is_named(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=0, viewport_width=130))
        assert result.right == "P1→"
        assert result.has_right
        assert not result.has_left

    def test_mostly_visible_period_is_not_named(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=60, viewport_width=200))
        assert result.right == ""

    def test_viewport_reaching_the_end(self, calculator):
        result = calculator.calculate(_periods(), TooltipRequest(scroll_offset=300, viewport_width=250))
        assert result.right == ""

    def test_custom_arrows_and_threshold(self, calculator):
        request = TooltipRequest(
            scroll_offset=0, viewport_width=170, hidden_threshold=0.25, left_arrow="<", right_arrow=" >"
        )
        assert calculator.calculate(_periods(), request).right == "P1 >"


class TestMalformedInput:
    @pytest.mark.parametrize(
        "request_",
        [
            TooltipRequest(scroll_offset=float("nan"), viewport_width=200),
            TooltipRequest(scroll_offset=60, viewport_width=float("inf")),
            TooltipRequest(scroll_offset=600, viewport_width=200),
            TooltipRequest(scroll_offset=60, viewport_width=-5),
            TooltipRequest(scroll_offset=None, viewport_width=200),
        ],
    )
    def test_bad_requests(self, calculator, request_):
        assert calculator.calculate(_periods(), request_) == TooltipResult()

    def test_empty_periods(self, calculator):
        assert calculator.calculate([], TooltipRequest(scroll_offset=60, viewport_width=200)).is_empty()

    def test_overlapping_periods(self, calculator):
        periods = _periods()
        periods[2] = HeaderPeriod(periods[2].start, periods[2].end, 100.0, 150.0, "P2", HeaderTier.SECONDARY)
        assert calculator.calculate(periods, TooltipRequest(scroll_offset=60, viewport_width=200)).is_empty()

    def test_negative_width(self, calculator):
        periods = _periods()
        periods[1] = HeaderPeriod(periods[1].start, periods[1].end, -100.0, 100.0, "P1", HeaderTier.SECONDARY)
        assert calculator.calculate(periods, TooltipRequest(scroll_offset=60, viewport_width=200)).is_empty()

    def test_dates_out_of_order(self, calculator):
        periods = [
            HeaderPeriod(date(2025, 3, 1), date(2025, 3, 31), 100.0, 0.0, "Mar", HeaderTier.PRIMARY),
            HeaderPeriod(date(2025, 1, 1), date(2025, 1, 31), 100.0, 100.0, "Jan", HeaderTier.PRIMARY),
        ]
        assert calculator.calculate(periods, TooltipRequest(scroll_offset=70, viewport_width=50)).is_empty()

    def test_period_ending_before_it_starts(self, calculator):
        periods = _periods()
        periods[3] = HeaderPeriod(periods[3].start, periods[3].start - timedelta(days=1), 100.0, 300.0, "P3", HeaderTier.SECONDARY)
        assert calculator.calculate(periods, TooltipRequest(scroll_offset=60, viewport_width=200)).is_empty()

    def test_ordered_dates_still_produce_tooltips(self, calculator):
        periods = [
            HeaderPeriod(date(2025, 1, 1), date(2025, 1, 31), 100.0, 0.0, "Jan", HeaderTier.PRIMARY),
            HeaderPeriod(date(2025, 2, 1), date(2025, 2, 28), 100.0, 100.0, "Feb", HeaderTier.PRIMARY),
        ]
        result = calculator.calculate(periods, TooltipRequest(scroll_offset=70, viewport_width=50))
        assert result == TooltipResult(left="←Jan", right="Feb→")


class TestLayouts:
    def test_secondary_tier_by_default(self, calculator, generator, registry):
        layout = generator.generate(date(2025, 1, 1), date(2025, 1, 31), 25.0, registry.get_config("month-day").pattern)
        result = calculator.calculate_for_layout(layout, TooltipRequest(scroll_offset=40, viewport_width=300))
        assert result.left == "←2"

    def test_primary_tier_on_request(self, calculator, generator, registry):
        layout = generator.generate(date(2025, 1, 1), date(2025, 2, 28), 25.0, registry.get_config("month-day").pattern)
        request = TooltipRequest(scroll_offset=500, viewport_width=300, use_primary=True)
        assert calculator.calculate_for_layout(layout, request).left == "←Jan 2025"

    def test_collapsed_primary_falls_back_to_secondary(self, calculator):
        secondary = tuple(_periods())
        layout = HeaderLayout(primary=(), secondary=secondary, collapsed=True, day_width=100.0, total_width=500.0)
        request = TooltipRequest(scroll_offset=60, viewport_width=200, use_primary=True)
        assert calculator.calculate_for_layout(layout, request).left == "←P0"

    def test_empty_layout(self, calculator):
        result = calculator.calculate_for_layout(HeaderLayout.empty(), TooltipRequest(scroll_offset=10, viewport_width=50))
        assert result.is_empty()
