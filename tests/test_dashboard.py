from datetime import date

import pytest

from adsboard.ingestion import FeedError
from adsboard.services import DateRange, SortDirection, SortState
from adsboard.services.dashboard import LOAD_ERROR_MESSAGE, DashboardState


@pytest.fixture
def state(raw_feed):
    dashboard = DashboardState(today=lambda: date(2024, 6, 7))
    dashboard.load(lambda: raw_feed)
    return dashboard


def _failing_fetch():
    raise FeedError("upstream down", status_code=503)


class TestDashboardState:
    def test_load_normalizes_feed(self, state):
        assert len(state.records) == 3
        assert state.error is None
        assert state.options() == {"platforms": ["Facebook", "TikTok"], "objectives": ["Click", "Impression", "Install"]}

    def test_load_failure_clears_records(self, state):
        with pytest.raises(FeedError):
            state.load(_failing_fetch)

        assert state.records == []
        assert state.error == LOAD_ERROR_MESSAGE
        assert state.totals().impressions == 0

    def test_changing_criteria_resets_page(self, state):
        state.page = 3

        state.set_criteria(date_range=DateRange.LAST_7_DAYS)

        assert state.page == 0
        assert [row.ad_name for row in state.filtered()] == ["Banner A", "Video B"]

    def test_sort_toggle_resets_page(self, state):
        state.page = 2

        assert state.request_sort("impressions") == SortState("impressions", SortDirection.ASCENDING)
        assert state.page == 0
        assert state.request_sort("impressions").direction is SortDirection.DESCENDING
        assert [row.impressions for row in state.detail_rows()] == [10000, 3000, 1000]
        assert not state.request_sort("impressions").is_active

    def test_views_share_the_filtered_set(self, state):
        state.set_criteria(platform="Facebook")

        assert [group.campaign for group in state.grouped()] == ["Spring Sale", "App Push"]
        assert state.totals().impressions == 11000
        assert state.detail_page().total == 2

    def test_grouped_ctr_uses_campaign_sums(self, state):
        [spring, _] = state.grouped()

        assert spring.impressions == 4000
        assert spring.ctr == pytest.approx(2.5)

    def test_rows_per_page(self, state):
        state.set_rows_per_page(2)

        page = state.detail_page()

        assert len(page.items) == 2
        assert page.total_pages == 2
        with pytest.raises(ValueError):
            state.set_rows_per_page(0)

    def test_clear(self, state):
        state.request_sort("clicks")
        state.clear()

        assert state.records == []
        assert not state.sort.is_active
