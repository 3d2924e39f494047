import math
from datetime import date

import pytest

from adsboard.ingestion import normalize


def _raw(**overrides):
    row = {
        "Date": "6/1/2024",
        "Core Campaign Name": "Spring Sale",
        "Ads Campaign Name": "Banner A",
        "Platform": "Facebook",
        "Objective": "Click",
        "Impression": "1,000",
        "Click": "50",
        "Install": "0",
        "Follow": "0",
        "Engagement": "0",
        "Spent": "500",
        "Budget": "2,000",
        "Device Target": "Mobile",
        "Segment": "18-24",
    }
    row.update(overrides)
    return row


class TestNormalize:
    def test_click_campaign_metrics(self):
        [record] = normalize([_raw()])

        assert record.date == date(2024, 6, 1)
        assert record.impressions == 1000
        assert record.clicks == 50
        assert record.spent == 500.0
        assert record.budget == 2000.0
        assert record.ctr == pytest.approx(5.0)
        assert record.cost_metric == pytest.approx(10.0)
        assert record.devices == "Mobile"
        assert record.segment == "18-24"

    def test_thousands_separators_are_stripped_for_all_counters(self):
        [record] = normalize([_raw(Impression="12,345", Install="1,200", Follow="3,400", Engagement="5,600")])

        assert record.impressions == 12345
        assert record.installs == 1200
        assert record.follows == 3400
        assert record.engagement == 5600

    def test_decimal_spent_keeps_fraction(self):
        [record] = normalize([_raw(Spent="1,234.50")])
        assert record.spent == pytest.approx(1234.5)

    def test_integer_fields_take_leading_number(self):
        [record] = normalize([_raw(Click="1.5", Install="12abc")])
        assert record.clicks == 1
        assert record.installs == 12

    def test_oversized_counter_keeps_exact_value(self):
        [record] = normalize([_raw(Impression="99,999,999,999,999,999,999", Click="1")])

        assert record.impressions == 99_999_999_999_999_999_999
        assert isinstance(record.impressions, int)
        assert record.ctr > 0

    def test_numeric_text_fields_keep_original_form(self):
        records = normalize(
            [
                _raw(**{"Core Campaign Name": 2024, "Ads Campaign Name": 7}),
                _raw(**{"Core Campaign Name": None, "Ads Campaign Name": None}),
            ]
        )

        assert [row.campaign for row in records] == ["2024", ""]
        assert [row.ad_name for row in records] == ["7", ""]

    def test_unparseable_numbers_become_zero(self):
        [record] = normalize([_raw(Impression="abc", Spent="", Budget=None)])

        assert record.impressions == 0
        assert record.spent == 0.0
        assert record.budget == 0.0
        assert record.ctr == 0.0

    def test_missing_columns_default_to_empty(self):
        [record] = normalize([{"Date": "6/1/2024", "Objective": "Click"}])

        assert record.campaign == ""
        assert record.ad_name == ""
        assert record.impressions == 0
        assert record.clicks == 0
        assert record.cost_metric == 0.0

    def test_native_numbers_are_accepted(self):
        [record] = normalize([_raw(Impression=2000, Click=40, Spent=100.5)])

        assert record.impressions == 2000
        assert record.clicks == 40
        assert record.spent == pytest.approx(100.5)
        assert record.ctr == pytest.approx(2.0)

    @pytest.mark.parametrize("bad_date", ["", "not a date", "13/45/2024", "2/30/2024", None])
    def test_rows_with_invalid_date_are_dropped(self, bad_date):
        records = normalize([_raw(Date=bad_date), _raw(Date="6/2/2024", **{"Ads Campaign Name": "Kept"})])

        assert len(records) == 1
        assert records[0].ad_name == "Kept"
        assert records[0].date == date(2024, 6, 2)

    def test_order_is_preserved(self, raw_feed):
        records = normalize(raw_feed)

        assert [row.ad_name for row in records] == ["Banner A", "Video B", "Install Card"]

    def test_empty_feed(self):
        assert normalize([]) == []

    def test_only_invalid_rows(self):
        assert normalize([_raw(Date="oops")]) == []


class TestCostMetric:
    def test_impression_objective_uses_cpm(self):
        [record] = normalize([_raw(Objective="Impression", Impression="2,000", Spent="500")])
        assert record.cost_metric == pytest.approx(250.0)

    def test_install_objective_uses_cpi(self):
        [record] = normalize([_raw(Objective="Install", Install="80", Spent="4,000")])
        assert record.cost_metric == pytest.approx(50.0)

    def test_engagement_objective_uses_cpe(self):
        [record] = normalize([_raw(Objective="Engagement", Engagement="500", Spent="250")])
        assert record.cost_metric == pytest.approx(500.0)

    def test_zero_denominator_gives_zero(self):
        [record] = normalize([_raw(Objective="Install", Install="0", Spent="100")])
        assert record.cost_metric == 0.0

    def test_unknown_objective_is_kept_without_metric(self):
        [record] = normalize([_raw(Objective="Reach")])

        assert record.objective == "Reach"
        assert math.isnan(record.cost_metric)
        assert not record.has_cost_metric
