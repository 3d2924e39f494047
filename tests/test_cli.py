import json

import pytest

from adsboard.main import run_cli


def test_report_exports_summary(tmp_path, raw_feed):
    feed_path = tmp_path / "feed.json"
    feed_path.write_text(json.dumps(raw_feed), encoding="utf-8")
    out_path = tmp_path / "summary.csv"

    code = run_cli(["report", "--feed-file", str(feed_path), "--view", "summary", "--export", str(out_path)])

    assert code == 0
    lines = out_path.read_text(encoding="utf-8").split("\n")
    assert lines[0].startswith("Campaign,TotalImpressions")
    assert [line.split(",")[0] for line in lines[1:]] == ["Spring Sale", "App Push"]


def test_report_prints_totals(tmp_path, raw_feed, capsys):
    feed_path = tmp_path / "feed.json"
    feed_path.write_text(json.dumps(raw_feed), encoding="utf-8")

    code = run_cli(["report", "--feed-file", str(feed_path), "--platform", "TikTok"])

    assert code == 0
    assert "Impressions: 3,000" in capsys.readouterr().out


def test_report_missing_feed_file(tmp_path):
    assert run_cli(["report", "--feed-file", str(tmp_path / "absent.json")]) == 1


def test_report_rejects_bad_page(tmp_path):
    assert run_cli(["report", "--feed-file", str(tmp_path / "feed.json"), "--page", "-1"]) == 2


class TestReportSortKey:
    @pytest.fixture
    def feed_path(self, tmp_path, raw_feed):
        path = tmp_path / "feed.json"
        path.write_text(json.dumps(raw_feed), encoding="utf-8")
        return path

    @pytest.mark.parametrize(
        "view, key",
        [("summary", "date"), ("summary", "ad_name"), ("detail", "Clicks"), ("totals", "cpm")],
    )
    def test_unknown_key_for_view_is_rejected(self, feed_path, capsys, view, key):
        code = run_cli(["report", "--feed-file", str(feed_path), "--view", view, "--sort-key", key])

        assert code == 2
        assert key in capsys.readouterr().err

    def test_summary_sorted_by_spent(self, feed_path, tmp_path):
        out_path = tmp_path / "summary.csv"

        code = run_cli(
            [
                "report", "--feed-file", str(feed_path), "--view", "summary",
                "--sort-key", "spent", "--descending", "--export", str(out_path),
            ]
        )

        assert code == 0
        rows = out_path.read_text(encoding="utf-8").split("\n")[1:]
        assert [row.split(",")[0] for row in rows] == ["App Push", "Spring Sale"]

    def test_rows_per_page_outside_choices(self, feed_path):
        with pytest.raises(SystemExit) as excinfo:
            run_cli(["report", "--feed-file", str(feed_path), "--rows-per-page", "7"])

        assert excinfo.value.code == 2
