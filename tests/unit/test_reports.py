"""
Unit Tests - Reports
"""
import pytest

from faithstats.config.settings import ArcSettings
from faithstats.exceptions import SourceUnavailableError
from faithstats.reports import (
    get_bible_references,
    get_bible_stats,
    get_church_attendance,
    get_faith_daily_stats,
    get_faith_today_stats,
    get_faith_weekly_stats,
    get_study_report,
    get_today_study_minutes,
    get_top_places,
)


class TestStudyReport:
    """Tests for the Anki-only report"""

    def test_daily_report(self, test_settings, now):
        report = get_study_report("daily", now=now, settings=test_settings)

        assert report.kind == "daily"
        assert len(report.records) == 30
        assert report.summary.total_minutes == pytest.approx(4.5)
        assert report.summary.total_hours == pytest.approx(4.5 / 60)
        assert report.summary.average_minutes == pytest.approx(4.5 / 30)
        assert report.summary.active_buckets == 2
        assert report.summary.total_buckets == 30
        assert report.summary.total_matured_passages == 1
        assert report.summary.total_lost_passages == 1
        assert report.summary.net_progress == 0

    def test_window_size_override(self, test_settings, now):
        report = get_study_report("weekly", size=4, now=now, settings=test_settings)

        assert [r.bucket for r in report.records] == [
            "2025-09-28", "2025-10-05", "2025-10-12", "2025-10-19",
        ]

    def test_invalid_kind(self, test_settings, now):
        with pytest.raises(ValueError):
            get_study_report("yearly", now=now, settings=test_settings)

    def test_today_minutes(self, test_settings, now):
        assert get_today_study_minutes(now=now, settings=test_settings) == pytest.approx(2.5)

    def test_bible_stats_and_references(self, test_settings):
        stats = get_bible_stats(settings=test_settings)

        assert stats.grand_total.total_passages == 5
        assert "John 3:16-18" in get_bible_references(settings=test_settings)


class TestFaithReports:
    """Tests for merged multi-source reports"""

    def test_daily_merge(self, test_settings, now):
        """Test one record per day with every source aligned"""
        report = get_faith_daily_stats(now=now, settings=test_settings)
        records = {r.bucket: r for r in report.records}

        assert len(report.records) == 30
        today = records["2025-10-22"]
        assert today.anki_minutes == pytest.approx(2.5)
        assert today.reading_minutes == pytest.approx(15.0)
        assert today.prayer_minutes == pytest.approx(15.0)
        assert today.total_minutes == pytest.approx(32.5)
        assert today.at_church_minutes is None
        assert today.anki_cumulative_passages == 0

        assert records["2025-10-20"].anki_lost_passages == 1
        assert records["2025-10-20"].reading_minutes == pytest.approx(2.0)
        assert records["2025-10-18"].prayer_minutes == pytest.approx(5.0)

        summary = report.summary
        assert summary.church is None
        assert summary.reading.total_minutes == pytest.approx(17.0)
        assert summary.prayer.total_minutes == pytest.approx(30.0)
        assert summary.anki.active_buckets == 2
        assert summary.total_minutes == pytest.approx(4.5 + 17.0 + 30.0)
        assert summary.buckets_with_any_activity == 4

    def test_weekly_merge(self, test_settings, now):
        """Test church attendance joins the weekly merge"""
        report = get_faith_weekly_stats(now=now, settings=test_settings)

        assert len(report.records) == 12
        week = report.records[-1]
        assert week.bucket == "2025-10-19"
        assert week.anki_minutes == pytest.approx(4.5)
        assert week.reading_minutes == pytest.approx(17.0)
        assert week.prayer_minutes == pytest.approx(25.0)
        assert week.at_church_minutes == pytest.approx(180.0)
        assert week.at_church_daily_minutes == pytest.approx([90.0, 0.0, 90.0, 0.0, 0.0, 0.0, 0.0])
        assert week.total_minutes == pytest.approx(226.5)

        previous = report.records[-2]
        assert previous.prayer_minutes == pytest.approx(5.0)
        assert previous.at_church_minutes == pytest.approx(90.0)

        summary = report.summary
        assert summary.church.total_minutes == pytest.approx(330.0)
        assert summary.church.active_buckets == 3
        assert summary.anki_net_progress == 0

    def test_weekly_dump(self, test_settings, now):
        """Test computed totals are serialized"""
        report = get_faith_weekly_stats(now=now, settings=test_settings)
        data = report.model_dump()

        assert data["records"][-1]["total_minutes"] == pytest.approx(226.5)
        assert data["kind"] == "weekly"

    def test_source_failure_aborts_report(self, test_settings, tmp_path, now):
        """Test a missing source fails the whole report"""
        settings = test_settings.model_copy(
            update={"arc": ArcSettings(export_path=str(tmp_path / "missing"))}
        )

        with pytest.raises(SourceUnavailableError):
            get_faith_weekly_stats(now=now, settings=settings)

    def test_today_stats(self, test_settings, now):
        today = get_faith_today_stats(now=now, settings=test_settings)

        assert today.anki_minutes == pytest.approx(2.5)
        assert today.reading_minutes == pytest.approx(15.0)
        assert today.prayer_minutes == pytest.approx(15.0)
        assert today.total_minutes == pytest.approx(32.5)
        assert today.total_hours == pytest.approx(32.5 / 60)


class TestArcReports:
    def test_church_attendance(self, test_settings, now):
        records = get_church_attendance(now=now, settings=test_settings)

        assert len(records) == 12
        assert records[-1].minutes == pytest.approx(180.0)

    def test_top_places(self, test_settings, now):
        top = get_top_places(now=now, settings=test_settings)

        assert top[0].place_name == "Martin Luther Church"
        assert all(place.place_name != "Home" for place in top)
