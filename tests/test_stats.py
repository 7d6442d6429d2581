"""Tests for date filtering and the statistics figures."""

from datetime import date, datetime

from mycolog.models import StatusKind
from mycolog.models.settings import DEFAULT_SPECIES, DEFAULT_STATUSES
from mycolog.services import DateFilter, StatsService, TimeRange
from mycolog.services.stats import classify_outcome

NOW = datetime(2024, 3, 20, 15, 30)


def _dates(batches):
    return sorted(b.created_date for b in batches)


class TestDateFilter:
    def _batches(self, make_batch):
        return [
            make_batch(created_date=date(2023, 12, 31)),
            make_batch(created_date=date(2024, 1, 2)),
            make_batch(created_date=date(2024, 3, 1)),
            make_batch(created_date=date(2024, 3, 14)),
            make_batch(created_date=date(2024, 3, 18)),
        ]

    def test_all_keeps_everything_up_to_now(self, make_batch):
        batches = self._batches(make_batch) + [make_batch(created_date=date(2024, 3, 21))]

        selected = StatsService.filter_batches(batches, DateFilter(), now=NOW)

        assert len(selected) == 5

    def test_year(self, make_batch):
        selected = StatsService.filter_batches(
            self._batches(make_batch), DateFilter(TimeRange.YEAR), now=NOW
        )
        assert _dates(selected)[0] == date(2024, 1, 2)
        assert len(selected) == 4

    def test_month(self, make_batch):
        selected = StatsService.filter_batches(
            self._batches(make_batch), DateFilter(TimeRange.MONTH), now=NOW
        )
        assert _dates(selected) == [date(2024, 3, 1), date(2024, 3, 14), date(2024, 3, 18)]

    def test_week_is_last_seven_days(self, make_batch):
        selected = StatsService.filter_batches(
            self._batches(make_batch), DateFilter(TimeRange.WEEK), now=NOW
        )
        assert _dates(selected) == [date(2024, 3, 14), date(2024, 3, 18)]

    def test_custom_end_date_is_inclusive(self, make_batch):
        date_filter = DateFilter(TimeRange.CUSTOM, date(2024, 1, 2), date(2024, 3, 14))

        selected = StatsService.filter_batches(self._batches(make_batch), date_filter, now=NOW)

        assert _dates(selected) == [date(2024, 1, 2), date(2024, 3, 1), date(2024, 3, 14)]

    def test_custom_without_bounds_behaves_like_all(self, make_batch):
        date_filter = DateFilter(TimeRange.CUSTOM, date(2024, 1, 2), None)

        selected = StatsService.filter_batches(self._batches(make_batch), date_filter, now=NOW)

        assert len(selected) == 5

    def test_species_filter_by_config_id(self, make_batch):
        batches = [
            make_batch(species="Oyster Blue"),
            make_batch(species="Lions' Mane"),
        ]

        selected = StatsService.filter_batches(
            batches, DateFilter(), species_id="6", species_configs=DEFAULT_SPECIES, now=NOW
        )

        assert [b.species for b in selected] == ["Lions' Mane"]


class TestYieldStats:
    def test_harvest_totals_by_species(self, make_batch):
        batches = [
            make_batch(operation_type="Harvest", species="Oyster Blue", quantity=50, unit="g"),
            make_batch(operation_type="Harvest", species="Oyster Blue", quantity=30, unit="g"),
            make_batch(operation_type="Harvest", species="Lions' Mane", quantity=20, unit="g"),
            make_batch(operation_type="Agar work", quantity=7),
        ]

        stats = StatsService.get_yield_stats(batches, "Harvest")

        assert stats["totalWeight"] == 100
        assert stats["harvestCount"] == 3
        assert [(s["speciesName"], s["totalWeight"]) for s in stats["speciesStats"]] == [
            ("Oyster Blue", 80),
            ("Lions' Mane", 20),
        ]

    def test_no_harvests(self, make_batch):
        stats = StatsService.get_yield_stats([make_batch()], "Harvest")

        assert stats == {"totalWeight": 0, "harvestCount": 0, "speciesStats": []}


class TestHealthStats:
    def test_configured_and_keyword_outcomes(self, make_batch):
        batches = [
            make_batch(id="bad", outcome="感染废弃"),
            make_batch(id="free", outcome="Discarded - contaminated"),
            make_batch(id="ok", outcome="健康"),
            make_batch(id="open", outcome=None),
        ]

        stats = StatsService.get_health_stats(batches, DEFAULT_STATUSES)

        assert stats["totalBatches"] == 4
        assert stats["contaminatedCount"] == 2
        assert sorted(stats["contaminatedIds"]) == ["bad", "free"]
        assert stats["contaminationRate"] == 50

    def test_empty_rate_is_zero(self):
        assert StatsService.get_health_stats([])["contaminationRate"] == 0

    def test_configured_kind_beats_keywords(self):
        statuses = [{"id": "9", "name": "Failed colonisation", "kind": StatusKind.HEALTHY}]

        assert classify_outcome("Failed colonisation", statuses) == StatusKind.HEALTHY
        assert classify_outcome("Failed colonisation") == StatusKind.CONTAMINATED
        assert classify_outcome("   ") == StatusKind.PENDING
        assert classify_outcome("thrown out, 污染") == StatusKind.CONTAMINATED


class TestPipelineStats:
    def test_only_active_batches_are_staged(self, make_batch):
        batches = [
            make_batch(operation_type="Agar work"),
            make_batch(operation_type="Agar work"),
            make_batch(operation_type="Grain expansion"),
            make_batch(operation_type="Grain expansion", end_date=date(2024, 2, 1)),
            make_batch(operation_type="Grain expansion", outcome="感染废弃"),
            make_batch(operation_type="Harvest", quantity=40, unit="g"),
        ]

        stats = StatsService.get_pipeline_stats(batches, "Harvest", DEFAULT_STATUSES)

        assert stats["activeCount"] == 3
        assert {k: len(v) for k, v in stats["byStage"].items()} == {
            "Agar work": 2,
            "Grain expansion": 1,
        }
