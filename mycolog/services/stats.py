from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from mycolog.models import StatusKind


class TimeRange:
    ALL = "ALL"
    YEAR = "YEAR"
    MONTH = "MONTH"
    WEEK = "WEEK"
    CUSTOM = "CUSTOM"

    CHOICES = [ALL, YEAR, MONTH, WEEK, CUSTOM]


@dataclass
class DateFilter:
    type: str = TimeRange.ALL
    start_date: date | None = None
    end_date: date | None = None

    def window(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        """Return the inclusive (start, end) datetimes this filter selects."""
        now = now or datetime.now()
        start = datetime(1970, 1, 1)
        end = now

        if self.type == TimeRange.YEAR:
            start = datetime(now.year, 1, 1)
        elif self.type == TimeRange.MONTH:
            start = datetime(now.year, now.month, 1)
        elif self.type == TimeRange.WEEK:
            start = now - timedelta(days=7)
        elif self.type == TimeRange.CUSTOM and self.start_date and self.end_date:
            start = datetime.combine(self.start_date, time.min)
            end = datetime.combine(self.end_date, time.max)

        return start, end


# Keyword fallbacks for outcome labels that are not in the status list
DISCARD_KEYWORDS = ("discard", "废弃")
CONTAMINATION_KEYWORDS = ("contam", "fail", "污染")


def kind_from_keywords(label: str) -> str:
    """Guess a StatusKind from the wording of a non-blank label."""
    lower = label.lower()
    if any(word in lower for word in DISCARD_KEYWORDS):
        return StatusKind.DISCARDED
    if any(word in lower for word in CONTAMINATION_KEYWORDS):
        return StatusKind.CONTAMINATED
    return StatusKind.HEALTHY


def classify_outcome(outcome: str | None, statuses: list[dict] | None = None) -> str:
    """Map an outcome label to a StatusKind.

    A configured status with an explicit kind wins; free text falls back to
    keyword matching.
    """
    if not outcome or not outcome.strip():
        return StatusKind.PENDING

    for status in statuses or []:
        if status.get("name") == outcome and status.get("kind") in StatusKind.CHOICES:
            return status["kind"]

    return kind_from_keywords(outcome)


def is_contaminated(outcome: str | None, statuses: list[dict] | None = None) -> bool:
    return classify_outcome(outcome, statuses) in (StatusKind.CONTAMINATED, StatusKind.DISCARDED)


def is_discarded(outcome: str | None, statuses: list[dict] | None = None) -> bool:
    return classify_outcome(outcome, statuses) == StatusKind.DISCARDED


class StatsService:
    """Yield, contamination and pipeline figures over a batch collection."""

    @staticmethod
    def filter_batches(
        batches,
        date_filter: DateFilter,
        species_id: str | None = None,
        species_configs: list[dict] | None = None,
        now: datetime | None = None,
    ) -> list:
        """Select batches inside the date window and, optionally, of one species.

        *species_id* is looked up by config id first, then by name; an
        unknown species does not filter anything out.
        """
        start, end = date_filter.window(now)

        species_name = None
        if species_id and species_configs:
            for entry in species_configs:
                if entry.get("id") == species_id or entry.get("name") == species_id:
                    species_name = entry.get("name")
                    break

        selected = []
        for batch in batches:
            created = datetime.combine(batch.created_date, time.min)
            if not start <= created <= end:
                continue
            if species_name is not None and batch.species != species_name:
                continue
            selected.append(batch)
        return selected

    @staticmethod
    def get_yield_stats(batches, harvest_operation: str = "Harvest") -> dict:
        """Total harvested weight, overall and per species (heaviest first)."""
        harvests = [b for b in batches if b.operation_type == harvest_operation]

        by_species: dict[str, dict] = {}
        for batch in harvests:
            entry = by_species.setdefault(
                batch.species,
                {"speciesName": batch.species, "totalWeight": 0, "batchCount": 0},
            )
            entry["totalWeight"] += batch.quantity or 0
            entry["batchCount"] += 1

        return {
            "totalWeight": sum(b.quantity or 0 for b in harvests),
            "harvestCount": len(harvests),
            "speciesStats": sorted(
                by_species.values(), key=lambda s: s["totalWeight"], reverse=True
            ),
        }

    @staticmethod
    def get_health_stats(batches, statuses: list[dict] | None = None) -> dict:
        """Share of batches whose outcome marks them contaminated or discarded."""
        total = len(batches)
        contaminated = [b for b in batches if is_contaminated(b.outcome, statuses)]
        rate = 0 if total == 0 else len(contaminated) / total * 100

        return {
            "totalBatches": total,
            "contaminatedCount": len(contaminated),
            "contaminatedIds": [b.id for b in contaminated],
            "contaminationRate": rate,
        }

    @staticmethod
    def get_active_batches(
        batches, harvest_operation: str = "Harvest", statuses: list[dict] | None = None
    ) -> list:
        """Batches still in progress: not a harvest, not discarded, no end date."""
        return [
            b for b in batches
            if b.operation_type != harvest_operation
            and not is_discarded(b.outcome, statuses)
            and b.end_date is None
        ]

    @staticmethod
    def get_pipeline_stats(
        batches, harvest_operation: str = "Harvest", statuses: list[dict] | None = None
    ) -> dict:
        """Active batches grouped by operation stage."""
        active = StatsService.get_active_batches(batches, harvest_operation, statuses)

        by_stage: dict[str, list] = {}
        for batch in active:
            by_stage.setdefault(batch.operation_type, []).append(batch)

        return {
            "activeCount": len(active),
            "byStage": by_stage,
        }
