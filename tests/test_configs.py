"""Tests for saving per-user configuration."""

import copy

import pytest

from mycolog import db
from mycolog.models import StatusKind
from mycolog.models.settings import DEFAULT_OPERATIONS, DEFAULT_SPECIES
from mycolog.services import BatchService, StatsService
from mycolog.services.configs import get_user_configs, save_user_configs


def _configs(statuses):
    return {
        "species": copy.deepcopy(DEFAULT_SPECIES),
        "operations": copy.deepcopy(DEFAULT_OPERATIONS),
        "statuses": statuses,
        "recipeTypes": ["Agar"],
        "language": "en",
    }


class TestStatusKinds:
    def test_missing_kind_is_inferred_from_wording(self, user):
        saved = save_user_configs(user.id, _configs([
            {"id": "1", "name": "Looks good"},
            {"id": "2", "name": "Discarded - contaminated"},
            {"id": "3", "name": "Failed to colonise"},
        ]))

        assert [s["kind"] for s in saved["statuses"]] == [
            StatusKind.HEALTHY, StatusKind.DISCARDED, StatusKind.CONTAMINATED,
        ]

    def test_status_saved_without_kind_counts_in_stats(self, user):
        save_user_configs(user.id, _configs([{"id": "9", "name": "Discarded - contaminated"}]))
        [batch] = BatchService.create_batches(
            user.id,
            {"createdDate": "2024-01-15", "species": "Oyster Blue",
             "operationType": "Grain expansion", "unit": "bag"},
            DEFAULT_SPECIES,
        )
        BatchService.update_batch(batch, {"outcome": "Discarded - contaminated"}, DEFAULT_SPECIES)
        statuses = get_user_configs(user.id)["statuses"]
        batches = BatchService.list_batches(user.id)

        health = StatsService.get_health_stats(batches, statuses)
        pipeline = StatsService.get_pipeline_stats(batches, "Harvest", statuses)

        assert health["contaminatedCount"] == 1
        assert pipeline["activeCount"] == 0

    def test_explicit_kind_is_kept(self, user):
        saved = save_user_configs(user.id, _configs([
            {"id": "1", "name": "Failed but usable", "kind": StatusKind.HEALTHY},
        ]))

        assert saved["statuses"][0]["kind"] == StatusKind.HEALTHY

    def test_unknown_kind_rejected(self, user):
        with pytest.raises(ValueError):
            save_user_configs(user.id, _configs([{"id": "1", "name": "Odd", "kind": "weird"}]))
        db.session.rollback()
