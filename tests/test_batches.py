"""Tests for BatchService create/update/expand/rename."""

from datetime import date

import pytest

from mycolog import db
from mycolog.models import Batch, Unit
from mycolog.models.settings import DEFAULT_SPECIES
from mycolog.services import BatchService


def _create(user, **payload):
    base = {
        "createdDate": "2024-01-15",
        "species": "Oyster Blue",
        "operationType": "Agar work",
        "quantity": 1,
        "unit": Unit.PLATE,
    }
    base.update(payload)
    return BatchService.create_batches(user.id, base, DEFAULT_SPECIES)


class TestCreate:
    def test_single_batch(self, user):
        [batch] = _create(user, notes="first plate")

        assert batch.display_id == "240115-OB-01"
        assert batch.unit == Unit.PLATE
        assert batch.parent_id is None
        assert batch.image_urls == []

    def test_client_supplied_id_is_kept(self, user):
        [batch] = _create(user, id="client-id-1")

        assert batch.id == "client-id-1"

    def test_duplicate_client_id_rejected(self, user):
        _create(user, id="dup")

        with pytest.raises(ValueError):
            _create(user, id="dup")

    def test_bulk_creates_unit_batches(self, user):
        batches = _create(user, quantity=3)

        assert len(batches) == 3
        assert [b.display_id for b in batches] == ["240115-OB-01", "240115-OB-02", "240115-OB-03"]
        assert all(b.quantity == 1 for b in batches)
        assert len({b.id for b in batches}) == 3

    def test_bulk_with_parent_inherits_species_and_numbers_notes(self, user):
        [parent] = _create(user, species="Lions' Mane")

        children = _create(user, species="ignored", parentId=parent.id, quantity=2, notes="LC")

        assert all(c.species == "Lions' Mane" for c in children)
        assert all(c.parent_id == parent.id for c in children)
        assert children[0].notes == "Batch 1/2. LC"
        assert children[1].notes == "Batch 2/2. LC"

    def test_harvest_is_single_weight_in_grams(self, user):
        batches = _create(user, operationType="Harvest", quantity=250, unit=Unit.BAG)

        assert len(batches) == 1
        assert batches[0].unit == Unit.GRAM
        assert batches[0].quantity == 250

    def test_missing_operation_rejected(self, user):
        with pytest.raises(ValueError):
            _create(user, operationType="")

    def test_unknown_parent_rejected(self, user):
        with pytest.raises(ValueError):
            _create(user, parentId="missing")

    def test_fractional_bulk_rejected(self, user):
        with pytest.raises(ValueError):
            _create(user, quantity=2.5)


class TestUpdate:
    def test_species_change_regenerates_code(self, user):
        [batch] = _create(user)
        _create(user, species="Lions' Mane")

        [updated] = BatchService.update_batch(batch, {"species": "Lions' Mane"}, DEFAULT_SPECIES)

        assert updated.display_id == "240115-LM-02"

    def test_outcome_and_end_date(self, user):
        [batch] = _create(user)

        [updated] = BatchService.update_batch(
            batch, {"outcome": "健康", "endDate": "2024-02-01"}, DEFAULT_SPECIES
        )

        assert updated.outcome == "健康"
        assert updated.end_date == date(2024, 2, 1)
        assert updated.display_id == "240115-OB-01"

    def test_clearing_end_date(self, user):
        [batch] = _create(user)
        BatchService.update_batch(batch, {"endDate": "2024-02-01"}, DEFAULT_SPECIES)

        [updated] = BatchService.update_batch(batch, {"endDate": None}, DEFAULT_SPECIES)

        assert updated.end_date is None

    def test_self_parent_rejected(self, user):
        [batch] = _create(user)

        with pytest.raises(ValueError):
            BatchService.update_batch(batch, {"parentId": batch.id}, DEFAULT_SPECIES)
        db.session.rollback()

    def test_unit_batch_raised_to_many_is_expanded(self, user):
        [parent] = _create(user)
        [batch] = _create(user, parentId=parent.id)
        [child] = _create(user, parentId=batch.id)
        original_id = batch.id

        result = BatchService.update_batch(batch, {"quantity": 3}, DEFAULT_SPECIES)

        assert len(result) == 3
        assert db.session.get(Batch, original_id) is None
        assert all(b.quantity == 1 for b in result)
        assert all(b.parent_id == parent.id for b in result)
        assert db.session.get(Batch, child.id).parent_id == result[0].id

    def test_harvest_weight_change_is_not_expanded(self, user):
        [batch] = _create(user, operationType="Harvest", quantity=1)

        result = BatchService.update_batch(batch, {"quantity": 120}, DEFAULT_SPECIES)

        assert len(result) == 1
        assert result[0].quantity == 120


class TestRenameSpecies:
    def test_rewrites_name_and_code(self, user):
        _create(user, quantity=2)
        _create(user, species="Lions' Mane")

        changed = BatchService.rename_species(user.id, "Oyster Blue", "Blue Oyster", "OB", "BO")

        assert changed == 2
        codes = sorted(b.display_id for b in Batch.query.filter_by(species="Blue Oyster"))
        assert codes == ["240115-BO-01", "240115-BO-02"]
        assert Batch.query.filter_by(species="Lions' Mane").one().display_id == "240115-LM-01"


class TestBulkLimit:
    def test_bulk_create_above_limit_rejected(self, ctx, user):
        ctx.config["MAX_BULK_COUNT"] = 5

        with pytest.raises(ValueError, match="At most 5"):
            _create(user, quantity=6)
        assert Batch.query.count() == 0

    def test_bulk_create_at_limit_allowed(self, ctx, user):
        ctx.config["MAX_BULK_COUNT"] = 5

        assert len(_create(user, quantity=5)) == 5

    def test_expand_above_limit_rejected(self, ctx, user):
        ctx.config["MAX_BULK_COUNT"] = 5
        [batch] = _create(user)

        with pytest.raises(ValueError):
            BatchService.expand_batch(batch, 6, DEFAULT_SPECIES)

    def test_edit_to_large_quantity_rejected(self, ctx, user):
        ctx.config["MAX_BULK_COUNT"] = 5
        [batch] = _create(user)

        with pytest.raises(ValueError):
            BatchService.update_batch(batch, {"quantity": 1_000_000}, DEFAULT_SPECIES)
        db.session.rollback()
        assert Batch.query.count() == 1


class TestUnitHandling:
    def test_leaving_harvest_restores_vessel_unit(self, user):
        [batch] = _create(user, operationType="Harvest", quantity=80)

        [updated] = BatchService.update_batch(
            batch, {"operationType": "Grain expansion", "quantity": 1}, DEFAULT_SPECIES
        )

        assert updated.unit == Unit.BAG

    def test_group_leaving_harvest_restores_vessel_unit(self, user):
        first = _create(user, operationType="Harvest", quantity=40)
        second = _create(user, operationType="Harvest", quantity=60)
        ids = [first[0].id, second[0].id]

        members = BatchService.update_group(
            user.id, ids, "Oyster Blue", date(2024, 1, 15), 2, "Grain expansion", DEFAULT_SPECIES,
        )

        assert all(b.unit == Unit.BAG for b in members)

    def test_group_becoming_harvest_uses_grams(self, user):
        batches = _create(user, quantity=2, unit=Unit.BOTTLE)

        members = BatchService.update_group(
            user.id, [b.id for b in batches], "Oyster Blue", date(2024, 1, 15), 90, "Harvest",
            DEFAULT_SPECIES,
        )

        assert all(b.unit == Unit.GRAM for b in members)


class TestNonTextInput:
    def test_numeric_species_on_update_rejected(self, user):
        [batch] = _create(user)

        with pytest.raises(ValueError, match="Species must be text"):
            BatchService.update_batch(batch, {"species": 7}, DEFAULT_SPECIES)

    def test_numeric_notes_are_stored_as_text(self, user):
        [batch] = _create(user, notes=12)

        assert batch.notes == "12"
