import logging
from datetime import date

from flask import current_app

from mycolog import db
from mycolog.models import Batch, Unit, new_batch_id
from mycolog.services.identifiers import generate_display_ids, regenerate_display_id
from mycolog.utils import optional_text, parse_date, parse_quantity, require_text

logger = logging.getLogger(__name__)


def harvest_operation() -> str:
    return current_app.config.get("HARVEST_OPERATION", "Harvest")


def check_bulk_count(count: int) -> int:
    """Reject batch counts above MAX_BULK_COUNT."""
    limit = current_app.config.get("MAX_BULK_COUNT", 500)
    if count > limit:
        raise ValueError(f"At most {limit} batches can be created at once")
    return count


class BatchService:
    """Create, edit, expand and delete batches for a single owner.

    Every multi-row change is committed once and rolled back as a whole on
    failure.
    """

    @staticmethod
    def list_batches(user_id: int) -> list[Batch]:
        """All of the user's batches, newest first."""
        return (
            Batch.query.filter_by(user_id=user_id)
            .order_by(Batch.created_date.desc(), Batch.display_id)
            .all()
        )

    @staticmethod
    def get_batch(user_id: int, batch_id: str) -> Batch | None:
        return Batch.query.filter_by(user_id=user_id, id=batch_id).first()

    @staticmethod
    def get_batches(user_id: int, ids: list[str]) -> list[Batch]:
        if not ids:
            return []
        return (
            Batch.query.filter(Batch.user_id == user_id, Batch.id.in_(ids))
            .order_by(Batch.display_id)
            .all()
        )

    @staticmethod
    def is_harvest(operation_type: str) -> bool:
        return operation_type == harvest_operation()

    @staticmethod
    def create_batches(user_id: int, payload: dict, species_configs: list[dict]) -> list[Batch]:
        """Log a new operation.

        A non-harvest quantity above one becomes that many unit batches
        sharing the same metadata; anything else is a single batch.
        """
        operation_type = require_text(payload, "operationType", "Operation type")
        created_date = parse_date(payload.get("createdDate"), "created date") or date.today()
        quantity = parse_quantity(payload.get("quantity", 1))
        notes = str(payload.get("notes") or "").strip()
        image_urls = list(payload.get("imageUrls") or [])

        parent = None
        parent_id = payload.get("parentId") or None
        if parent_id:
            parent = BatchService.get_batch(user_id, parent_id)
            if parent is None:
                raise ValueError("Parent batch not found")

        species = parent.species if parent else require_text(payload, "species", "Species")

        is_harvest = BatchService.is_harvest(operation_type)
        unit = Unit.GRAM if is_harvest else (payload.get("unit") or Unit.BAG)
        if unit not in Unit.CHOICES:
            raise ValueError(f"Unknown unit: {unit}")

        is_bulk = quantity > 1 and not is_harvest
        if is_bulk and quantity != int(quantity):
            raise ValueError("Quantity must be a whole number when logging several vessels")
        count = check_bulk_count(int(quantity)) if is_bulk else 1

        batch_id = payload.get("id")
        if batch_id and not is_bulk and db.session.get(Batch, batch_id) is not None:
            raise ValueError("Batch id already exists")

        display_ids = generate_display_ids(user_id, species, created_date, species_configs, count)

        batches = []
        for index, display_id in enumerate(display_ids):
            item_notes = notes
            if is_bulk and parent:
                item_notes = f"Batch {index + 1}/{count}. {notes}".strip()
            fields = dict(
                user_id=user_id,
                display_id=display_id,
                created_date=created_date,
                species=species,
                operation_type=operation_type,
                quantity=1 if is_bulk else quantity,
                unit=unit,
                parent_id=parent.id if parent else None,
                notes=item_notes,
                image_urls=list(image_urls),
            )
            if batch_id and not is_bulk:
                fields["id"] = batch_id
            batch = Batch(**fields)
            batches.append(batch)

        try:
            db.session.add_all(batches)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            "Created %d batch(es) %s for user %s",
            len(batches), [b.display_id for b in batches], user_id,
        )
        return batches

    @staticmethod
    def update_batch(batch: Batch, payload: dict, species_configs: list[dict]) -> list[Batch]:
        """Apply field edits to *batch*.

        Returns the edited batch, or the new unit batches when a single
        vessel is edited up to several (the batch is expanded).
        """
        new_species = optional_text(payload, "species", batch.species, "Species")
        new_date = batch.created_date
        if "createdDate" in payload:
            new_date = parse_date(payload["createdDate"], "created date") or batch.created_date
        new_operation = optional_text(
            payload, "operationType", batch.operation_type, "Operation type"
        )
        new_quantity = batch.quantity
        if "quantity" in payload:
            new_quantity = parse_quantity(payload["quantity"])

        if (
            batch.quantity == 1
            and new_quantity > 1
            and not BatchService.is_harvest(new_operation)
        ):
            if new_quantity != int(new_quantity):
                raise ValueError("Quantity must be a whole number when splitting a batch")
            check_bulk_count(int(new_quantity))
            BatchService._apply_fields(batch, payload, new_species, new_date, new_operation)
            return BatchService.expand_batch(batch, int(new_quantity), species_configs)

        batch.display_id = regenerate_display_id(batch, new_species, new_date, species_configs)
        BatchService._apply_fields(batch, payload, new_species, new_date, new_operation)
        batch.quantity = new_quantity

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Updated batch %s (%s)", batch.id, batch.display_id)
        return [batch]

    @staticmethod
    def _apply_fields(batch, payload, species, created_date, operation_type):
        batch.species = species
        batch.created_date = created_date
        batch.operation_type = operation_type

        if BatchService.is_harvest(operation_type):
            batch.unit = Unit.GRAM
        elif payload.get("unit"):
            if payload["unit"] not in Unit.CHOICES:
                raise ValueError(f"Unknown unit: {payload['unit']}")
            batch.unit = payload["unit"]
        elif batch.unit == Unit.GRAM:
            batch.unit = Unit.BAG

        if "notes" in payload:
            batch.notes = str(payload.get("notes") or "").strip()
        if "outcome" in payload:
            batch.outcome = str(payload.get("outcome") or "").strip() or None
        if "endDate" in payload:
            batch.end_date = parse_date(payload.get("endDate"), "end date")
        if "parentId" in payload:
            parent_id = payload.get("parentId") or None
            if parent_id == batch.id:
                raise ValueError("A batch cannot be its own parent")
            if parent_id and BatchService.get_batch(batch.user_id, parent_id) is None:
                raise ValueError("Parent batch not found")
            batch.parent_id = parent_id

    @staticmethod
    def expand_batch(batch: Batch, count: int, species_configs: list[dict]) -> list[Batch]:
        """Replace *batch* with *count* unit batches carrying fresh codes.

        Children of the replaced batch are re-pointed at the first new one.
        """
        if count < 2:
            raise ValueError("A batch can only be expanded into two or more")
        check_bulk_count(count)

        display_ids = generate_display_ids(
            batch.user_id, batch.species, batch.created_date, species_configs, count,
            exclude_ids=[batch.id],
        )
        original_id = batch.id
        new_batches = [
            batch.clone(display_id=display_id, quantity=1) for display_id in display_ids
        ]

        try:
            db.session.add_all(new_batches)
            db.session.flush()
            Batch.query.filter_by(user_id=batch.user_id, parent_id=original_id).update(
                {"parent_id": new_batches[0].id}, synchronize_session=False
            )
            db.session.delete(batch)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Expanded batch %s into %s", original_id, display_ids)
        return new_batches

    @staticmethod
    def update_group(
        user_id: int,
        ids: list[str],
        species: str,
        created_date: date,
        quantity: float,
        operation_type: str,
        species_configs: list[dict],
    ) -> list[Batch]:
        """Apply one edit to every batch of a group.

        When species or date changes the whole group gets a fresh
        consecutive block of codes; the total quantity is split evenly.
        """
        members = BatchService.get_batches(user_id, ids)
        if not members:
            raise ValueError("No batches found for this group")
        species = str(species or "").strip()
        operation_type = str(operation_type or "").strip()
        if not species or not operation_type:
            raise ValueError("Species and operation type are required")

        display_ids = [b.display_id for b in members]
        if any(b.species != species or b.created_date != created_date for b in members):
            display_ids = generate_display_ids(
                user_id, species, created_date, species_configs, len(members),
                exclude_ids=[b.id for b in members],
            )

        share = quantity / len(members)
        harvest = BatchService.is_harvest(operation_type)
        for batch, display_id in zip(members, display_ids):
            batch.species = species
            batch.created_date = created_date
            batch.operation_type = operation_type
            batch.quantity = share
            batch.display_id = display_id
            if harvest:
                batch.unit = Unit.GRAM
            elif batch.unit == Unit.GRAM:
                batch.unit = Unit.BAG

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Updated group of %d batches for user %s", len(members), user_id)
        return members

    @staticmethod
    def delete_batch(batch: Batch) -> None:
        batch_id, display_id = batch.id, batch.display_id
        try:
            db.session.delete(batch)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Deleted batch %s (%s)", batch_id, display_id)

    @staticmethod
    def delete_group(user_id: int, ids: list[str]) -> int:
        """Delete every listed batch the user owns; returns the count removed."""
        if not ids:
            return 0
        try:
            deleted = Batch.query.filter(
                Batch.user_id == user_id, Batch.id.in_(ids)
            ).delete(synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        logger.info("Deleted %d batches for user %s", deleted, user_id)
        return deleted

    @staticmethod
    def rename_species(
        user_id: int,
        old_name: str,
        new_name: str,
        old_abbreviation: str,
        new_abbreviation: str,
        commit: bool = True,
    ) -> int:
        """Rewrite species name and code segment on every matching batch."""
        batches = Batch.query.filter_by(user_id=user_id, species=old_name).all()
        for batch in batches:
            batch.species = new_name
            batch.display_id = batch.display_id.replace(
                f"-{old_abbreviation}-", f"-{new_abbreviation}-", 1
            )
        if commit:
            try:
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        logger.info(
            "Renamed species %r -> %r on %d batches for user %s",
            old_name, new_name, len(batches), user_id,
        )
        return len(batches)

    @staticmethod
    def import_rows(user_id: int, rows: list[dict], species_configs: list[dict]) -> list[Batch]:
        """Insert parsed CSV rows, keeping their display codes.

        Rows whose id already exists are given a new id; rows without a
        display code get one allocated.
        """
        batches = []
        for row in rows:
            batch_id = row.get("id")
            if not batch_id or db.session.get(Batch, batch_id) is not None:
                batch_id = new_batch_id()
            display_id = row.get("displayId") or generate_display_ids(
                user_id, row["species"], row["createdDate"], species_configs
            )[0]
            operation_type = row["operationType"]
            batches.append(Batch(
                id=batch_id,
                user_id=user_id,
                display_id=display_id,
                created_date=row["createdDate"],
                species=row["species"],
                operation_type=operation_type,
                quantity=row.get("quantity", 1),
                unit=Unit.GRAM if BatchService.is_harvest(operation_type) else Unit.BAG,
                end_date=row.get("endDate"),
                outcome=row.get("outcome"),
                notes=row.get("notes") or "",
                image_urls=[],
            ))
            # Allocations for later rows must see this one
            db.session.add(batches[-1])

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info("Imported %d batches for user %s", len(batches), user_id)
        return batches

    @staticmethod
    def add_image(batch: Batch, url: str) -> Batch:
        batch.image_urls = list(batch.image_urls or []) + [url]
        db.session.commit()
        return batch

    @staticmethod
    def remove_image(batch: Batch, url: str) -> Batch:
        batch.image_urls = [u for u in (batch.image_urls or []) if u != url]
        db.session.commit()
        return batch
