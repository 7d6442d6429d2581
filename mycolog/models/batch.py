import uuid

from mycolog import db


class Unit:
    """Unit labels for batch quantities."""
    BOTTLE = "bottle"
    BAG = "bag"
    PLATE = "plate"
    GRAM = "g"

    CHOICES = [BOTTLE, BAG, PLATE, GRAM]


def new_batch_id() -> str:
    return str(uuid.uuid4())


class Batch(db.Model):
    """One logged cultivation operation (agar plate, grain jar, harvest...)."""

    __tablename__ = "batches"

    id = db.Column(db.String(36), primary_key=True, default=new_batch_id)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    display_id = db.Column(db.String(64), nullable=False, index=True)
    created_date = db.Column(db.Date, nullable=False, index=True)
    species = db.Column(db.String(100), nullable=False)
    operation_type = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Float, nullable=False, default=1)
    unit = db.Column(db.String(16), nullable=False, default=Unit.BAG)

    # Lineage pointer; intentionally not a foreign key
    parent_id = db.Column(db.String(36), index=True)

    end_date = db.Column(db.Date)
    outcome = db.Column(db.String(100))
    notes = db.Column(db.Text)
    image_urls = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Relationships
    owner = db.relationship("User", back_populates="batches")

    @property
    def is_concluded(self):
        return self.end_date is not None

    def clone(self, **overrides):
        """Return a new, unsaved Batch with the same field values."""
        fields = {
            "user_id": self.user_id,
            "display_id": self.display_id,
            "created_date": self.created_date,
            "species": self.species,
            "operation_type": self.operation_type,
            "quantity": self.quantity,
            "unit": self.unit,
            "parent_id": self.parent_id,
            "end_date": self.end_date,
            "outcome": self.outcome,
            "notes": self.notes,
            "image_urls": list(self.image_urls or []),
        }
        fields.update(overrides)
        fields.setdefault("id", new_batch_id())
        return Batch(**fields)

    def to_dict(self):
        return {
            "id": self.id,
            "displayId": self.display_id,
            "createdDate": self.created_date.isoformat() if self.created_date else None,
            "species": self.species,
            "operationType": self.operation_type,
            "quantity": self.quantity,
            "unit": self.unit,
            "parentId": self.parent_id,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "outcome": self.outcome,
            "notes": self.notes or "",
            "imageUrls": list(self.image_urls or []),
        }

    def __repr__(self):
        return f"<Batch {self.display_id} ({self.operation_type})>"
