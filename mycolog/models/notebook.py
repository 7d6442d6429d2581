from mycolog import db
from mycolog.models.batch import new_batch_id


class Recipe(db.Model):
    """Media and substrate recipes."""

    __tablename__ = "recipes"

    id = db.Column(db.String(36), primary_key=True, default=new_batch_id)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(100))
    ingredients = db.Column(db.Text)
    directions = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "ingredients": self.ingredients or "",
            "directions": self.directions or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Recipe {self.name}>"


class Note(db.Model):
    """Free-form notes."""

    __tablename__ = "notes"

    id = db.Column(db.String(36), primary_key=True, default=new_batch_id)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "notes": self.notes or "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Note {self.name}>"
