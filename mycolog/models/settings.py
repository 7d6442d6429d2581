from mycolog import db


class StatusKind:
    """What a status label means for statistics, independent of its wording."""
    HEALTHY = "healthy"
    CONTAMINATED = "contaminated"
    DISCARDED = "discarded"
    PENDING = "pending"

    CHOICES = [HEALTHY, CONTAMINATED, DISCARDED, PENDING]


DEFAULT_SPECIES = [
    {"id": "1", "name": "Oyster Blue", "abbreviation": "OB", "colorHex": "#3b82f6"},
    {"id": "2", "name": "Oyster Tan", "abbreviation": "OT", "colorHex": "#eab308"},
    {"id": "3", "name": "Oyster Warm White", "abbreviation": "OWW", "colorHex": "#6b7280"},
    {"id": "4", "name": "Oyster King of Pearl", "abbreviation": "OKP", "colorHex": "#9ca3af"},
    {"id": "5", "name": "Oyster Pink", "abbreviation": "OP", "colorHex": "#ef4444"},
    {"id": "6", "name": "Lions' Mane", "abbreviation": "LM", "colorHex": "#22c55e"},
]

DEFAULT_OPERATIONS = [
    {"id": "1", "name": "Agar work", "colorHex": "#a855f7"},
    {"id": "2", "name": "Agar to grain", "colorHex": "#8b5cf6"},
    {"id": "3", "name": "Agar to LC", "colorHex": "#6366f1"},
    {"id": "4", "name": "Fresh to grain", "colorHex": "#10b981"},
    {"id": "5", "name": "LC to grain", "colorHex": "#0ea5e9"},
    {"id": "6", "name": "LC expansion", "colorHex": "#3b82f6"},
    {"id": "7", "name": "Grain expansion", "colorHex": "#eab308"},
    {"id": "8", "name": "Grain to substrate", "colorHex": "#f97316"},
    {"id": "9", "name": "Harvest", "colorHex": "#16a34a"},
]

DEFAULT_STATUSES = [
    {"id": "1", "name": "健康", "colorHex": "#22c55e", "kind": StatusKind.HEALTHY},
    {"id": "2", "name": "轻微感染", "colorHex": "#eab308", "kind": StatusKind.PENDING},
    {"id": "3", "name": "感染废弃", "colorHex": "#ef4444", "kind": StatusKind.DISCARDED},
]

DEFAULT_RECIPE_TYPES = ["Agar", "Liquid Culture", "Grain", "Substrate"]

LANGUAGES = ("zh", "en")


class UserConfig(db.Model):
    """Per-user configuration stored as one JSON value per key."""

    __tablename__ = "user_configs"
    __table_args__ = (
        db.UniqueConstraint("user_id", "config_key", name="uq_user_configs_user_key"),
    )

    SPECIES = "species_list"
    OPERATIONS = "operations_list"
    STATUSES = "status_list"
    RECIPE_TYPES = "recipe_types"
    LANGUAGE = "language"

    # config_key -> (wire name, default)
    KEYS = {
        SPECIES: ("species", DEFAULT_SPECIES),
        OPERATIONS: ("operations", DEFAULT_OPERATIONS),
        STATUSES: ("statuses", DEFAULT_STATUSES),
        RECIPE_TYPES: ("recipeTypes", DEFAULT_RECIPE_TYPES),
        LANGUAGE: ("language", "zh"),
    }

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    config_key = db.Column(db.String(50), nullable=False)
    config_value = db.Column(db.JSON)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    @classmethod
    def get(cls, user_id: int, key: str, default=None):
        """Get a config value by key."""
        row = cls.query.filter_by(user_id=user_id, config_key=key).first()
        return row.config_value if row else default

    @classmethod
    def set(cls, user_id: int, key: str, value, commit: bool = True) -> None:
        """Insert or update a config value."""
        row = cls.query.filter_by(user_id=user_id, config_key=key).first()
        if row:
            row.config_value = value
        else:
            row = cls(user_id=user_id, config_key=key, config_value=value)
            db.session.add(row)
        if commit:
            db.session.commit()

    def __repr__(self):
        return f"<UserConfig {self.user_id}:{self.config_key}>"
