"""Per-user species/operation/status configuration."""

import copy
import logging

from mycolog import db
from mycolog.models import UserConfig, StatusKind
from mycolog.models.settings import LANGUAGES
from mycolog.services.stats import kind_from_keywords

logger = logging.getLogger(__name__)


def get_user_configs(user_id: int) -> dict:
    """Return the user's configuration, filling unset keys with defaults."""
    configs = {
        wire: copy.deepcopy(default) for wire, default in UserConfig.KEYS.values()
    }
    rows = UserConfig.query.filter_by(user_id=user_id).all()
    for row in rows:
        if row.config_key in UserConfig.KEYS and row.config_value is not None:
            wire, _ = UserConfig.KEYS[row.config_key]
            configs[wire] = row.config_value
    return configs


def _require_named_list(configs: dict, name: str) -> list[dict]:
    items = configs.get(name)
    if not isinstance(items, list):
        raise ValueError(f"'{name}' must be a list")
    for item in items:
        if not isinstance(item, dict) or not str(item.get("name", "")).strip():
            raise ValueError(f"Every entry in '{name}' needs a name")
        if not item.get("id"):
            raise ValueError(f"Every entry in '{name}' needs an id")
    return items


def validate_configs(configs: dict) -> dict:
    """Check shapes and normalize a configuration payload.

    Raises ValueError describing the first problem found.
    """
    species = _require_named_list(configs, "species")
    for item in species:
        abbreviation = str(item.get("abbreviation") or "").strip().upper()
        item["name"] = str(item["name"]).strip()
        item["abbreviation"] = abbreviation or item["name"][:2].upper()

    operations = _require_named_list(configs, "operations")
    for item in operations:
        item["name"] = str(item["name"]).strip()

    statuses = _require_named_list(configs, "statuses")
    for item in statuses:
        item["name"] = str(item["name"]).strip()
        # Entries saved without a kind are classified by their wording
        kind = item.get("kind") or kind_from_keywords(item["name"])
        if kind not in StatusKind.CHOICES:
            raise ValueError(f"Unknown status kind: {kind}")
        item["kind"] = kind

    recipe_types = configs.get("recipeTypes", [])
    if not isinstance(recipe_types, list) or not all(isinstance(t, str) for t in recipe_types):
        raise ValueError("'recipeTypes' must be a list of names")

    language = configs.get("language") or "zh"
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")

    return {
        "species": species,
        "operations": operations,
        "statuses": statuses,
        "recipeTypes": [t.strip() for t in recipe_types if t.strip()],
        "language": language,
    }


def save_user_configs(user_id: int, configs: dict) -> dict:
    """Validate and persist a configuration, cascading species renames.

    Species are matched to their previous version by id; a changed name or
    abbreviation rewrites the user's batches in the same transaction.
    """
    from mycolog.services.batches import BatchService

    cleaned = validate_configs(configs)
    previous = {s["id"]: s for s in get_user_configs(user_id)["species"]}

    try:
        for item in cleaned["species"]:
            old = previous.get(item["id"])
            if old and (old["name"] != item["name"] or old["abbreviation"] != item["abbreviation"]):
                BatchService.rename_species(
                    user_id,
                    old_name=old["name"],
                    new_name=item["name"],
                    old_abbreviation=old["abbreviation"],
                    new_abbreviation=item["abbreviation"],
                    commit=False,
                )

        for key, (wire, _) in UserConfig.KEYS.items():
            UserConfig.set(user_id, key, cleaned[wire], commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Saved configuration for user %s", user_id)
    return cleaned
