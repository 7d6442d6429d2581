"""Human-readable batch codes of the form ``YYMMDD-ABBR-NN``."""

import logging
import re
from datetime import date

from mycolog.models import Batch

logger = logging.getLogger(__name__)

_SEQUENCE_RE = re.compile(r"-(\d+)$")


def resolve_abbreviation(species: str, species_configs: list[dict]) -> str:
    """Return the configured abbreviation for *species*.

    Falls back to the first two characters of the name, upper-cased, when
    the species is not in the user's configuration.
    """
    for entry in species_configs or []:
        if entry.get("name") == species:
            return entry.get("abbreviation") or species[:2].upper()
    return species[:2].upper()


def date_code(created_date: date) -> str:
    return created_date.strftime("%y%m%d")


def code_prefix(created_date: date, abbreviation: str) -> str:
    return f"{date_code(created_date)}-{abbreviation}-"


def parse_sequence(display_id: str) -> int:
    """Trailing sequence number of a display code, 0 when there is none."""
    match = _SEQUENCE_RE.search(display_id or "")
    return int(match.group(1)) if match else 0


def allocate_display_ids(existing: list[str], prefix: str, count: int) -> list[str]:
    """Allocate *count* consecutive codes after the highest existing sequence."""
    if count < 1:
        raise ValueError("At least one display id must be requested")
    start = max((parse_sequence(code) for code in existing), default=0) + 1
    return [f"{prefix}{seq:02d}" for seq in range(start, start + count)]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so *value* matches literally (escape char ``\\``)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def existing_display_ids(user_id: int, prefix: str, exclude_ids=None) -> list[str]:
    """Display codes the user already has under *prefix*."""
    query = Batch.query.with_entities(Batch.display_id).filter(
        Batch.user_id == user_id,
        Batch.display_id.like(f"{escape_like(prefix)}%", escape="\\"),
    )
    if exclude_ids:
        query = query.filter(Batch.id.notin_(list(exclude_ids)))
    return [row.display_id for row in query.all()]


def generate_display_ids(
    user_id: int,
    species: str,
    created_date: date,
    species_configs: list[dict],
    count: int = 1,
    exclude_ids=None,
) -> list[str]:
    """Allocate *count* new display codes for a species/date.

    Nothing is reserved: two sessions allocating at the same time can be
    handed the same suffix.
    """
    prefix = code_prefix(created_date, resolve_abbreviation(species, species_configs))
    codes = allocate_display_ids(
        existing_display_ids(user_id, prefix, exclude_ids=exclude_ids), prefix, count
    )
    logger.debug("Allocated display ids %s for user %s", codes, user_id)
    return codes


def regenerate_display_id(
    batch: Batch, new_species: str, new_date: date, species_configs: list[dict]
) -> str:
    """Display code for *batch* after an edit to its species or date.

    The current code is kept when neither changed; otherwise the next free
    code under the new prefix is allocated.
    """
    if new_species == batch.species and new_date == batch.created_date:
        return batch.display_id
    return generate_display_ids(
        batch.user_id, new_species, new_date, species_configs, exclude_ids=[batch.id]
    )[0]
