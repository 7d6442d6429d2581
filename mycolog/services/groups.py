"""Grouping of batches logged together (same day, species and operation)."""

from dataclasses import dataclass, field
from datetime import date


def group_key(batch) -> str:
    return f"{batch.species}::{batch.operation_type}"


@dataclass
class BatchGroup:
    key: str
    created_date: date
    members: list = field(default_factory=list)

    @property
    def first(self):
        return self.members[0]

    @property
    def aggregate_quantity(self) -> float:
        return sum(b.quantity or 0 for b in self.members)

    @property
    def display_ids(self) -> list[str]:
        return [b.display_id for b in self.members]

    @property
    def ids(self) -> list[str]:
        return [b.id for b in self.members]

    def to_dict(self):
        first = self.first
        return {
            "key": self.key,
            "createdDate": self.created_date.isoformat(),
            "species": first.species,
            "operationType": first.operation_type,
            "unit": first.unit,
            "aggregateQuantity": self.aggregate_quantity,
            "displayIds": self.display_ids,
            "ids": self.ids,
            "members": [b.to_dict() for b in self.members],
        }


@dataclass
class DateGroup:
    created_date: date
    groups: list[BatchGroup] = field(default_factory=list)

    def to_dict(self):
        return {
            "createdDate": self.created_date.isoformat(),
            "groups": [g.to_dict() for g in self.groups],
        }


def group_batches(batches) -> list[DateGroup]:
    """Partition batches by date, then by species and operation.

    Dates are returned newest first; groups within a date keep the order in
    which their first member appears.
    """
    by_date: dict[date, dict[str, BatchGroup]] = {}
    for batch in batches:
        groups = by_date.setdefault(batch.created_date, {})
        key = group_key(batch)
        if key not in groups:
            groups[key] = BatchGroup(key=key, created_date=batch.created_date)
        groups[key].members.append(batch)

    return [
        DateGroup(created_date=day, groups=list(by_date[day].values()))
        for day in sorted(by_date, reverse=True)
    ]
