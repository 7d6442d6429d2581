#!/usr/bin/env python3
"""
Import batches from a CSV file produced by the export.

Usage:
    python scripts/import_batches.py path/to/mushroom_logs.csv user@example.com

Expected CSV columns (export format):
    ID, Display ID, Date, Species, Operation, Quantity, End Date, Outcome, Notes
"""

import sys

# Add parent directory to path for imports
sys.path.insert(0, ".")

from mycolog import create_app
from mycolog.models import User
from mycolog.services import BatchService
from mycolog.services.configs import get_user_configs
from mycolog.services.export import parse_batches_csv


def import_batches(csv_path: str, email: str) -> int:
    """Import batches from CSV file for the user with *email*."""
    app = create_app()

    with app.app_context():
        user = User.query.filter_by(email=email).first()
        if not user:
            print(f"Error: no user with email {email}")
            return 1

        print(f"Importing batches from {csv_path}...")

        with open(csv_path, "r", encoding="utf-8-sig") as f:
            try:
                rows = parse_batches_csv(f.read())
            except ValueError as e:
                print(f"Error: {e}")
                return 1

        species = get_user_configs(user.id)["species"]
        batches = BatchService.import_rows(user.id, rows, species)

        print(f"Done! Imported {len(batches)} batches total.")

    return 0


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python scripts/import_batches.py path/to/file.csv user@example.com")
        sys.exit(1)

    sys.exit(import_batches(sys.argv[1], sys.argv[2]))
