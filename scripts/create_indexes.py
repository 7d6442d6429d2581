#!/usr/bin/env python3
"""
Create PostgreSQL indexes for display-code allocation and date filters.
Run this after the initial migration on large logs.
"""

import sys
sys.path.insert(0, ".")

from mycolog import create_app, db


def create_indexes():
    app = create_app()

    with app.app_context():
        print("Creating batch indexes...")

        try:
            # Prefix search (display_id LIKE 'YYMMDD-ABBR-%') per user
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_batches_user_display_prefix
                ON batches (user_id, display_id text_pattern_ops)
            """))
            print("  Created prefix index on (user_id, display_id)")

            # Date window filters for statistics and the log view
            db.session.execute(db.text("""
                CREATE INDEX IF NOT EXISTS idx_batches_user_created_date
                ON batches (user_id, created_date DESC)
            """))
            print("  Created index on (user_id, created_date)")

            # Analyze the table for query planner
            db.session.execute(db.text("ANALYZE batches"))
            print("  Analyzed batches table")

            db.session.commit()
            print("Done! Indexes created successfully.")

        except Exception as e:
            print(f"Error: {e}")
            db.session.rollback()
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(create_indexes())
