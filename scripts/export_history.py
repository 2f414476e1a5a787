#!/usr/bin/env python3
"""
Export words, users and learning history from the database to JSON
"""

import json
import logging
import sqlite3
import sys
from datetime import datetime
from pathlib import Path

from tango.config import get_settings

logger = logging.getLogger(__name__)


def export_history_data(db_path: str, output_path: str) -> bool:
    """Export all words, users and learning history records to JSON"""
    try:
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        try:
            words = [dict(row) for row in conn.execute("SELECT * FROM words ORDER BY id")]
            users = [dict(row) for row in conn.execute("SELECT * FROM users ORDER BY id")]
            user_words = [
                dict(row) for row in conn.execute("SELECT * FROM user_words ORDER BY id")
            ]
        finally:
            conn.close()

        logger.info(
            f"Found {len(words)} words, {len(users)} users, "
            f"{len(user_words)} learning history records"
        )

        export_data = {
            "export_info": {
                "exported_at": datetime.now().isoformat(),
                "database_path": db_path,
            },
            "words": words,
            "users": users,
            "user_words": user_words,
        }

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(export_data, f, ensure_ascii=False, indent=2, default=str)

        logger.info(f"Exported data to {output_path}")
        return True
    except (OSError, sqlite3.Error) as e:
        logger.error(f"Export failed: {e}")
        return False


def main():
    """Main export function"""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if len(sys.argv) != 3:
        print("Usage: python export_history.py <database_path> <output_json_path>")
        sys.exit(1)

    db_path, output_path = sys.argv[1], sys.argv[2]
    if not Path(db_path).exists():
        logger.error(f"Database not found: {db_path}")
        sys.exit(1)

    sys.exit(0 if export_history_data(db_path, output_path) else 1)


if __name__ == "__main__":
    main()
