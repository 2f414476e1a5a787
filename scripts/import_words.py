#!/usr/bin/env python3
"""
Import a word list from JSON into the word supply database
"""

import json
import logging
import sys
from pathlib import Path

from tango.config import get_settings
from tango.core.database.database_manager import DatabaseManager
from tango.core.session.models import LEVELS

logger = logging.getLogger(__name__)


def load_word_list(json_path: str) -> list[dict]:
    """Read either a bare list of words or an object with a 'words' key"""
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)

    words = data.get("words", []) if isinstance(data, dict) else data
    if not isinstance(words, list):
        raise ValueError(f"{json_path} does not contain a word list")
    return words


def import_words_data(json_path: str, db_path: str) -> bool:
    """Import words into the database, creating the schema if needed"""
    try:
        words = load_word_list(json_path)
        logger.info(f"Loaded {len(words)} words from {json_path}")

        unknown_levels = {w.get("level") for w in words} - set(LEVELS)
        if unknown_levels:
            logger.warning(f"Words with unknown levels: {sorted(map(str, unknown_levels))}")

        db_manager = DatabaseManager(db_path)
        db_manager.init_database()

        added = db_manager.add_words(words)
        logger.info(f"Imported {added} of {len(words)} words into {db_path}")

        for level in LEVELS:
            logger.info(f"{level}: {db_manager.word_repo.count_words(level)} words stored")
        return added > 0
    except (OSError, ValueError) as e:
        logger.error(f"Import failed: {e}")
        return False


def main():
    """Main import function"""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if len(sys.argv) not in (2, 3):
        print("Usage: python import_words.py <input_json_path> [database_path]")
        print("Example: python import_words.py data/words.json data/tango.db")
        sys.exit(1)

    json_path = sys.argv[1]
    db_path = sys.argv[2] if len(sys.argv) == 3 else settings.database_url.replace("sqlite:///", "")

    if not Path(json_path).exists():
        logger.error(f"JSON file not found: {json_path}")
        sys.exit(1)

    sys.exit(0 if import_words_data(json_path, db_path) else 1)


if __name__ == "__main__":
    main()
