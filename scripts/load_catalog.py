"""
Load catalog CSV exports into the database.
Reads one CSV per table (genres.csv, films.csv, watch_history.csv, ...) from the
input directory and bulk-inserts them for the recommendation engine to read.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import argparse
import json
import math

import numpy as np
import pandas as pd
from sqlalchemy.orm import Session

from skyflix_recommendation_service.models import (
    Actor,
    Film,
    FilmCast,
    FilmGenre,
    Genre,
    Studio,
    User,
    UserPreference,
    WatchHistory,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Load order respects foreign keys
CATALOG_TABLES = [
    ('genres.csv', Genre),
    ('studios.csv', Studio),
    ('actors.csv', Actor),
    ('films.csv', Film),
    ('film_genres.csv', FilmGenre),
    ('film_cast.csv', FilmCast),
    ('users.csv', User),
    ('user_preferences.csv', UserPreference),
    ('watch_history.csv', WatchHistory),
]

DATETIME_COLUMNS = {'created_at', 'updated_at', 'watch_date'}
JSON_COLUMNS = {'ratings'}


def clean_dataframe_for_db(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean DataFrame by replacing NaN/NA values with None for database compatibility.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame
    """
    df = df.replace({np.nan: None, pd.NA: None})
    df = df.where(pd.notnull(df), None)

    return df


def to_db_value(column: str, value):
    """Convert a pandas cell to a value SQLAlchemy can bind."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if column in JSON_COLUMNS and isinstance(value, str):
        return json.loads(value)
    if column in DATETIME_COLUMNS:
        return pd.Timestamp(value).to_pydatetime()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        value = float(value)
    # Nullable integer columns are read back as floats
    if isinstance(value, float) and value.is_integer() and (column.endswith('_id') or column in {
        'release_year', 'duration', 'view_count', 'watch_duration', 'screen_time'
    }):
        return int(value)
    return value


def load_table(db: Session, model, csv_path: Path, batch_size: int = 1000) -> int:
    """
    Load one CSV file into a table.

    Args:
        db: Database session
        model: SQLAlchemy model class for the table
        csv_path: CSV file to read
        batch_size: Rows per insert batch

    Returns:
        Number of rows inserted
    """
    df = clean_dataframe_for_db(pd.read_csv(csv_path))
    columns = set(model.__table__.columns.keys())
    unknown = [c for c in df.columns if c not in columns]
    if unknown:
        logger.warning(f"Ignoring unknown columns in {csv_path.name}: {unknown}")

    records = [
        {k: to_db_value(k, v) for k, v in row.items() if k in columns}
        for row in df.to_dict('records')
    ]

    count = 0
    for i in range(0, len(records), batch_size):
        batch = records[i:i + batch_size]
        db.bulk_insert_mappings(model, batch)
        db.commit()
        count += len(batch)

    logger.info(f"✓ Loaded {count} rows into {model.__tablename__}")
    return count


def clear_catalog(db: Session) -> None:
    """Delete every catalog row, children first."""
    logger.info("Clearing existing catalog data...")
    for _, model in reversed(CATALOG_TABLES):
        db.query(model).delete()
    db.commit()


def load_catalog(db: Session, input_dir: Path, clear: bool = False) -> dict:
    """
    Load every catalog CSV present in a directory.

    Args:
        db: Database session
        input_dir: Directory with the CSV exports
        clear: Delete existing rows first

    Returns:
        Dict mapping table name to rows loaded
    """
    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    if clear:
        clear_catalog(db)

    counts = {}
    for filename, model in CATALOG_TABLES:
        csv_path = input_dir / filename
        if not csv_path.exists():
            logger.info(f"⊘ Skipping {filename} (not found)")
            continue
        counts[model.__tablename__] = load_table(db, model, csv_path)

    return counts


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Load catalog CSV exports into the database'
    )
    parser.add_argument(
        '--input-dir',
        type=str,
        default='data/catalog',
        help='Directory containing catalog CSV files (default: data/catalog)'
    )
    parser.add_argument(
        '--clear',
        action='store_true',
        help='Delete existing catalog rows before loading'
    )
    parser.add_argument(
        '--create-tables',
        action='store_true',
        help='Create missing tables before loading'
    )

    args = parser.parse_args()

    input_dir = project_root / args.input_dir

    logger.info("="*70)
    logger.info("LOAD CATALOG")
    logger.info("="*70)
    logger.info(f"Input directory: {input_dir}")
    logger.info(f"Clear existing: {args.clear}")
    logger.info("="*70)

    from skyflix_recommendation_service.models import Base
    from skyflix_recommendation_service.models.database import SessionLocal, engine

    if args.create_tables:
        Base.metadata.create_all(engine)

    db = SessionLocal()
    try:
        counts = load_catalog(db, input_dir, clear=args.clear)

        logger.info("\n" + "="*70)
        logger.info("✓ CATALOG LOAD COMPLETE")
        logger.info("="*70)
        for table, count in counts.items():
            logger.info(f"{table}: {count}")

    except Exception as e:
        logger.error(f"Error loading catalog: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        db.close()


if __name__ == '__main__':
    main()
