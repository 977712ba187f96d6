"""
Command-line interface for the zone grid generator

Usage:
    zonegrid generate --input data/neighborhoods.geojson
    zonegrid generate --dry-run --output zones_preview.geojson
    zonegrid init-db --database-url sqlite:///zones.db
"""

import sys
import argparse
import traceback

from loguru import logger

from .config import load_config
from .exceptions import ZoneGridError
from .pipeline import ZonePipeline
from .storage import ZoneStore, create_db_engine


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def cmd_generate(args):
    """Generate zones for every neighborhood and replace the stored set"""
    setup_logging(args.verbose)

    try:
        config = load_config(
            neighborhoods_path=args.input,
            database_url=args.database_url,
            cell_size_km=args.cell_size,
            cache_dir=args.cache_dir,
        )
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        pipeline = ZonePipeline(config)
        result = pipeline.run(dry_run=args.dry_run)
        if args.output:
            pipeline.save(result, args.output)
    except ZoneGridError as e:
        logger.error(f"Zone generation failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Zone generation failed unexpectedly: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1

    logger.info("Summary:")
    for summary in result.summaries:
        bearing = f"{summary.bearing:.1f}°" if summary.bearing is not None else "none"
        logger.info(f"  {summary.name}: {summary.zone_count} zones (bearing {bearing}, {summary.candidate_cells} cells)")
    if result.persisted is None:
        logger.info(f"✓ {len(result.zones)} zones computed (dry run)")
    else:
        logger.info(f"✓ {result.persisted} zones stored")
    return 0


def cmd_init_db(args):
    """Create the zones table"""
    setup_logging(args.verbose)

    try:
        config = load_config(database_url=args.database_url)
    except ValueError as e:
        logger.error(str(e))
        return 2

    try:
        store = ZoneStore(create_db_engine(config.database_url))
        store.create_schema()
    except ZoneGridError as e:
        logger.error(f"Failed to create schema: {e}")
        return 1
    except Exception as e:
        logger.error(f"Failed to create schema unexpectedly: {e}")
        if args.verbose:
            traceback.print_exc()
        return 1
    logger.info(f"✓ Zones table ready at {config.database_url}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Partition neighborhoods into street-aligned zones"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate and store zones")
    generate.add_argument("--input", "-i", help="Neighborhood GeoJSON (default: NEIGHBORHOODS_PATH)")
    generate.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL)")
    generate.add_argument("--cell-size", type=float, help="Cell side in km (default: 0.28)")
    generate.add_argument("--cache-dir", help="Cache raw Tilequery responses here")
    generate.add_argument("--dry-run", action="store_true", help="Compute zones without writing to the database")
    generate.add_argument("--output", "-o", help="Also write zones as GeoJSON")
    generate.add_argument("--verbose", "-v", action="store_true")
    generate.set_defaults(func=cmd_generate)

    init_db = subparsers.add_parser("init-db", help="Create the zones table")
    init_db.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL)")
    init_db.add_argument("--verbose", "-v", action="store_true")
    init_db.set_defaults(func=cmd_init_db)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
