"""
Main Pipeline Orchestrator for Zone Generation

Partitions every neighborhood into street-aligned square zones:

  1. Load neighborhood boundaries (GeoJSON)
  2. For each neighborhood, in file order:
     a. Estimate the dominant road bearing around its centroid (Tilequery)
     b. Build a square grid over its bounding box, rotated to that bearing
     c. Clip cells against the boundary and name the survivors
  3. Replace the stored zone generation in one transaction

Loading problems abort before any network or database activity. A failed
bearing lookup only leaves that neighborhood's grid north-aligned.
"""

import json
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from .analysis import BearingEstimator, Clipper, GridGenerator, LocalProjection
from .collectors import BearingSource, BoundaryLoader, create_bearing_source
from .config import ZoneGridConfig
from .models import Neighborhood, NeighborhoodSummary, RunResult, Zone
from .storage import ZoneStore, create_db_engine
from .throttle import Throttle


class ZonePipeline:
    """
    Generate and persist zones for every neighborhood

    Usage:
        pipeline = ZonePipeline(load_config())
        result = pipeline.run()
    """

    def __init__(
        self,
        config: ZoneGridConfig,
        source: Optional[BearingSource] = None,
        store: Optional[ZoneStore] = None,
        throttle: Optional[Throttle] = None
    ):
        self.config = config
        self.loader = BoundaryLoader(default_name=config.default_neighborhood_name)
        self.source = source or create_bearing_source(config)
        self.estimator = BearingEstimator(self.source)
        self.grid_generator = GridGenerator()
        self.throttle = throttle or Throttle(config.api.min_request_interval_ms)
        self._store = store

    @property
    def store(self) -> ZoneStore:
        # Created lazily so dry runs never open a database
        if self._store is None:
            self._store = ZoneStore(create_db_engine(self.config.database_url))
        return self._store

    def run(self, dry_run: bool = False) -> RunResult:
        """
        Run the complete pipeline

        Args:
            dry_run: Compute zones without touching the store

        Returns:
            RunResult with zones, per-neighborhood summaries and the
            persisted count (None on dry runs)

        Raises:
            ResourceMissing, MalformedInput: Boundary file problems
            PersistenceFailure: Store rejected the replacement
        """
        logger.info("Stage 1: Loading neighborhood boundaries...")
        neighborhoods = self.loader.load(self.config.neighborhoods_path)

        logger.info(f"Stage 2: Generating zones for {len(neighborhoods)} neighborhoods...")
        result = RunResult()
        for i, neighborhood in enumerate(neighborhoods, 1):
            logger.info(f"[{i}/{len(neighborhoods)}] {neighborhood.name}")
            zones, summary = self.process_neighborhood(neighborhood)
            result.zones.extend(zones)
            result.summaries.append(summary)

        if dry_run:
            logger.info(f"Dry run: {len(result.zones)} zones computed, store untouched")
            return result

        logger.info("Stage 3: Replacing stored zones...")
        self.store.create_schema()
        result.persisted = self.store.replace_all(result.zones)
        logger.info(f"Done generating zones: {result.persisted} zones stored")
        return result

    def process_neighborhood(self, neighborhood: Neighborhood) -> Tuple[List[Zone], NeighborhoodSummary]:
        """Estimate bearing, grid, clip and name the zones of one neighborhood"""
        centroid = neighborhood.boundary.centroid

        if self.source.enabled:
            self.throttle.wait()
        bearing = self.estimator.estimate(
            (centroid.x, centroid.y),
            self.config.search_radius_m,
            self.config.road_limit
        )
        if bearing is not None:
            logger.info(f"  Using road bearing {bearing:.1f}° for {neighborhood.name}")
        else:
            logger.info(f"  No road bearing found for {neighborhood.name}, using 0°")

        projection = LocalProjection(centroid.x, centroid.y)
        local_boundary = projection.to_local(neighborhood.boundary)
        pivot = local_boundary.centroid

        cells = self.grid_generator.generate(
            local_boundary,
            self.config.cell_size_km,
            bearing,
            (pivot.x, pivot.y)
        )
        clipper = Clipper(local_boundary)

        zones = []
        for cell in cells:
            ring = clipper.clip(cell)
            if ring is None:
                continue
            zones.append(Zone(
                name=f"{neighborhood.name} - Zone {len(zones) + 1}",
                neighborhood_name=neighborhood.name,
                boundary_coords=projection.zone_coords(ring, cell),
            ))

        summary = NeighborhoodSummary(
            name=neighborhood.name,
            bearing=bearing,
            candidate_cells=len(cells),
            zone_count=len(zones),
        )
        logger.info(f"  {summary.zone_count} zones kept from {summary.candidate_cells} grid cells")
        return zones, summary

    def save(self, result: RunResult, output_path: str):
        """Write the zones of a run as a GeoJSON FeatureCollection"""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(result.to_feature_collection(), f, indent=2)
        logger.info(f"Saved {len(result.zones)} zones to {path}")
