"""Multi-model example: extract several planes from a point cloud."""

import sys

import numpy as np
from consensus.config import load_config
from consensus.models.plane import PlaneEstimator
from consensus.search.multi import MultiRANSAC
from consensus.utils.logger import setup_from_config


def make_scene(rng):
    """Floor, wall and clutter."""
    floor = np.column_stack([rng.uniform(0, 5, 400), rng.uniform(0, 5, 400), rng.normal(0, 0.01, 400)])
    wall = np.column_stack([rng.normal(0, 0.01, 300), rng.uniform(0, 5, 300), rng.uniform(0, 3, 300)])
    clutter = rng.uniform([0, 0, 0], [5, 5, 3], (100, 3))
    return np.vstack([floor, wall, clutter])


def main():
    """Extract planes using settings from an optional YAML file."""
    config = load_config(sys.argv[1] if len(sys.argv) > 1 else None)
    config['consensus']['inlier_threshold'] = 0.05
    logger = setup_from_config(config, name='plane_extraction')

    data = make_scene(np.random.default_rng(1))
    logger.info(f"Extracting planes from {len(data)} points...")

    with MultiRANSAC.from_config(config, seed=7) as multi:
        results = multi.run(PlaneEstimator(), data)

    for i, result in enumerate(results):
        logger.info(f"Plane {i + 1}: {result.model}, {result.support} points")

    stats = multi.get_stats()
    logger.info(f"Done: {stats['models']} planes, {stats['trials']} trials, "
                f"{stats['elapsed_ms']:.1f}ms")


if __name__ == "__main__":
    main()
