# fidelity_probe.py

"""
Verifies a baked planet package against the scalar evaluation path.

For every face, the four corners and the center of the baked grid are
re-evaluated with ShapeGenerator.get_elevation and compared to the stored
value.

Usage:
    python fidelity_probe.py --package baked_planets/my_planet
"""
import argparse
import json
import logging
import os
import sys

import numpy as np

from planet_generator.errors import PersistenceError
from planet_generator.persistence import state_from_dict
from planet_generator.planet import terrain_faces


def probe_face(logger, shape_gen, face_index, face, baked, tolerance) -> bool:
    """Helper function to run the fidelity probe on a single face."""
    logger.info(f"--- Probing Face {face_index} ---")
    resolution = baked.shape[0]
    points = face.unit_sphere_points(resolution)

    probe_points_local = [
        (0, 0), (resolution - 1, 0), (0, resolution - 1), (resolution - 1, resolution - 1),
        (resolution // 2, resolution // 2)
    ]

    face_passed = True
    for px, py in probe_points_local:
        baked_value = float(baked[py, px])
        live_value = shape_gen.get_elevation(points[py * resolution + px])

        passed = abs(baked_value - live_value) <= tolerance * max(1.0, abs(live_value))
        result = "PASS" if passed else "FAIL"
        logger.info(f"  [{result}] ({px}, {py}): baked={baked_value!r} live={live_value!r}")
        face_passed = face_passed and passed

    return face_passed


def main(package_dir: str, tolerance: float) -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s', stream=sys.stdout)
    logger = logging.getLogger("FidelityProbe")

    try:
        with open(os.path.join(package_dir, "manifest.json"), 'r') as f:
            manifest = json.load(f)
        with open(os.path.join(package_dir, "generation_config.json"), 'r') as f:
            state = state_from_dict(json.load(f), logger=logger)
    except (FileNotFoundError, json.JSONDecodeError, PersistenceError) as e:
        logger.critical(f"Could not load baked package '{package_dir}': {e}")
        return 1

    all_passed = True
    for face_index, face in enumerate(terrain_faces()):
        try:
            baked = np.load(os.path.join(package_dir, manifest["faces"][face_index]))
        except (IndexError, KeyError, FileNotFoundError):
            logger.error(f"FAILURE: No baked data for face {face_index}.")
            all_passed = False
            continue
        all_passed = probe_face(logger, state.shape_gen, face_index, face, baked, tolerance) and all_passed

    if all_passed:
        logger.info("All probes passed: the baked package matches live evaluation.")
        return 0
    logger.error("Fidelity probe found mismatches.")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compare a baked planet against live evaluation.")
    parser.add_argument("--package", type=str, required=True, help="Path to a baked planet package.")
    parser.add_argument("--tolerance", type=float, default=1e-9, help="Allowed relative difference.")
    args = parser.parse_args()

    sys.exit(main(args.package, args.tolerance))
