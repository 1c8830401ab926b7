# bake_planet.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for regenerating a planet's elevation data
from a save file ("baking"). Each of the six cube faces is evaluated in its own
worker process; the results are written as raw NumPy arrays together with
colored preview images and a manifest.

Usage:
    python bake_planet.py --config path/to/planet.json
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing

import numpy as np
from PIL import Image
from tqdm import tqdm

from planet_generator import config as DEFAULTS
from planet_generator import color_maps
from planet_generator.errors import PlanetGeneratorError
from planet_generator.persistence import load_state
from planet_generator.planet import ElevationMinMax, terrain_faces
from planet_generator.shape import ShapeGenerator

# --- Global variables for worker processes ---
worker_generator = None
worker_resolution = 0


def init_worker(shape_config: dict, resolution: int):
    """Initializes the global state for each worker process."""
    global worker_generator, worker_resolution

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_generator = ShapeGenerator(config=shape_config, logger=worker_logger)
    worker_resolution = resolution


def process_face(face_index: int) -> tuple:
    """Evaluates one cube face and returns its (resolution, resolution) elevation grid."""
    face = terrain_faces()[face_index]
    points = face.unit_sphere_points(worker_resolution)
    elevations = worker_generator.get_elevations(points)
    return face_index, elevations.reshape(worker_resolution, worker_resolution)


def save_face_preview(elevations: np.ndarray, min_max: ElevationMinMax, lut: np.ndarray, file_path: str):
    """Writes a colored PNG preview of one face."""
    color_array = color_maps.get_elevation_color_array(elevations, min_max.min, min_max.max, lut)
    Image.fromarray(color_array, 'RGB').save(file_path, 'PNG')


# --- Main Baking Function ---
def bake_planet(config_path: str, output_dir: str = None, resolution: int = None, num_workers: int = None) -> int:
    """
    Loads a save file, evaluates all six faces and writes the baked package.

    Returns:
        int: A process exit code (0 on success).
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    # 2. --- Load Save File ---
    try:
        state = load_state(config_path, logger=logger)
        state.shape_gen.validate()
    except PlanetGeneratorError as e:
        logger.critical(f"Cannot bake '{config_path}': {e}")
        return 1

    resolution = resolution or state.settings['resolution']
    if resolution < DEFAULTS.MIN_MESH_RESOLUTION:
        logger.critical(f"Resolution must be at least {DEFAULTS.MIN_MESH_RESOLUTION}, got {resolution}")
        return 1

    # 3. --- Prepare Output Directories ---
    if output_dir is None:
        name = os.path.splitext(os.path.basename(config_path))[0]
        output_dir = os.path.join(DEFAULTS.DEFAULT_OUTPUT_DIR, name)
    faces_dir = os.path.join(output_dir, "faces")
    previews_dir = os.path.join(output_dir, "previews")
    os.makedirs(faces_dir, exist_ok=True)
    os.makedirs(previews_dir, exist_ok=True)
    logger.info(f"Output directory set to '{output_dir}'")

    # 4. --- Evaluate Faces (Parallelized) ---
    shape_config = state.shape_gen.to_dict()
    num_faces = len(terrain_faces())
    num_workers = num_workers or max(1, min(num_faces, multiprocessing.cpu_count() - 1))
    logger.info(
        f"Starting bake of {num_faces} faces at {resolution}x{resolution} "
        f"({state.shape_gen.num_layers} layers) with {num_workers} worker processes."
    )

    start_time = time.perf_counter()
    min_max = ElevationMinMax()
    face_elevations = {}

    with multiprocessing.Pool(processes=num_workers, initializer=init_worker,
                              initargs=(shape_config, resolution)) as pool:
        results_iterator = pool.imap_unordered(process_face, range(num_faces))
        for face_index, elevations in tqdm(results_iterator, total=num_faces, desc="Baking Faces"):
            min_max.add_values(elevations)
            face_elevations[face_index] = elevations
            np.save(os.path.join(faces_dir, f"face_{face_index}.npy"), elevations)

    # 5. --- Previews need the full elevation range, so they come last ---
    lut = color_maps.create_elevation_lut(color_maps.gradient_from_dict(state.colors))
    for face_index, elevations in sorted(face_elevations.items()):
        save_face_preview(elevations, min_max, lut, os.path.join(previews_dir, f"face_{face_index}.png"))

    # --- Finalization ---
    manifest = {
        "resolution": resolution,
        "faces": [f"faces/face_{i}.npy" for i in range(num_faces)],
        "previews": [f"previews/face_{i}.png" for i in range(num_faces)],
        "elevation_range": min_max.to_dict(),
    }
    with open(os.path.join(output_dir, "manifest.json"), 'w') as f:
        json.dump(manifest, f, indent=2)

    # The "birth certificate": everything needed to regenerate this bake.
    with open(os.path.join(output_dir, "generation_config.json"), 'w') as f:
        json.dump(state.to_dict(), f, indent=4)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(f"Elevation range: {min_max.min:.6f} to {min_max.max:.6f}")
    logger.info(f"Baked planet and manifest.json saved to: {output_dir}")
    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Offline baker for the procedural planet generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON save file of the planet to be baked."
    )
    parser.add_argument("--output", type=str, default=None, help="Output directory for the baked package.")
    parser.add_argument("--resolution", type=int, default=None, help="Vertices along one edge of a cube face.")
    parser.add_argument("--workers", type=int, default=None, help="Number of worker processes.")
    args = parser.parse_args()

    sys.exit(bake_planet(args.config, args.output, args.resolution, args.workers))
