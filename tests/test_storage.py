# tests/test_storage.py
# Unit tests for the flat per-layer record mirror and batch evaluation.

import unittest

import numpy as np

from planet_generator import config as DEFAULTS
from planet_generator.errors import ConfigurationError
from planet_generator.layers import NoiseLayer
from planet_generator.noise_filter import FilterType, NoiseFilter
from planet_generator.shape import ShapeGenerator
from planet_generator.storage import NOISE_LAYER_DTYPE, NoiseLayersBuffer


def build_generator() -> ShapeGenerator:
    shape_gen = ShapeGenerator({'radius': 1.25, 'sea_level': 0.7})
    shape_gen.noise_layers = [
        NoiseLayer(filter=NoiseFilter({
            'seed': 100, 'num_octaves': 5, 'strength': 0.4, 'roughness': 1.1, 'lacunarity': 2.2,
            'persistence': 0.45, 'offset': 0.2, 'floor': 0.33, 'center': (0.5, -0.5, 1.5),
        })),
        NoiseLayer(filter=NoiseFilter({'seed': 200, 'filter_type': FilterType.RIGID, 'num_octaves': 4}),
                   first_layer_mask=True),
        NoiseLayer(filter=NoiseFilter({'seed': 300, 'filter_type': FilterType.WARP, 'strength': 0.25,
                                       'warp_offset': (3.0, -7.0, 11.0)}),
                   is_warp=True, warp_target=1),
        NoiseLayer(filter=NoiseFilter({'seed': 400}), enabled=False, warp_target=3),
    ]
    return shape_gen


def unit_points(count: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    points = rng.normal(size=(count, 3))
    return points / np.linalg.norm(points, axis=1)[:, np.newaxis]


class TestRecordPacking(unittest.TestCase):

    def setUp(self):
        self.shape_gen = build_generator()
        self.buffer = NoiseLayersBuffer.from_shape_generator(self.shape_gen)

    def test_fixed_capacity(self):
        self.assertEqual(self.buffer.records.shape, (DEFAULTS.MAX_NOISE_LAYERS,))
        self.assertEqual(self.buffer.records.dtype, NOISE_LAYER_DTYPE)
        self.assertEqual(self.buffer.num_layers, 4)
        self.assertEqual(self.buffer.radius, 1.25)
        self.assertEqual(self.buffer.sea_level, 0.7)

    def test_fields_mirror_the_structural_model(self):
        for record, layer in zip(self.buffer.records, self.shape_gen.noise_layers):
            noise_filter = layer.filter
            np.testing.assert_array_equal(record['simplex_random'], noise_filter.noise.random)
            self.assertEqual(record['filter_type'], int(noise_filter.filter_type))
            self.assertEqual(record['num_octaves'], noise_filter.num_octaves)
            self.assertEqual(record['strength'], noise_filter.strength)
            self.assertEqual(record['roughness'], noise_filter.roughness)
            self.assertEqual(record['lacunarity'], noise_filter.lacunarity)
            self.assertEqual(record['persistence'], noise_filter.persistence)
            self.assertEqual(record['offset'], noise_filter.offset)
            self.assertEqual(record['floor'], noise_filter.floor)
            np.testing.assert_array_equal(record['center'], noise_filter.center)
            np.testing.assert_array_equal(record['warp_offset'], noise_filter.warp_offset)
            self.assertEqual(record['warp_target'], layer.warp_target)
            self.assertEqual(record['is_warp'], int(layer.is_warp))
            self.assertEqual(record['first_layer_mask'], int(layer.first_layer_mask))
            self.assertEqual(record['enabled'], int(layer.enabled))

    def test_warp_fields_copied_unchanged(self):
        self.assertEqual(self.buffer.records['warp_target'][:4].tolist(), [1, 1, 1, 3])
        self.assertEqual(self.buffer.records['is_warp'][:4].tolist(), [0, 0, 1, 0])

    def test_unused_slots_are_zeroed(self):
        unused = self.buffer.records[4:]
        self.assertTrue(np.all(unused['simplex_random'] == 0))
        self.assertTrue(np.all(unused['strength'] == 0.0))
        self.assertTrue(np.all(unused['enabled'] == 0))

    def test_floor_is_mirrored(self):
        self.assertEqual(self.buffer.records[0]['floor'], 0.33)


class TestBatchEvaluation(unittest.TestCase):

    def test_matches_scalar_path(self):
        shape_gen = build_generator()
        points = unit_points(300)
        batch = NoiseLayersBuffer.from_shape_generator(shape_gen).evaluate(points)
        scalar = np.array([shape_gen.get_elevation(p) for p in points])
        np.testing.assert_allclose(batch, scalar, rtol=1e-12, atol=0.0)

    def test_targets_on_ordinary_layers_are_ignored(self):
        shape_gen = ShapeGenerator({'radius': 2.0})
        shape_gen.noise_layers[0].filter = NoiseFilter({'seed': 11, 'num_octaves': 3, 'strength': 0.5})
        shape_gen.add_layer(NoiseLayer(filter=NoiseFilter({'seed': 12, 'filter_type': FilterType.RIGID}),
                                       warp_target=2))
        buffer = NoiseLayersBuffer.from_shape_generator(shape_gen)
        self.assertEqual(buffer.records['warp_target'][:2].tolist(), [1, 2])

        buffer.records['warp_target'][:2] = 1
        points = unit_points(40, seed=9)
        scalar = np.array([shape_gen.get_elevation(p) for p in points])
        np.testing.assert_allclose(buffer.evaluate(points), scalar, rtol=1e-12, atol=0.0)

    def test_points_and_elevations(self):
        shape_gen = build_generator()
        points = unit_points(10, seed=5)
        positions, elevations = NoiseLayersBuffer.from_shape_generator(shape_gen).points_and_elevations(points)
        self.assertEqual(positions.shape, (10, 3))
        np.testing.assert_array_equal(positions, points * elevations[:, np.newaxis])

    def test_single_point_is_accepted(self):
        shape_gen = ShapeGenerator()
        elevations = NoiseLayersBuffer.from_shape_generator(shape_gen).evaluate(np.array([1.0, 0.0, 0.0]))
        self.assertEqual(elevations.shape, (1,))
        self.assertAlmostEqual(elevations[0], shape_gen.get_elevation((1.0, 0.0, 0.0)), places=12)

    def test_full_capacity(self):
        shape_gen = ShapeGenerator()
        for seed in range(1, DEFAULTS.MAX_NOISE_LAYERS):
            shape_gen.add_layer(NoiseLayer(filter=NoiseFilter({'seed': seed, 'strength': 0.05})))
        points = unit_points(20, seed=2)
        batch = shape_gen.get_elevations(points)
        scalar = np.array([shape_gen.get_elevation(p) for p in points])
        np.testing.assert_allclose(batch, scalar, rtol=1e-12, atol=0.0)


class TestBufferValidation(unittest.TestCase):

    def test_overflow_is_rejected(self):
        shape_gen = ShapeGenerator()
        for _ in range(DEFAULTS.MAX_NOISE_LAYERS):
            shape_gen.add_layer()
        with self.assertRaises(ConfigurationError):
            NoiseLayersBuffer.from_shape_generator(shape_gen)

    def test_empty_generator_is_rejected(self):
        shape_gen = ShapeGenerator()
        shape_gen.remove_layer(0)
        with self.assertRaises(ConfigurationError):
            NoiseLayersBuffer.from_shape_generator(shape_gen)

    def test_raw_records_are_validated(self):
        records = np.zeros(DEFAULTS.MAX_NOISE_LAYERS, dtype=NOISE_LAYER_DTYPE)
        with self.assertRaises(ConfigurationError):
            NoiseLayersBuffer(records, 0, 1.0, 1.0)

        records['warp_target'][0] = 3
        NoiseLayersBuffer(records, 2, 1.0, 1.0)

        records['is_warp'][0] = 1
        with self.assertRaises(ConfigurationError):
            NoiseLayersBuffer(records, 2, 1.0, 1.0)

    def test_wrong_record_layout_is_rejected(self):
        with self.assertRaises(ValueError):
            NoiseLayersBuffer(np.zeros(4, dtype=NOISE_LAYER_DTYPE), 1, 1.0, 1.0)


if __name__ == '__main__':
    unittest.main()
