"""Tests for row flipping, face swapping, and the version policy."""

import unittest

import numpy as np

from CubeBrew.core import flip_rows, normalize_level, swap_face_pair


def _faces(width, channels, start=0):
    size = width * width * channels
    return [np.arange(start + j * size, start + (j + 1) * size, dtype=np.float32)
            for j in range(6)]


class TestFlipRows(unittest.TestCase):
    def test_reverses_rows_single_channel(self):
        face = np.arange(9, dtype=np.float32)
        flip_rows(face, 3, 1)
        np.testing.assert_array_equal(face, [6, 7, 8, 3, 4, 5, 0, 1, 2])

    def test_keeps_pixels_within_row_intact(self):
        face = np.arange(2 * 2 * 3, dtype=np.float32)
        flip_rows(face, 2, 3)
        np.testing.assert_array_equal(
            face, [6, 7, 8, 9, 10, 11, 0, 1, 2, 3, 4, 5]
        )

    def test_matches_numpy_flipud(self):
        img = np.random.rand(8, 8, 4).astype(np.float32)
        face = img.reshape(-1).copy()
        flip_rows(face, 8, 4)
        np.testing.assert_array_equal(face.reshape(8, 8, 4), img[::-1])

    def test_involutive(self):
        for width, channels in ((1, 3), (2, 1), (5, 3), (8, 4)):
            original = np.random.rand(width * width * channels).astype(np.float32)
            face = original.copy()
            flip_rows(face, width, channels)
            flip_rows(face, width, channels)
            self.assertEqual(face.tobytes(), original.tobytes())

    def test_single_row_and_empty_faces_unchanged(self):
        face = np.array([1.0, 2.0, 3.0], dtype=np.float32)
        flip_rows(face, 1, 3)
        np.testing.assert_array_equal(face, [1.0, 2.0, 3.0])
        empty = np.empty(0, dtype=np.float32)
        flip_rows(empty, 0, 3)
        self.assertEqual(empty.size, 0)


class TestSwapFacePair(unittest.TestCase):
    def test_swaps_faces_two_and_three(self):
        faces = _faces(2, 1)
        originals = [f.copy() for f in faces]
        swap_face_pair(faces)
        np.testing.assert_array_equal(faces[2], originals[3])
        np.testing.assert_array_equal(faces[3], originals[2])
        for j in (0, 1, 4, 5):
            np.testing.assert_array_equal(faces[j], originals[j])

    def test_involutive(self):
        faces = _faces(3, 3)
        originals = [f.copy() for f in faces]
        swap_face_pair(faces)
        swap_face_pair(faces)
        for face, original in zip(faces, originals):
            np.testing.assert_array_equal(face, original)


class TestNormalizeLevel(unittest.TestCase):
    def test_legacy_flips_and_swaps_base_level(self):
        faces = _faces(2, 1)
        normalize_level(faces, 2, 1, 2.5, is_base_level=True)
        np.testing.assert_array_equal(faces[0], [2, 3, 0, 1])
        np.testing.assert_array_equal(faces[2], [14, 15, 12, 13])
        np.testing.assert_array_equal(faces[3], [10, 11, 8, 9])

    def test_legacy_flips_and_swaps_other_levels(self):
        faces = _faces(2, 1)
        normalize_level(faces, 2, 1, 2.0, is_base_level=False)
        np.testing.assert_array_equal(faces[1], [6, 7, 4, 5])
        np.testing.assert_array_equal(faces[2], [14, 15, 12, 13])

    def test_versions_just_below_three_use_legacy_policy(self):
        for version in (2.96, 2.99, float(np.float32(2.999))):
            with self.subTest(version=version):
                faces = _faces(2, 1)
                normalize_level(faces, 2, 1, version, is_base_level=True)
                np.testing.assert_array_equal(faces[0], [2, 3, 0, 1])
                np.testing.assert_array_equal(faces[2], [14, 15, 12, 13])

    def test_v3_leaves_base_level_untouched(self):
        faces = _faces(2, 1)
        originals = [f.copy() for f in faces]
        normalize_level(faces, 2, 1, 3.0, is_base_level=True)
        for face, original in zip(faces, originals):
            np.testing.assert_array_equal(face, original)

    def test_v3_flips_other_levels_without_swap(self):
        faces = _faces(2, 1)
        normalize_level(faces, 2, 1, 3.1, is_base_level=False)
        np.testing.assert_array_equal(faces[2], [10, 11, 8, 9])
        np.testing.assert_array_equal(faces[3], [14, 15, 12, 13])


if __name__ == "__main__":
    unittest.main(verbosity=2)
