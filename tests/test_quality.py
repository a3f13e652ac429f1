from __future__ import annotations

import unittest

from domain.quality import (
    FALLBACK_EMOJI,
    FALLBACK_LABEL,
    TRANSPARENT,
    clamp_quality,
    is_valid_quality,
    quality_choices,
    quality_color,
    quality_emoji,
    quality_label,
)


class QualityScaleTests(unittest.TestCase):
    def test_emoji_for_each_valid_value(self):
        self.assertEqual([quality_emoji(q) for q in quality_choices()], ["😡", "😠", "🙂", "😀", "😍"])

    def test_out_of_range_lookups_fall_back(self):
        for q in (0, 6, -1, None, "x"):
            self.assertEqual(quality_emoji(q), FALLBACK_EMOJI)
            self.assertEqual(quality_label(q), FALLBACK_LABEL)
            self.assertEqual(quality_color(q), TRANSPARENT)

    def test_colors_are_distinct_and_visible(self):
        colors = [quality_color(q) for q in quality_choices()]
        self.assertEqual(len(set(colors)), 5)
        for c in colors:
            self.assertEqual(len(c), 4)
            self.assertGreater(c[3], 0.0)

    def test_clamp_quality(self):
        self.assertEqual(clamp_quality(0), 1)
        self.assertEqual(clamp_quality(3), 3)
        self.assertEqual(clamp_quality(11), 5)
        self.assertEqual(clamp_quality("4"), 4)
        self.assertEqual(clamp_quality(None), 3)

    def test_is_valid_quality(self):
        self.assertTrue(is_valid_quality(1))
        self.assertTrue(is_valid_quality(5))
        self.assertFalse(is_valid_quality(0))
        self.assertFalse(is_valid_quality(6))
        self.assertFalse(is_valid_quality(None))


if __name__ == "__main__":
    unittest.main()
