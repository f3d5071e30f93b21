import unittest

import numpy as np

from _helpers import make_raw_output
from yolo_detector.metadata import COCO_CLASSES
from yolo_detector.postprocess import DecoderConfig, DetectionDecoder


class TestDetectionDecoder(unittest.TestCase):
    def test_single_person_scaled_to_original_size(self) -> None:
        raw = make_raw_output([((320, 320, 100, 200), 0, 0.9)])
        out = DetectionDecoder().decode(raw, 640, 480)

        self.assertEqual(len(out), 1)
        box = out[0]
        self.assertEqual(box.label, "person")
        self.assertAlmostEqual(box.confidence, 0.9, places=6)
        self.assertAlmostEqual(box.x1, 270.0)
        self.assertAlmostEqual(box.y1, 165.0)
        self.assertAlmostEqual(box.x2, 370.0)
        self.assertAlmostEqual(box.y2, 315.0)

    def test_best_class_and_label(self) -> None:
        raw = make_raw_output([((100, 100, 10, 10), 2, 0.55)])
        raw[0, 4 + 16, 0] = 0.8  # dog beats car
        out = DetectionDecoder().decode(raw, 640, 640)
        self.assertEqual([b.label for b in out], ["dog"])
        self.assertAlmostEqual(out[0].confidence, 0.8, places=6)

    def test_ties_resolve_to_lowest_class_id(self) -> None:
        raw = make_raw_output([((100, 100, 10, 10), 15, 0.7)])
        raw[0, 4 + 16, 0] = 0.7
        raw[0, 4 + 79, 0] = 0.7
        out = DetectionDecoder().decode(raw, 640, 640)
        self.assertEqual(out[0].label, COCO_CLASSES[15])

    def test_threshold_is_inclusive(self) -> None:
        raw = make_raw_output(
            [
                ((100, 100, 10, 10), 0, 0.5),
                ((200, 200, 10, 10), 0, 0.49),
            ]
        )
        out = DetectionDecoder().decode(raw, 640, 640)
        self.assertEqual(len(out), 1)
        self.assertAlmostEqual(out[0].x1, 95.0)

    def test_never_emits_below_threshold(self) -> None:
        rng = np.random.default_rng(11)
        raw = np.zeros((1, 84, 8400), dtype=np.float32)
        raw[0, 0:2, :] = rng.uniform(0, 640, size=(2, 8400))
        raw[0, 2:4, :] = rng.uniform(0, 100, size=(2, 8400))
        raw[0, 4:, :] = rng.uniform(0, 0.6, size=(80, 8400))

        out = DetectionDecoder().decode(raw, 1280, 720)
        self.assertGreater(len(out), 0)
        for box in out:
            self.assertGreaterEqual(box.confidence, 0.5)
            self.assertLessEqual(box.x1, box.x2)
            self.assertLessEqual(box.y1, box.y2)

    def test_output_keeps_cell_order(self) -> None:
        raw = make_raw_output(
            [
                ((10, 10, 4, 4), 0, 0.6),
                ((20, 20, 4, 4), 1, 0.95),
                ((30, 30, 4, 4), 2, 0.7),
            ]
        )
        out = DetectionDecoder().decode(raw, 640, 640)
        self.assertEqual([b.label for b in out], ["person", "bicycle", "car"])

    def test_all_scores_below_threshold(self) -> None:
        raw = make_raw_output([], background=0.49)
        self.assertEqual(DetectionDecoder().decode(raw, 640, 480), [])

    def test_accepts_2d_and_flat_layouts(self) -> None:
        raw = make_raw_output([((320, 320, 100, 200), 0, 0.9)])
        dec = DetectionDecoder()
        expected = dec.decode(raw, 640, 480)
        self.assertEqual(dec.decode(raw[0], 640, 480), expected)
        self.assertEqual(dec.decode(raw.ravel(), 640, 480), expected)

    def test_small_custom_layout(self) -> None:
        cfg = DecoderConfig(input_size=32, num_classes=3, num_cells=4, conf_threshold=0.5)
        raw = make_raw_output([((16, 16, 8, 8), 1, 0.9)], num_classes=3, num_cells=4)
        out = DetectionDecoder(cfg, class_names=("a", "b", "c")).decode(raw, 64, 32)
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].label, "b")
        self.assertEqual(out[0].as_xyxy(), (24.0, 12.0, 40.0, 20.0))

    def test_class_id_outside_table_uses_id(self) -> None:
        cfg = DecoderConfig(input_size=32, num_classes=3, num_cells=4)
        raw = make_raw_output([((16, 16, 8, 8), 2, 0.9)], num_classes=3, num_cells=4)
        out = DetectionDecoder(cfg, class_names=("a", "b")).decode(raw, 32, 32)
        self.assertEqual(out[0].label, "2")

    def test_zero_cells_or_classes(self) -> None:
        dec = DetectionDecoder(DecoderConfig(num_cells=0))
        self.assertEqual(dec.decode(np.zeros((1, 84, 0), dtype=np.float32), 640, 480), [])

        dec = DetectionDecoder(DecoderConfig(num_classes=0))
        self.assertEqual(dec.decode(np.zeros((1, 4, 8400), dtype=np.float32), 640, 480), [])

    def test_wrong_shape_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DetectionDecoder().decode(np.zeros((1, 85, 8400), dtype=np.float32), 640, 480)
        with self.assertRaises(ValueError):
            DetectionDecoder().decode(np.zeros((2, 84, 8400), dtype=np.float32), 640, 480)


if __name__ == "__main__":
    unittest.main()
