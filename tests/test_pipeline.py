import unittest

import numpy as np

from _helpers import FailingEngine, FakeEngine, encode_png, make_raw_output
from yolo_detector.config import DetectorConfig
from yolo_detector.errors import ImageDecodeError, InferenceError
from yolo_detector.runtime import DetectionPipeline


IMAGE_640x480 = encode_png(np.zeros((480, 640, 3), dtype=np.uint8))


class TestDetectionPipeline(unittest.TestCase):
    def test_single_person_end_to_end(self) -> None:
        engine = FakeEngine(make_raw_output([((320, 320, 100, 200), 0, 0.9)]))
        boxes = DetectionPipeline(engine).detect(IMAGE_640x480)

        self.assertEqual(engine.calls, 1)
        self.assertEqual(len(boxes), 1)
        x1, y1, x2, y2, label, confidence = boxes[0].to_list()
        self.assertAlmostEqual(x1, 270.0)
        self.assertAlmostEqual(y1, 165.0)
        self.assertAlmostEqual(x2, 370.0)
        self.assertAlmostEqual(y2, 315.0)
        self.assertEqual(label, "person")
        self.assertAlmostEqual(confidence, 0.9, places=6)

    def test_overlapping_same_class_suppressed(self) -> None:
        # IoU 0.8 in network space, stays 0.8 after uniform scaling
        raw = make_raw_output(
            [
                ((320, 320, 100, 100), 2, 0.6),
                ((320, 330, 100, 80), 2, 0.9),
            ]
        )
        boxes = DetectionPipeline(FakeEngine(raw)).detect(encode_png(np.zeros((640, 640, 3), dtype=np.uint8)))
        self.assertEqual(len(boxes), 1)
        self.assertAlmostEqual(boxes[0].confidence, 0.9, places=6)
        self.assertEqual(boxes[0].label, "car")

    def test_low_overlap_keeps_both(self) -> None:
        raw = make_raw_output(
            [
                ((320, 320, 100, 100), 0, 0.9),
                ((320, 285, 100, 30), 0, 0.6),  # IoU 0.3
            ]
        )
        boxes = DetectionPipeline(FakeEngine(raw)).detect(IMAGE_640x480)
        self.assertEqual(len(boxes), 2)
        self.assertGreater(boxes[0].confidence, boxes[1].confidence)

    def test_all_below_threshold_is_empty(self) -> None:
        raw = make_raw_output([], background=0.3)
        self.assertEqual(DetectionPipeline(FakeEngine(raw)).detect(IMAGE_640x480), [])

    def test_detect_array(self) -> None:
        engine = FakeEngine(make_raw_output([((320, 320, 100, 200), 0, 0.9)]))
        boxes = DetectionPipeline(engine).detect_array(np.zeros((480, 640, 3), dtype=np.uint8))
        self.assertEqual([b.label for b in boxes], ["person"])

    def test_from_config(self) -> None:
        cfg = DetectorConfig(input_size=32, num_classes=2, num_cells=3, conf_threshold=0.4, iou_threshold=0.5)
        raw = make_raw_output(
            [
                ((16, 16, 8, 8), 1, 0.45),
                ((16, 16, 8, 4), 0, 0.41),  # IoU 0.5 with the first
            ],
            num_classes=2,
            num_cells=3,
        )
        pipeline = DetectionPipeline.from_config(FakeEngine(raw, expected_shape=(1, 3, 32, 32)), cfg, class_names=("a", "b"))
        boxes = pipeline.detect(encode_png(np.zeros((64, 64, 3), dtype=np.uint8)))
        self.assertEqual([b.label for b in boxes], ["b"])
        self.assertEqual(boxes[0].as_xyxy(), (24.0, 24.0, 40.0, 40.0))

    def test_engine_failure_wrapped(self) -> None:
        with self.assertRaises(InferenceError) as ctx:
            DetectionPipeline(FailingEngine()).detect(IMAGE_640x480)
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_bad_image_fails_before_inference(self) -> None:
        engine = FakeEngine(make_raw_output([]))
        with self.assertRaises(ImageDecodeError):
            DetectionPipeline(engine).detect(b"\x89PNG broken")
        self.assertEqual(engine.calls, 0)


if __name__ == "__main__":
    unittest.main()
