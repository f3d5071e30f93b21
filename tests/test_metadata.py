import tempfile
import unittest
from pathlib import Path

from yolo_detector.metadata import COCO_CLASSES, load_class_names


class TestClassNames(unittest.TestCase):
    def _write(self, text: str) -> str:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "metadata.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_coco_table(self) -> None:
        self.assertEqual(len(COCO_CLASSES), 80)
        self.assertEqual(COCO_CLASSES[0], "person")
        self.assertEqual(COCO_CLASSES[16], "dog")
        self.assertEqual(COCO_CLASSES[79], "toothbrush")
        self.assertIsInstance(COCO_CLASSES, tuple)

    def test_load_names_block(self) -> None:
        path = self._write(
            "description: custom\n"
            "names:\n"
            "  0: helmet\n"
            "  1: 'vest'\n"
            '  2: "no helmet"\n'
            "imgsz:\n"
            "  - 640\n"
        )
        self.assertEqual(load_class_names(path), ("helmet", "vest", "no helmet"))

    def test_gaps_rejected(self) -> None:
        path = self._write("names:\n  0: a\n  2: c\n")
        with self.assertRaises(ValueError):
            load_class_names(path)

    def test_missing_names_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_class_names(self._write("stride: 32\n"))


if __name__ == "__main__":
    unittest.main()
