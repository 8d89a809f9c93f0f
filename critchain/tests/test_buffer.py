import unittest
from datetime import datetime

from critchain.domain.buffer import (
    Buffer,
    BufferError,
    BufferStatus,
    BufferType,
    BufferZone,
    round_half_up,
)
from critchain.services.buffer_strategies import CutAndPasteMethod, RootSumSquareMethod


class BufferTestCase(unittest.TestCase):
    """Test cases for the Buffer class."""

    def setUp(self):
        """Set up test cases with sample buffers."""
        self.created = datetime(2025, 3, 1, 9, 0)

        # Project buffer
        self.project_buffer = Buffer(
            id="PB",
            project_id="p1",
            buffer_type=BufferType.PROJECT,
            size_minutes=100,
            chain_task_ids=["A", "B"],
            created_at=self.created,
        )

        # Feeding buffer
        self.feeding_buffer = Buffer(
            id="FB1",
            project_id="p1",
            buffer_type="FEEDING",
            size_minutes=15,
            merge_task_id="B",
            chain_task_ids=["C"],
            created_at=self.created,
        )

    def test_initialization_validation(self):
        """Test validation during buffer initialization."""
        # Invalid ID
        with self.assertRaises(BufferError):
            Buffer(id=None, project_id="p1", buffer_type="PROJECT", size_minutes=5)

        # Missing project
        with self.assertRaises(BufferError):
            Buffer(id="b1", project_id="", buffer_type="PROJECT", size_minutes=5)

        # Invalid size
        with self.assertRaises(BufferError):
            Buffer(id="b1", project_id="p1", buffer_type="PROJECT", size_minutes=-1)

        with self.assertRaises(BufferError):
            Buffer(id="b1", project_id="p1", buffer_type="PROJECT", size_minutes="5")

        # Invalid buffer type
        with self.assertRaises(BufferError):
            Buffer(id="b1", project_id="p1", buffer_type="invalid", size_minutes=5)

        # Feeding buffer without merge task
        with self.assertRaises(BufferError):
            Buffer(id="fb1", project_id="p1", buffer_type="FEEDING", size_minutes=5)

        # Invalid status
        with self.assertRaises(BufferError):
            Buffer(
                id="b1",
                project_id="p1",
                buffer_type="PROJECT",
                size_minutes=5,
                status="DELETED",
            )

    def test_defaults(self):
        self.assertEqual(self.project_buffer.name, "Project Buffer")
        self.assertEqual(self.feeding_buffer.name, "Feeding Buffer -> B")
        self.assertEqual(self.feeding_buffer.buffer_type, BufferType.FEEDING)
        self.assertTrue(self.project_buffer.is_active)
        self.assertEqual(self.project_buffer.consumed_minutes, 0)
        self.assertEqual(self.project_buffer.created_by, "system")
        self.assertEqual(self.project_buffer.updated_at, self.created)

    def test_archive(self):
        later = datetime(2025, 3, 2, 9, 0)
        self.project_buffer.consumed_minutes = 40
        self.project_buffer.archive(later)

        self.assertEqual(self.project_buffer.status, BufferStatus.ARCHIVED)
        self.assertFalse(self.project_buffer.is_active)
        self.assertEqual(self.project_buffer.updated_at, later)
        self.assertEqual(self.project_buffer.created_at, self.created)
        self.assertEqual(self.project_buffer.size_minutes, 100)
        self.assertEqual(self.project_buffer.consumed_minutes, 40)

    def test_consumption_zones(self):
        """Zone boundaries are inclusive on the lower zone."""
        expectations = [
            (0, 0, BufferZone.GREEN),
            (33, 33, BufferZone.GREEN),
            (34, 34, BufferZone.YELLOW),
            (66, 66, BufferZone.YELLOW),
            (67, 67, BufferZone.RED),
            (150, 150, BufferZone.RED),
        ]
        for consumed, percent, zone in expectations:
            self.project_buffer.consumed_minutes = consumed
            self.assertEqual(self.project_buffer.get_consumption_percentage(), percent)
            self.assertEqual(self.project_buffer.get_zone(), zone)

    def test_custom_thresholds(self):
        self.project_buffer.consumed_minutes = 45
        self.assertEqual(self.project_buffer.get_zone(0.5, 0.8), BufferZone.GREEN)
        self.assertEqual(self.project_buffer.get_zone(0.2, 0.4), BufferZone.RED)

    def test_zero_size_buffer(self):
        buffer = Buffer(id="Z", project_id="p1", buffer_type="PROJECT", size_minutes=0)
        buffer.consumed_minutes = 30
        self.assertEqual(buffer.get_consumption_ratio(), 0.0)
        self.assertEqual(buffer.get_consumption_percentage(), 0)
        self.assertEqual(buffer.get_zone(), BufferZone.GREEN)

    def test_percentage_rounds_half_up(self):
        buffer = Buffer(id="H", project_id="p1", buffer_type="PROJECT", size_minutes=8)
        buffer.consumed_minutes = 5  # 62.5%
        self.assertEqual(buffer.get_consumption_percentage(), 63)

    def test_dict_roundtrip(self):
        data = self.feeding_buffer.to_dict()
        self.assertEqual(data["bufferType"], "FEEDING")
        self.assertEqual(data["feedingSourceTaskId"], "B")
        self.assertEqual(data["chainTaskIds"], ["C"])
        self.assertEqual(data["status"], "ACTIVE")

        restored = Buffer.from_dict(data)
        self.assertEqual(restored.merge_task_id, "B")
        self.assertEqual(restored.size_minutes, 15)
        self.assertEqual(restored.created_at, self.created)


class RoundHalfUpTestCase(unittest.TestCase):
    def test_halves_round_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(22.5), 23)
        self.assertEqual(round_half_up(67.08), 67)
        self.assertEqual(round_half_up(0.0), 0)


class BufferStrategyTestCase(unittest.TestCase):
    def test_root_sum_square(self):
        strategy = RootSumSquareMethod()
        self.assertAlmostEqual(strategy.calculate_buffer_size([60, 120]), 67.082, places=3)
        self.assertEqual(strategy.calculate_buffer_size([30]), 15.0)
        self.assertEqual(strategy.calculate_buffer_size([]), 0.0)

    def test_root_sum_square_fraction(self):
        self.assertEqual(RootSumSquareMethod(1.0).calculate_buffer_size([30, 40]), 50.0)
        with self.assertRaises(ValueError):
            RootSumSquareMethod(-0.5)

    def test_cut_and_paste(self):
        self.assertEqual(CutAndPasteMethod().calculate_buffer_size([60, 120]), 90.0)
        self.assertEqual(CutAndPasteMethod(0.25).calculate_buffer_size([40]), 10.0)
        with self.assertRaises(ValueError):
            CutAndPasteMethod(1.5)

    def test_names(self):
        self.assertIn("Root Sum Square", RootSumSquareMethod().get_name())
        self.assertIn("Cut-and-Paste", CutAndPasteMethod().get_name())


if __name__ == "__main__":
    unittest.main()
