import unittest

from critchain.domain.chain import Chain, ChainError
from critchain.domain.task import Task
from critchain.domain.dependency import Dependency
from critchain.utils.graph import ProjectNetwork, calculate_schedule
from critchain.services.critical_chain import identify_critical_chain
from critchain.services.feeding_chain import identify_feeding_chains


class ChainTestCase(unittest.TestCase):
    """Test cases for the Chain class."""

    def setUp(self):
        self.chain = Chain(id="chain1", name="Test Chain", type="feeding")

    def test_initialization_validation(self):
        """Test validation during chain initialization."""
        # Invalid ID
        with self.assertRaises(ChainError):
            Chain(id=None, name="Invalid Chain")

        # Invalid name
        with self.assertRaises(ChainError):
            Chain(id="c1", name="")

        # Invalid type
        with self.assertRaises(ChainError):
            Chain(id="c1", name="Invalid Type", type="invalid")

        chain = Chain(id="c1", name="Valid Chain", type="critical")
        self.assertTrue(chain.is_critical())
        self.assertFalse(chain.is_feeding())
        self.assertEqual(chain.tasks, [])
        self.assertIsNone(chain.buffer_minutes)

    def test_task_management(self):
        """Test adding tasks keeps path order and ignores duplicates."""
        self.chain.add_task("task2", 30).add_task("task1", 20)
        self.chain.add_task("task2", 30)

        self.assertEqual(self.chain.tasks, ["task2", "task1"])
        self.assertEqual(self.chain.total_duration, 50)
        self.assertEqual(len(self.chain), 2)
        self.assertIn("task1", self.chain)

        # get_tasks returns a copy
        self.chain.get_tasks().append("task3")
        self.assertEqual(len(self.chain), 2)

        with self.assertRaises(ChainError):
            self.chain.add_task(None)

    def test_connection(self):
        self.chain.set_connection("merge")
        self.assertEqual(self.chain.merge_task_id, "merge")

        critical = Chain(id="cc", name="Critical", type="critical")
        with self.assertRaises(ChainError):
            critical.set_connection("merge")

    def test_dict_roundtrip(self):
        self.chain.add_task("task1", 10).set_connection("merge")
        self.chain.buffer_minutes = 5

        data = self.chain.to_dict()
        self.assertEqual(data["buffer_minutes"], 5)

        restored = Chain.from_dict(data)
        self.assertEqual(restored.tasks, ["task1"])
        self.assertEqual(restored.connects_to_task_id, "merge")
        self.assertEqual(restored.total_duration, 10)
        self.assertEqual(restored.buffer_minutes, 5)


class FeedingChainTestCase(unittest.TestCase):
    """Feeding chains found off the critical chain."""

    def analyze(self, tasks, dependencies):
        network = ProjectNetwork(tasks, dependencies)
        critical_chain = identify_critical_chain(network, calculate_schedule(network))
        return critical_chain, identify_feeding_chains(network, critical_chain)

    def test_single_feeding_task(self):
        critical_chain, feeding_chains = self.analyze(
            [Task("A", 60), Task("B", 120), Task("C", 30)],
            [Dependency("A", "B"), Dependency("C", "B")],
        )
        self.assertEqual(critical_chain.tasks, ["A", "B"])
        self.assertEqual(len(feeding_chains), 1)
        self.assertEqual(feeding_chains[0].tasks, ["C"])
        self.assertEqual(feeding_chains[0].connects_to_task_id, "B")
        self.assertEqual(feeding_chains[0].id, "feeding_1")

    def test_longest_path_then_secondary_chain(self):
        critical_chain, feeding_chains = self.analyze(
            [
                Task("S", 200),
                Task("M", 100),
                Task("F", 20),
                Task("X", 10),
                Task("Y", 30),
            ],
            [
                Dependency("S", "M"),
                Dependency("F", "M"),
                Dependency("X", "F"),
                Dependency("Y", "F"),
            ],
        )
        self.assertEqual(critical_chain.tasks, ["S", "M"])
        self.assertEqual(
            [(chain.tasks, chain.connects_to_task_id) for chain in feeding_chains],
            [(["Y", "F"], "M"), (["X"], "M")],
        )
        self.assertEqual(feeding_chains[0].total_duration, 50)

    def test_each_task_in_one_chain(self):
        critical_chain, feeding_chains = self.analyze(
            [
                Task("A", 100),
                Task("B", 100),
                Task("C", 100),
                Task("P", 20),
                Task("Q", 20),
            ],
            [
                Dependency("A", "B"),
                Dependency("B", "C"),
                Dependency("P", "Q"),
                Dependency("Q", "B"),
                Dependency("Q", "C"),
            ],
        )
        self.assertEqual(critical_chain.tasks, ["A", "B", "C"])
        claimed = [task_id for chain in feeding_chains for task_id in chain.tasks]
        self.assertEqual(sorted(claimed), ["P", "Q"])
        self.assertEqual(len(claimed), len(set(claimed)))
        self.assertEqual(feeding_chains[0].connects_to_task_id, "B")

    def test_several_chains_share_a_merge_task(self):
        _, feeding_chains = self.analyze(
            [Task("A", 60), Task("B", 120), Task("C", 30), Task("D", 20)],
            [Dependency("A", "B"), Dependency("C", "B"), Dependency("D", "B")],
        )
        self.assertEqual([chain.tasks for chain in feeding_chains], [["C"], ["D"]])
        self.assertTrue(all(chain.merge_task_id == "B" for chain in feeding_chains))

    def test_zero_duration_feeding_task(self):
        _, feeding_chains = self.analyze(
            [Task("A", 60), Task("B", 120), Task("Z")],
            [Dependency("A", "B"), Dependency("Z", "B")],
        )
        self.assertEqual(feeding_chains[0].tasks, ["Z"])
        self.assertEqual(feeding_chains[0].total_duration, 0)

    def test_no_feeding_chains(self):
        _, feeding_chains = self.analyze(
            [Task("A", 60), Task("B", 60)], [Dependency("A", "B")]
        )
        self.assertEqual(feeding_chains, [])

    def test_accepts_list_of_ids(self):
        network = ProjectNetwork(
            [Task("A", 60), Task("B", 120), Task("C", 30)],
            [Dependency("A", "B"), Dependency("C", "B")],
        )
        feeding_chains = identify_feeding_chains(network, ["A", "B"])
        self.assertEqual(feeding_chains[0].tasks, ["C"])


if __name__ == "__main__":
    unittest.main()
