import unittest

from critchain.domain.task import Task
from critchain.domain.dependency import (
    Dependency,
    DependencyType,
    CircularDependencyError,
)
from critchain.utils.graph import (
    ProjectNetwork,
    ScheduleInconsistencyError,
    calculate_schedule,
    find_critical_path,
    project_finish,
)


def schedule_pair(dep_type, lag, predecessor=100, successor=50):
    network = ProjectNetwork(
        [Task("P", predecessor), Task("S", successor)],
        [Dependency("P", "S", dep_type, lag)],
    )
    return calculate_schedule(network)


class ForwardBackwardPassTestCase(unittest.TestCase):
    """Early and late dates for each relation type."""

    def test_finish_to_start_with_lag(self):
        schedule = schedule_pair(DependencyType.FS, 10)
        self.assertEqual(schedule["S"].early_start, 110)
        self.assertEqual(schedule["S"].early_finish, 160)
        self.assertEqual(schedule["P"].slack, 0)
        self.assertEqual(schedule["S"].slack, 0)

    def test_finish_to_start_negative_lag(self):
        schedule = schedule_pair(DependencyType.FS, -30)
        self.assertEqual(schedule["S"].early_start, 70)
        self.assertEqual(schedule["S"].early_finish, 120)

    def test_start_to_start(self):
        schedule = schedule_pair(DependencyType.SS, 20)
        self.assertEqual(schedule["S"].early_start, 20)
        self.assertEqual(schedule["S"].early_finish, 70)
        self.assertEqual(project_finish(schedule), 100)
        self.assertEqual(schedule["P"].slack, 0)
        self.assertEqual(schedule["S"].slack, 30)

    def test_finish_to_finish(self):
        schedule = schedule_pair(DependencyType.FF, 0)
        self.assertEqual(schedule["S"].early_start, 50)
        self.assertEqual(schedule["S"].early_finish, 100)
        self.assertEqual(schedule["S"].late_finish, 100)
        self.assertEqual(schedule["P"].slack, 0)

    def test_start_to_finish(self):
        schedule = schedule_pair(DependencyType.SF, 80)
        self.assertEqual(schedule["S"].early_start, 30)
        self.assertEqual(schedule["S"].early_finish, 80)

    def test_start_is_never_negative(self):
        schedule = schedule_pair(DependencyType.SF, 10)
        self.assertEqual(schedule["S"].early_start, 0)

    def test_unset_effort_is_zero_duration(self):
        network = ProjectNetwork(
            [Task("A", 60), Task("M"), Task("B", 30)],
            [Dependency("A", "M"), Dependency("M", "B")],
        )
        schedule = calculate_schedule(network)
        self.assertEqual(schedule["M"].duration, 0)
        self.assertEqual(schedule["M"].early_start, 60)
        self.assertEqual(schedule["B"].early_finish, 90)

    def test_independent_tasks(self):
        network = ProjectNetwork([Task("A", 60), Task("B", 20)])
        schedule = calculate_schedule(network)
        self.assertEqual(schedule["A"].slack, 0)
        self.assertEqual(schedule["B"].slack, 40)
        self.assertEqual(schedule["B"].late_finish, 60)


class NetworkValidationTestCase(unittest.TestCase):
    def test_cycle_in_snapshot(self):
        # Edges built directly bypass insertion checks
        network = ProjectNetwork(
            [Task("A", 10), Task("B", 10), Task("C", 10)],
            [Dependency("A", "B"), Dependency("B", "C"), Dependency("C", "B")],
        )
        with self.assertRaises(CircularDependencyError) as context:
            calculate_schedule(network)
        self.assertIn("B", str(context.exception))
        self.assertIn("C", str(context.exception))

    def test_contradictory_target(self):
        network = ProjectNetwork([Task("A", 100)])
        with self.assertRaises(ScheduleInconsistencyError):
            calculate_schedule(network, project_end=50)

    def test_later_target_adds_slack(self):
        network = ProjectNetwork([Task("A", 100)])
        schedule = calculate_schedule(network, project_end=160)
        self.assertEqual(schedule["A"].slack, 60)

    def test_edges_outside_snapshot_are_ignored(self):
        network = ProjectNetwork(
            [Task("A", 10), Task("B", 10)],
            [Dependency("A", "B"), Dependency("B", "GONE")],
        )
        self.assertEqual(len(network.edges), 1)
        self.assertEqual(calculate_schedule(network)["B"].early_start, 10)

    def test_is_ordered_either_direction(self):
        network = ProjectNetwork(
            [Task("A", 10), Task("B", 10), Task("C", 10), Task("D", 10)],
            [Dependency("A", "B"), Dependency("B", "C")],
        )
        a, c, d = network.index["A"], network.index["C"], network.index["D"]
        self.assertTrue(network.is_ordered(a, c))
        self.assertTrue(network.is_ordered(c, a))
        self.assertFalse(network.is_ordered(a, d))

    def test_copy_is_independent(self):
        network = ProjectNetwork([Task("A", 10), Task("B", 10)])
        clone = network.copy()
        clone.add_edge(0, 1, synthetic=True)
        self.assertEqual(len(network.edges), 0)
        self.assertFalse(network.is_ordered(0, 1))
        self.assertTrue(clone.is_ordered(0, 1))


class CriticalPathTestCase(unittest.TestCase):
    def critical_path(self, tasks, dependencies=()):
        network = ProjectNetwork(tasks, dependencies)
        return find_critical_path(network, calculate_schedule(network))

    def test_longest_zero_slack_path(self):
        path = self.critical_path(
            [Task("A", 60), Task("B", 120), Task("C", 30)],
            [Dependency("A", "B"), Dependency("C", "B")],
        )
        self.assertEqual(path, ["A", "B"])

    def test_tie_between_isolated_tasks(self):
        path = self.critical_path([Task("B", 60), Task("A", 60)])
        self.assertEqual(path, ["A"])

    def test_tie_between_converging_paths(self):
        path = self.critical_path(
            [Task("B", 10), Task("A", 10), Task("C", 10)],
            [Dependency("B", "C"), Dependency("A", "C")],
        )
        self.assertEqual(path, ["A", "C"])

    def test_zero_duration_tail(self):
        path = self.critical_path(
            [Task("A", 60), Task("Z")],
            [Dependency("A", "Z")],
        )
        self.assertEqual(path, ["A", "Z"])


if __name__ == "__main__":
    unittest.main()
