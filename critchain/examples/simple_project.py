from critchain.domain.task import Task
from critchain.services.buffer_manager import BufferLifecycleManager
from critchain.services.dependency_graph import DependencyGraph
from critchain.services.scheduler import CCPMScheduler
from critchain.services.buffer_strategies import RootSumSquareMethod


def sample_snapshot():
    """Tasks and dependencies of a small release project, efforts in minutes."""
    tasks = [
        Task("REQ", 240, ["ana"], name="Requirements"),
        Task("DES", 480, ["arch"], name="System design"),
        Task("API", 960, ["dev"], name="Backend API"),
        Task("UI", 720, ["dev"], name="Frontend"),
        Task("DOC", 300, ["writer"], name="User documentation"),
        Task("QA", 480, ["qa"], name="Acceptance testing"),
        Task("REL", 60, ["arch"], name="Release"),
    ]

    graph = DependencyGraph(task_ids=[task.id for task in tasks])
    graph.add_edge("REQ", "DES")
    graph.add_edge("DES", "API")
    graph.add_edge("DES", "UI", "SS", 120)  # UI starts two hours into design
    graph.add_edge("REQ", "DOC")
    graph.add_edge("API", "QA")
    graph.add_edge("UI", "QA")
    graph.add_edge("DOC", "QA", "FF")
    graph.add_edge("QA", "REL")

    return tasks, graph.edges()


def create_sample_project(chart_filename=None):
    tasks, dependencies = sample_snapshot()

    manager = BufferLifecycleManager(
        snapshot_source=lambda project_id: (tasks, dependencies),
        scheduler=CCPMScheduler(
            project_buffer_strategy=RootSumSquareMethod(0.5),
            feeding_buffer_strategy=RootSumSquareMethod(0.5),
        ),
    )
    result = manager.regenerate("sample", created_by="example")
    analysis = result.analysis

    if chart_filename:
        from critchain.visualization.gantt import create_gantt_chart

        create_gantt_chart(analysis, chart_filename)

    # Print report
    print("CCPM Project Schedule Report")
    print("===========================")
    print(f"Planned finish: {analysis.planned_finish_minutes} min")
    print(f"With project buffer: {analysis.total_project_duration_minutes} min")

    print("\nCritical Chain:")
    for task_id in analysis.critical_chain.tasks:
        entry = analysis.schedule[task_id]
        print(
            f"  Task {task_id}: {entry.early_start}-{entry.early_finish} "
            f"({entry.duration} min)"
        )

    if analysis.resource_edges:
        print("\nResource dependencies:")
        for dep in analysis.resource_edges:
            print(f"  {dep.predecessor_id} -> {dep.successor_id}")

    print("\nFeeding Chains:")
    for chain in analysis.feeding_chains:
        print(f"  {chain.name}: {', '.join(str(t) for t in chain.tasks)}")
        print(f"    Merges into: {chain.connects_to_task_id}")
        print(f"    Buffer: {chain.buffer_minutes} min")

    print("\nBuffers:")
    for consumption in manager.status("sample"):
        buffer = consumption.buffer
        print(
            f"  {buffer.name} ({buffer.size_minutes} min) "
            f"{consumption.consumption_percent}% {consumption.zone.value}"
        )

    for warning in analysis.warnings:
        print(f"\nWarning: {warning}")

    return result


if __name__ == "__main__":
    create_sample_project()
