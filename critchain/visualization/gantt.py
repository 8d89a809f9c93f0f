import matplotlib.pyplot as plt
from matplotlib.patches import Patch


def _task_color(task_id, critical_tasks, feeding_tasks):
    if task_id in critical_tasks:
        return "red"
    if task_id in feeding_tasks:
        return "orange"
    return "blue"


def create_gantt_chart(analysis, filename=None, show=False, time_unit=60):
    """
    Create a Gantt chart visualization of a critical chain analysis.

    Tasks are drawn at their early start on the leveled schedule. The project
    buffer follows the last critical chain task and each feeding buffer ends
    where its merge task starts.

    Args:
        analysis: CriticalChainAnalysis to render
        filename: Optional filename to save the chart
        show: Whether to display the chart
        time_unit: Minutes per x-axis unit (60 plots hours)

    Returns:
        The matplotlib figure
    """
    schedule = analysis.schedule
    critical_tasks = set(analysis.critical_chain.tasks)
    feeding_tasks = {
        task_id for chain in analysis.feeding_chains for task_id in chain.tasks
    }

    fig, ax_gantt = plt.subplots(figsize=(14, 8))

    # Sort tasks by start, critical chain first among equal starts
    sorted_entries = sorted(
        schedule.values(),
        key=lambda e: (e.early_start, e.task_id not in critical_tasks, str(e.task_id)),
    )

    labels = []
    for row, entry in enumerate(sorted_entries):
        start = entry.early_start / time_unit
        # Keep zero-length tasks visible
        width = max(entry.duration / time_unit, 0.05)
        color = _task_color(entry.task_id, critical_tasks, feeding_tasks)
        ax_gantt.barh(row, width, left=start, color=color, alpha=0.6)

        slack_str = f" (slack {entry.slack / time_unit:g})" if entry.slack else ""
        ax_gantt.text(
            start + width / 2,
            row,
            f"{entry.task_id}{slack_str}",
            ha="center",
            va="center",
            color="black",
            fontsize=8,
        )
        labels.append(str(entry.task_id))

    # Plot buffers
    buffer_rows = []
    if analysis.critical_chain.tasks:
        last_task = analysis.critical_chain.tasks[-1]
        buffer_rows.append(
            (
                "Project Buffer",
                schedule[last_task].early_finish,
                analysis.project_buffer_minutes,
                "green",
            )
        )
    for chain in analysis.feeding_chains:
        merge_start = schedule[chain.connects_to_task_id].early_start
        buffer_rows.append(
            (
                f"Feeding Buffer -> {chain.connects_to_task_id}",
                merge_start - chain.buffer_minutes,
                chain.buffer_minutes,
                "yellow",
            )
        )

    for offset, (name, start_minutes, size, color) in enumerate(buffer_rows):
        row = len(sorted_entries) + offset
        width = max(size / time_unit, 0.05)
        ax_gantt.barh(row, width, left=start_minutes / time_unit, color=color, alpha=0.6)
        ax_gantt.text(
            start_minutes / time_unit + width / 2,
            row,
            f"{name} ({size} min)",
            ha="center",
            va="center",
            color="black",
            fontsize=8,
        )
        labels.append(name)

    ax_gantt.set_yticks(range(len(labels)))
    ax_gantt.set_yticklabels(labels)
    ax_gantt.invert_yaxis()

    ax_gantt.set_title(
        f"Critical Chain Schedule ({analysis.total_project_duration_minutes} min incl. buffer)"
    )
    ax_gantt.set_xlabel(f"Time from project start (x{time_unit} min)")
    ax_gantt.grid(axis="x", alpha=0.3)

    legend_elements = [
        Patch(facecolor="red", alpha=0.6, label="Critical Chain Task"),
        Patch(facecolor="orange", alpha=0.6, label="Feeding Chain Task"),
        Patch(facecolor="blue", alpha=0.6, label="Regular Task"),
        Patch(facecolor="yellow", alpha=0.6, label="Feeding Buffer"),
        Patch(facecolor="green", alpha=0.6, label="Project Buffer"),
    ]
    ax_gantt.legend(handles=legend_elements, loc="upper right", ncol=2)

    # Planned completion before the project buffer
    ax_gantt.axvline(
        x=analysis.planned_finish_minutes / time_unit,
        color="green",
        linestyle="--",
        linewidth=2,
    )

    plt.tight_layout()

    if filename:
        plt.savefig(filename, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig
