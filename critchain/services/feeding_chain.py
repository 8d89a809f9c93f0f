from ..domain.chain import Chain
from ..utils.graph import longest_path, topological_order


def identify_feeding_chains(network, critical_chain):
    """
    Identify feeding chains - paths that feed into the critical chain.

    For every critical chain task (in chain order) and each of its direct
    predecessors off the chain, the feeding chain is the longest path of
    unclaimed off-chain tasks ending at that predecessor. Off-chain tasks that
    feed an already claimed feeding task then start chains of their own,
    merging at the same critical chain task. A task belongs to at most one
    feeding chain.

    Args:
        network: ProjectNetwork, normally the resource-leveled one
        critical_chain: The critical chain object or list of task IDs

    Returns:
        list: Chain objects representing the feeding chains
    """
    if isinstance(critical_chain, Chain):
        critical_task_ids = critical_chain.tasks
    else:
        critical_task_ids = critical_chain

    critical = {network.index[task_id] for task_id in critical_task_ids}
    order = topological_order(network)
    claimed = set()
    feeding_chains = []

    def upstream(end):
        # Unclaimed off-chain ancestors of ``end``, including itself
        nodes = set()
        stack = [end]
        while stack:
            node = stack.pop()
            if node in nodes:
                continue
            nodes.add(node)
            for predecessor in network.predecessors(node):
                if predecessor not in critical and predecessor not in claimed:
                    stack.append(predecessor)
        return nodes

    def open_predecessors(node):
        return sorted(
            {
                p
                for p in network.predecessors(node)
                if p not in critical and p not in claimed
            },
            key=lambda p: str(network.task_ids[p]),
        )

    def start_chain(end, merge_task_id):
        _, path = longest_path(network, upstream(end), order)[end]
        number = len(feeding_chains) + 1
        chain = Chain(f"feeding_{number}", f"Feeding Chain {number}", type="feeding")
        for task_id in path:
            node = network.index[task_id]
            chain.add_task(task_id, int(network.durations[node]))
            claimed.add(node)
        chain.set_connection(merge_task_id)
        feeding_chains.append(chain)

    for task_id in critical_task_ids:
        for predecessor in open_predecessors(network.index[task_id]):
            # An earlier chain from this same merge task may have claimed it
            if predecessor not in claimed:
                start_chain(predecessor, task_id)

    # Chains that feed other feeding chains, grown breadth-first
    position = 0
    while position < len(feeding_chains):
        chain = feeding_chains[position]
        position += 1
        for task_id in chain.tasks:
            for predecessor in open_predecessors(network.index[task_id]):
                if predecessor not in claimed:
                    start_chain(predecessor, chain.connects_to_task_id)

    return feeding_chains
