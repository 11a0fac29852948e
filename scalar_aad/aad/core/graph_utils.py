"""
Computation graph utilities.

Printing and inspection helpers for a Tape. Nothing in here is used by the
reverse pass itself; these are debugging aids.
"""

from collections import Counter
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .errors import GraphCycleError
from .node import NULL_INDEX, NodeId, Op

DUMP_COLUMNS = ["id", "op", "value", "gradient", "left", "right"]


def _op_label(tag) -> str:
    return Op(int(tag)).label


def dump_tape(tape) -> List[Dict]:
    """
    One record per live node, in creation order.

    Keys: id, op, value, gradient, left, right. `left`/`right` are raw slot
    indices with 0 meaning "no child".
    """
    rows = []
    for i in range(1, tape.count):
        rows.append({
            "id": i,
            "op": _op_label(tape.ops[i]),
            "value": float(tape.values[i]),
            "gradient": float(tape.gradients[i]),
            "left": int(tape.lefts[i]),
            "right": int(tape.rights[i]),
        })
    return rows


def tape_frame(tape) -> pd.DataFrame:
    """`dump_tape` as a DataFrame indexed by node id."""
    return pd.DataFrame(dump_tape(tape), columns=DUMP_COLUMNS).set_index("id")


def print_tape(tape) -> None:
    """Print every live slot on one line."""
    for row in dump_tape(tape):
        print(f"val: {row['value']:8g}, grad: {row['gradient']:8g}, index: {row['id']:3d}, "
              f"left: {row['left']:3d}, right: {row['right']:3d}, op: {row['op']}")


def format_tree(tape, y: NodeId, max_depth: Optional[int] = None) -> str:
    """
    Indented rendering of the expression rooted at `y`.

    Shared sub-expressions are printed every time they are reached, so the
    output can be much larger than the tape for heavily shared graphs.

    Raises
    ------
    GraphCycleError
        If a node is reached again below itself (a splice made it its own
        ancestor).
    """
    lines = []
    on_path = np.zeros(tape.count, dtype=bool)
    # (index, depth, leaving): the leaving entry pops the node off the current path
    stack = [(tape.index_of(y), 0, False)]
    while stack:
        i, depth, leaving = stack.pop()
        if leaving:
            on_path[i] = False
            continue
        lines.append(
            f"{' ' * (4 * depth)}[idx: {i}, {_op_label(tape.ops[i]):7s}] node "
            f"(data: {tape.values[i]:g}, grad: {tape.gradients[i]:g})"
        )
        if max_depth is not None and depth >= max_depth:
            continue
        on_path[i] = True
        stack.append((i, depth, True))
        for child in (int(tape.rights[i]), int(tape.lefts[i])):
            if child == NULL_INDEX:
                continue
            if on_path[child]:
                raise GraphCycleError(
                    f"node {child} is its own ancestor on tape{tape.uid}"
                )
            stack.append((child, depth + 1, False))
    return "\n".join(lines)


def print_tree(tape, y: NodeId, max_depth: Optional[int] = None) -> None:
    print("------------- Computation graph -------------")
    print(format_tree(tape, y, max_depth=max_depth))
    print("---------------------------------------------")


def get_graph_stats(tape) -> Dict:
    """
    Graph statistics (no printing).

    Returns:
        dict with nodes, edges, leaves, max/avg fan-in, max/avg fan-out and a
        per-operator count.
    """
    n_nodes = len(tape)
    if n_nodes == 0:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    live = slice(1, tape.count)
    lefts, rights = tape.lefts[live], tape.rights[live]

    # fan-in: number of operands of each node
    fan_ins = (lefts != NULL_INDEX).astype(int) + (rights != NULL_INDEX).astype(int)

    # fan-out: number of times each node is used as an operand
    children = np.concatenate([lefts[lefts != NULL_INDEX], rights[rights != NULL_INDEX]])
    fan_outs = np.bincount(children, minlength=tape.count)[1:]

    op_counter = Counter(_op_label(t) for t in tape.ops[live])

    return {
        'nodes': n_nodes,
        'edges': int(fan_ins.sum()),
        'leaves': op_counter.get(Op.LEAF.label, 0),
        'max_fan_in': int(fan_ins.max()),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': int(fan_outs.max()),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(tape, detailed: bool = False) -> Dict:
    """
    Print a summary of the graph.

    Args:
        tape: the Tape to summarise
        detailed: also print the node list (only for tapes of <= 100 nodes)

    Returns:
        The statistics dict from `get_graph_stats`.
    """
    stats = get_graph_stats(tape)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "=" * 70)
    print("COMPUTATION GRAPH SUMMARY")
    print("=" * 70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common():
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print(tape_frame(tape).to_string())

    print("=" * 70 + "\n")
    return stats
