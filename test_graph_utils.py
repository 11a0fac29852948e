"""
Diagnostics: tape dump, DataFrame view, tree rendering and graph statistics.
"""

import pandas as pd
import pytest

from scalar_aad.aad.core.engine import reverse
from scalar_aad.aad.core.errors import GraphCycleError
from scalar_aad.aad.core.graph_utils import (DUMP_COLUMNS, dump_tape, format_tree, get_graph_stats,
                                             print_graph_summary, print_tape, print_tree, tape_frame)
from scalar_aad.aad.core.tape import Tape
from scalar_aad.aad.ops import add, leaf, tanh


@pytest.fixture
def shared():
    """c = (a + b) + ((a + b) + a) with a = 5, b = 10, differentiated."""
    tape = Tape()
    a = leaf(tape, 5.0)
    b = leaf(tape, 10.0)
    s = add(tape, a, b)
    c = add(tape, s, add(tape, s, a))
    reverse(tape, c)
    return tape, c


def test_dump_tape(shared):
    tape, _ = shared
    rows = dump_tape(tape)
    assert [r["id"] for r in rows] == [1, 2, 3, 4, 5]
    assert [r["op"] for r in rows] == ["leaf", "leaf", "add", "add", "add"]
    assert [(r["left"], r["right"]) for r in rows] == [(0, 0), (0, 0), (1, 2), (3, 1), (3, 4)]
    assert [r["gradient"] for r in rows] == [3.0, 2.0, 2.0, 1.0, 1.0]
    assert rows[-1]["value"] == 35.0


def test_tape_frame(shared):
    tape, _ = shared
    df = tape_frame(tape)
    assert isinstance(df, pd.DataFrame)
    assert df.index.name == "id"
    assert list(df.columns) == DUMP_COLUMNS[1:]
    assert df.loc[1, "gradient"] == 3.0
    assert (df["op"] == "add").sum() == 3


def test_tape_frame_empty():
    df = tape_frame(Tape())
    assert df.empty
    assert list(df.columns) == DUMP_COLUMNS[1:]


def test_print_tape(shared, capsys):
    tape, _ = shared
    print_tape(tape)
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert "index:   5" in lines[-1]
    assert "op: add" in lines[-1]


def test_format_tree(shared):
    tape, c = shared
    lines = format_tree(tape, c).splitlines()
    # c, s, a, b, (s + a), s, a, b, a
    assert len(lines) == 9
    assert lines[0].startswith("[idx: 5, add")
    assert "data: 35" in lines[0]
    assert lines[1].startswith("    [idx: 3, add")
    assert lines[2].startswith("        [idx: 1, leaf")
    assert "grad: 3" in lines[2]


def test_format_tree_max_depth(shared):
    tape, c = shared
    lines = format_tree(tape, c, max_depth=1).splitlines()
    assert len(lines) == 3
    assert all(not line.startswith("        ") for line in lines)


def test_format_tree_rejects_cycle():
    tape = Tape()
    p = leaf(tape, 1.0)
    a = leaf(tape, 2.0)
    tape.splice(p, add(tape, p, a))
    with pytest.raises(GraphCycleError):
        format_tree(tape, p)
    with pytest.raises(GraphCycleError):
        print_tree(tape, p)


def test_format_tree_repeats_shared_nodes_without_cycle_error():
    tape = Tape()
    x = leaf(tape, 2.0)
    s = add(tape, x, x)
    y = add(tape, s, s)
    lines = format_tree(tape, y).splitlines()
    # y, s, x, x, s, x, x
    assert len(lines) == 7
    assert sum("[idx: 2, add" in line for line in lines) == 2


def test_print_tree(shared, capsys):
    tape, c = shared
    print_tree(tape, c)
    out = capsys.readouterr().out
    assert "Computation graph" in out
    assert "[idx: 5, add" in out


def test_graph_stats(shared):
    tape, _ = shared
    stats = get_graph_stats(tape)
    assert stats["nodes"] == 5
    assert stats["edges"] == 6
    assert stats["leaves"] == 2
    assert stats["max_fan_in"] == 2
    assert stats["max_fan_out"] == 2
    assert stats["avg_fan_out"] == pytest.approx(1.2)
    assert stats["operations"] == {"leaf": 2, "add": 3}


def test_graph_stats_unary():
    tape = Tape()
    tanh(tape, leaf(tape, 1.0))
    stats = get_graph_stats(tape)
    assert stats["edges"] == 1
    assert stats["avg_fan_in"] == pytest.approx(0.5)


def test_graph_summary(shared, capsys):
    tape, _ = shared
    stats = print_graph_summary(tape, detailed=True)
    out = capsys.readouterr().out
    assert stats["nodes"] == 5
    assert "COMPUTATION GRAPH SUMMARY" in out
    assert "gradient" in out


def test_graph_summary_empty(capsys):
    stats = print_graph_summary(Tape())
    assert stats["nodes"] == 0
    assert "Empty computation graph" in capsys.readouterr().out
