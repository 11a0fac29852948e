"""
Node store tests: identities, growth, checked access, destroy and splice.
"""

import numpy as np
import pytest

from scalar_aad.aad.core.errors import ForeignNodeError, OutOfRangeError
from scalar_aad.aad.core.node import NodeId, Op
from scalar_aad.aad.core.tape import Tape
from scalar_aad.aad.ops import add, leaf, mul, tanh


def test_new_tape_is_empty_with_reserved_slot():
    tape = Tape()
    assert len(tape) == 0
    assert tape.count == 1
    assert tape.capacity == 0
    assert tape.ordered


def test_identities_start_at_one_and_increase():
    tape = Tape()
    ids = [leaf(tape, float(i)) for i in range(5)]
    assert [i.index for i in ids] == [1, 2, 3, 4, 5]
    assert all(i.tape_uid == tape.uid for i in ids)
    assert list(tape.ids()) == ids


def test_capacity_doubles():
    tape = Tape()
    leaf(tape, 1.0)
    assert tape.capacity == 8
    for _ in range(7):
        leaf(tape, 1.0)
    # 8 real nodes + reserved slot do not fit in 8 slots
    assert tape.capacity == 16


def test_growth_preserves_existing_nodes():
    tape = Tape()
    first = [leaf(tape, i * 0.5) for i in range(6)]
    s = add(tape, first[1], first[2])
    before = [tape.get(i) for i in first + [s]]

    for i in range(500):
        leaf(tape, -float(i))
    assert tape.capacity >= 507

    after = [tape.get(i) for i in first + [s]]
    assert before == after
    assert tape.get(s).left == first[1]
    assert tape.get(s).right == first[2]


def test_initial_capacity_argument():
    tape = Tape(capacity=4)
    assert tape.capacity == 4
    ids = [leaf(tape, 1.0) for _ in range(10)]
    assert tape.value_of(ids[-1]) == 1.0


def test_get_snapshot_fields():
    tape = Tape()
    a = leaf(tape, 2.0)
    b = leaf(tape, 3.0)
    c = mul(tape, a, b)
    t = tanh(tape, c)

    node = tape.get(c)
    assert node.op is Op.MUL
    assert node.value == np.float32(6.0)
    assert isinstance(node.value, np.float32)
    assert node.gradient == 0.0
    assert (node.left, node.right) == (a, b)

    assert tape.get(t).right is None
    assert tape.get(a).is_leaf
    assert tape.get(a).left is None and tape.get(a).right is None


def test_values_are_float32():
    tape = Tape()
    a = leaf(tape, 0.1)
    assert isinstance(tape.value_of(a), np.float32)
    assert tape.value_of(a) == np.float32(0.1)
    # widened back to double, the stored value shows float32 rounding
    assert float(tape.value_of(a)) != 0.1


def test_null_and_out_of_range_ids_are_rejected():
    tape = Tape()
    a = leaf(tape, 1.0)
    with pytest.raises(OutOfRangeError):
        tape.get(NodeId(tape.uid, 0))
    with pytest.raises(OutOfRangeError):
        tape.get(NodeId(tape.uid, a.index + 1))
    with pytest.raises(OutOfRangeError):
        tape.value_of(NodeId(tape.uid, -1))
    with pytest.raises(OutOfRangeError):
        tape.ref(2)


def test_foreign_ids_are_rejected_even_when_indices_overlap():
    tape_a, tape_b = Tape(), Tape()
    a = leaf(tape_a, 1.0)
    leaf(tape_b, 99.0)
    assert a.index == 1 and len(tape_b) == 1

    with pytest.raises(ForeignNodeError):
        tape_b.get(a)
    with pytest.raises(OutOfRangeError):
        tape_b.gradient_of(a)
    with pytest.raises(ForeignNodeError):
        add(tape_b, a, tape_b.ref(1))


def test_raw_ints_are_not_node_ids():
    tape = Tape()
    leaf(tape, 1.0)
    with pytest.raises(TypeError):
        tape.get(1)


def test_destroy_invalidates_ids():
    tape = Tape()
    a = leaf(tape, 1.0)
    ref = tape.get_mut(a)
    tape.destroy()

    assert tape.capacity == 0
    with pytest.raises(OutOfRangeError):
        tape.get(a)
    with pytest.raises(OutOfRangeError):
        ref.value
    with pytest.raises(RuntimeError):
        leaf(tape, 2.0)


def test_context_manager_destroys_tape():
    with Tape() as tape:
        a = leaf(tape, 1.0)
        assert tape.value_of(a) == 1.0
    assert tape.destroyed
    with pytest.raises(OutOfRangeError):
        tape.value_of(a)


def test_get_mut_writes_through():
    tape = Tape()
    a = leaf(tape, 1.0)
    ref = tape.get_mut(a)
    ref.value = 4.5
    ref.gradient = 2.0
    assert tape.value_of(a) == 4.5
    assert tape.gradient_of(a) == 2.0
    assert ref.op is Op.LEAF

    tape.set_value(a, -1.0)
    assert ref.value == -1.0


def test_splice_copies_node_and_keeps_gradient():
    tape = Tape()
    slot = leaf(tape, 0.0)
    tape.get_mut(slot).gradient = 7.0
    a = leaf(tape, 2.0)
    b = leaf(tape, 3.0)
    s = mul(tape, a, b)

    tape.splice(slot, s)
    node = tape.get(slot)
    assert node.op is Op.MUL
    assert node.value == 6.0
    assert (node.left, node.right) == (a, b)
    assert node.gradient == 7.0
    # the slot is older than its new children
    assert not tape.ordered


def test_splice_into_newer_slot_keeps_order():
    tape = Tape()
    a = leaf(tape, 2.0)
    b = leaf(tape, 3.0)
    s = add(tape, a, b)
    slot = leaf(tape, 0.0)
    tape.splice(slot, s)
    assert tape.ordered
    assert tape.value_of(slot) == 5.0
