"""
System State Tests

Tests SystemState sizing, derivation of need/availability, capacity limits
and display.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.system_state import (
    SystemState, CapacityExceededError, MAX_PROCESSES, MAX_RESOURCES
)


CLASSIC_TOTALS = [10, 5, 7]
CLASSIC_CLAIMS = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
CLASSIC_ALLOCATIONS = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]


def build_state(totals, claims, allocations, **capacity) -> SystemState:
    state = SystemState(**capacity)
    state.set_dimensions(len(claims), len(totals))
    state.set_totals(totals)
    state.set_claims(claims)
    state.set_allocations(allocations)
    state.derive_need_and_availability()
    return state


def test_new_state_is_empty():
    state = SystemState()

    assert state.num_processes == 0
    assert state.num_resources == 0
    assert state.max_processes == MAX_PROCESSES
    assert state.max_resources == MAX_RESOURCES
    assert state.need_matrix.shape == (0, 0)
    assert state.available_vector.shape == (0,)


def test_classic_derivation():
    """Need = Claim - Allocation, Available = Total - column sums."""
    print("\n" + "="*60)
    print("TEST: Classic state derivation")
    print("="*60)

    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)
    print(state.display())

    assert state.num_processes == 5
    assert state.num_resources == 3
    assert state.available_vector.tolist() == [3, 3, 2]
    assert state.need_matrix.tolist() == [
        [7, 4, 3],
        [1, 2, 2],
        [6, 0, 0],
        [0, 1, 1],
        [4, 3, 1],
    ]
    assert state.need_of(1).tolist() == [1, 2, 2]
    assert state.allocation_of(2).tolist() == [3, 0, 2]


def test_derivation_is_idempotent():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)
    need = state.need_matrix.copy()
    available = state.available_vector.copy()

    state.derive_need_and_availability()

    assert np.array_equal(state.need_matrix, need)
    assert np.array_equal(state.available_vector, available)


def test_rederive_after_allocation_change():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)

    allocations = [row[:] for row in CLASSIC_ALLOCATIONS]
    allocations[1] = [3, 0, 2]
    state.set_allocations(allocations)
    state.derive_need_and_availability()

    assert state.available_vector.tolist() == [2, 3, 0]
    assert state.need_of(1).tolist() == [0, 2, 0]


def test_capacity_boundary_accepted():
    state = SystemState(max_processes=5, max_resources=3)
    state.set_dimensions(5, 3)

    assert state.num_processes == 5
    assert state.num_resources == 3
    assert state.claim_matrix.shape == (5, 3)


def test_capacity_exceeded():
    state = SystemState(max_processes=5, max_resources=3)

    with pytest.raises(CapacityExceededError):
        state.set_dimensions(6, 3)
    with pytest.raises(CapacityExceededError):
        state.set_dimensions(5, 4)

    # a failed resize leaves the state untouched
    assert state.num_processes == 0
    assert state.num_resources == 0


def test_default_capacity_limits():
    state = SystemState()
    state.set_dimensions(MAX_PROCESSES, MAX_RESOURCES)

    with pytest.raises(CapacityExceededError):
        state.set_dimensions(MAX_PROCESSES + 1, 1)


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        SystemState().set_dimensions(-1, 2)


def test_shape_mismatch_rejected():
    state = SystemState()
    state.set_dimensions(2, 3)

    with pytest.raises(ValueError):
        state.set_totals([1, 2])
    with pytest.raises(ValueError):
        state.set_claims([[1, 2, 3]])
    with pytest.raises(ValueError):
        state.set_allocations([[1, 2], [3, 4]])


def test_initialize_resets_and_changes_capacity():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)

    state.initialize(max_processes=2, max_resources=2)

    assert state.num_processes == 0
    assert state.num_resources == 0
    assert state.max_processes == 2
    assert state.need_matrix.size == 0
    with pytest.raises(CapacityExceededError):
        state.set_dimensions(5, 3)


def test_zero_sized_state():
    state = build_state([], [[], []], [[], []])

    assert state.num_processes == 2
    assert state.num_resources == 0
    assert state.need_matrix.shape == (2, 0)
    assert state.available_vector.shape == (0,)


def test_accessors_are_read_only():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)

    with pytest.raises(ValueError):
        state.available_vector[0] = 99
    with pytest.raises(ValueError):
        state.allocation_matrix[0][0] = 99

    assert state.available_vector[0] == 3


def test_copy_is_independent():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)
    clone = state.copy()

    allocations = [row[:] for row in CLASSIC_ALLOCATIONS]
    allocations[0] = [3, 4, 2]
    clone.set_allocations(allocations)
    clone.derive_need_and_availability()

    assert clone.available_vector.tolist() == [0, 0, 0]
    assert state.available_vector.tolist() == [3, 3, 2]
    assert state.allocation_of(0).tolist() == [0, 1, 0]


def test_invariant_violations():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)
    assert state.invariant_violations() == []

    # P0 above its claim, R0 over-allocated
    bad = build_state([4, 2], [[2, 1], [1, 1]], [[3, 0], [2, 0]])
    violations = bad.invariant_violations()

    assert any("P0: allocation of R0 (3) exceeds claim (2)" in v for v in violations)
    assert any("R0: allocations (5) exceed total instances (4)" in v for v in violations)
    assert bad.available_vector.tolist() == [-1, 2]


def test_resource_conservation():
    state = build_state(CLASSIC_TOTALS, CLASSIC_CLAIMS, CLASSIC_ALLOCATIONS)
    state.assert_resource_conservation("after load")

    # allocations changed without re-deriving availability
    allocations = [row[:] for row in CLASSIC_ALLOCATIONS]
    allocations[4] = [1, 0, 2]
    state.set_allocations(allocations)

    with pytest.raises(AssertionError):
        state.assert_resource_conservation("stale availability")


def test_display():
    state = build_state([10, 5], [[7, 5], [3, 2]], [[0, 1], [2, 0]])
    lines = state.display().splitlines()

    assert lines[0] == "Claim matrix C"
    assert lines[1] == "    R0  R1  "
    assert lines[2] == "P0  7   5   "
    assert lines[3] == "P1  3   2   "
    assert "Need matrix C-A" in lines
    assert "Available vector V" in lines

    available_at = lines.index("Available vector V")
    assert lines[available_at + 2] == "    8   4   "
    assert str(state) == state.display()
