"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Simulator.

Implements the Banker's safety check and the request decision driver that
only grants requests leaving the system in a safe state.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple

from models.system_state import SystemState
from analysis.events import EventLog, SimulationEvent, EventType


def needs_are_met(system_state: SystemState, process: int, work: np.ndarray) -> bool:
    """
    Check if the remaining need of a process can be met from work.

    Args:
        system_state: Current system state
        process: Index of the process to check
        work: Currently available resources [R]

    Returns:
        True if Need[process] <= work for every resource type
    """
    return bool(np.all(system_state.need_of(process) <= work))


def find_candidate_process(
    system_state: SystemState,
    finish: np.ndarray,
    work: np.ndarray
) -> Optional[int]:
    """
    Find the lowest-index unfinished process whose need can be met.

    Returns:
        Index of the candidate process, or None if no process can progress
    """
    for process in range(system_state.num_processes):
        if not finish[process] and needs_are_met(system_state, process, work):
            return process
    return None


def release_allocated_resources(
    system_state: SystemState,
    process: int,
    work: np.ndarray
) -> None:
    """Add the allocation of a finished process back into work (in place)."""
    work += system_state.allocation_of(process)


def is_safe_state(system_state: SystemState) -> Tuple[bool, Optional[List[int]]]:
    """
    Check if system is in a safe state using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find the first process i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], add i to sequence
    4. Repeat step 2 until no process can be found
    5. SAFE if every Finish[i] is True, otherwise UNSAFE

    Time Complexity: O(P²×R)

    The state itself is never modified; Work and Finish are local copies.

    Args:
        system_state: System state with need and availability derived

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    work = np.array(system_state.available_vector, dtype=int)
    finish = np.zeros(system_state.num_processes, dtype=bool)
    safe_sequence = []

    candidate = find_candidate_process(system_state, finish, work)
    while candidate is not None:
        release_allocated_resources(system_state, candidate, work)
        finish[candidate] = True
        safe_sequence.append(candidate)
        candidate = find_candidate_process(system_state, finish, work)

    if np.all(finish):
        return True, safe_sequence
    else:
        return False, None


def is_safe(system_state: SystemState) -> bool:
    """Banker's safety verdict for the given state."""
    safe, _ = is_safe_state(system_state)
    return safe


def format_sequence(sequence: Sequence[int]) -> str:
    """Format a completion order as "P1 -> P3 -> ..."."""
    return " -> ".join(f"P{process}" for process in sequence)


def handle_request(
    system_state: SystemState,
    process: int,
    request: Sequence[int]
) -> Tuple[bool, str]:
    """
    Handle resource request using Banker's Algorithm.

    Steps:
    1. Validate: process exists, request has one non-negative entry per resource
    2. Validate: request <= need (otherwise the process exceeds its claim)
    3. Check: request <= available (if not, process must wait)
    4. Tentatively allocate resources on a copy of the state
    5. Run safety algorithm on the copy
    6. If safe: commit allocation to the real state
       If unsafe: real state is left untouched

    Args:
        system_state: Current system state (modified only when granted)
        process: Index of the requesting process
        request: Instances requested of each resource type [R]

    Returns:
        Tuple of (granted, reason_string)
    """
    # Step 1: Validate request shape
    if process < 0 or process >= system_state.num_processes:
        return False, f"Invalid request: no process P{process}"

    try:
        request = np.array(request, dtype=int)
    except OverflowError:
        return False, f"Invalid request: amount out of range in {list(request)}"
    if request.shape != (system_state.num_resources,):
        return False, (
            f"Invalid request: expected {system_state.num_resources} amounts, "
            f"got {request.size}"
        )
    if np.any(request < 0):
        return False, f"Invalid request: negative amount in {request.tolist()}"

    # Step 2: Validate request doesn't exceed need
    need = system_state.need_of(process)
    if np.any(request > need):
        return False, f"Request exceeds remaining claim (requested: {request.tolist()}, need: {need.tolist()})"

    # Step 3: Check if resources are available
    available = system_state.available_vector
    if np.any(request > available):
        return False, (
            f"Insufficient resources (requested: {request.tolist()}, "
            f"available: {available.tolist()}) - process must wait"
        )

    # Step 4: Tentatively allocate on a copy
    allocation = np.array(system_state.allocation_matrix, dtype=int)
    allocation[process] += request

    tentative = system_state.copy()
    tentative.set_allocations(allocation)
    tentative.derive_need_and_availability()

    # Step 5: Run safety algorithm
    safe, safe_seq = is_safe_state(tentative)

    # Step 6: Decide whether to commit
    if safe:
        system_state.set_allocations(allocation)
        system_state.derive_need_and_availability()

        # SANITY CHECK: Verify resource conservation after grant
        system_state.assert_resource_conservation(f"after granting {request.tolist()} to P{process}")

        return True, f"Safe state maintained, sequence: {format_sequence(safe_seq)}"
    else:
        return False, "Unsafe state detected - request rolled back"


def apply_requests(
    system_state: SystemState,
    requests: Sequence[Tuple[int, Sequence[int]]],
    logger=None,
    event_log: Optional[EventLog] = None,
    first_step: int = 0
) -> List[Tuple[int, List[int], bool, str]]:
    """
    Apply a sequence of resource requests in order.

    Each request is decided by handle_request() against the state left by
    the previous ones.

    Args:
        system_state: Current system state
        requests: (process, request vector) pairs
        logger: Optional SimulatorLogger for decisions
        event_log: Optional EventLog receiving one event per request
        first_step: Step number given to the first request

    Returns:
        List of (process, request, granted, reason) tuples
    """
    results = []

    for step, (process, request) in enumerate(requests, start=first_step):
        request = [int(amount) for amount in request]
        granted, reason = handle_request(system_state, process, request)
        results.append((process, request, granted, reason))

        if logger is not None:
            logger.log_request(step, process, request, granted, reason)
            if granted:
                logger.log(f"  Available now: {system_state.available_vector.tolist()}", "debug")
                logger.log_system_state(step, system_state.display())

        if event_log is not None:
            event_log.add(SimulationEvent(
                step=step,
                event_type=EventType.ALLOCATION if granted else EventType.DENIAL,
                process_id=process,
                request=request,
                reason=reason
            ))

    return results
