#!/usr/bin/env python3
"""
Banker's Algorithm Safety Simulator
Main entry point for the simulation system.

Loads a system state, reports whether it is safe, then applies a sequence
of resource requests, granting each only if the system stays safe.
"""

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from models.system_state import SystemState, CapacityExceededError
from utils.state_loader import (
    load_state, load_requests, parse_request_spec, StateLoadError
)
from utils.logger import SimulatorLogger
from algorithms.avoidance import apply_requests, is_safe_state
from analysis.events import EventLog, SimulationEvent, EventType


def run_simulation(
    state_path: str,
    requests_path: Optional[str] = None,
    request_specs: Sequence[str] = (),
    verbose: bool = False,
    log_file: Optional[str] = None,
    max_processes: Optional[int] = None,
    max_resources: Optional[int] = None
) -> Optional[EventLog]:
    """
    Run the Banker's simulation on a state file.

    Order of work:
    1. Load state and report initial safety verdict
    2. Apply requests from requests_path (file order)
    3. Apply command-line request_specs (argument order)
    4. Report final verdict and statistics

    Args:
        state_path: Path to state file
        requests_path: Optional path to request file
        request_specs: Requests in "P:v0,v1,..." form
        verbose: Enable verbose logging
        log_file: Optional path to write the log to
        max_processes: Process capacity override
        max_resources: Resource type capacity override

    Returns:
        EventLog containing all simulation events, or None if loading failed
    """
    logger = SimulatorLogger(verbose=verbose, log_file=log_file)
    event_log = EventLog()

    try:
        try:
            system_state = load_state(
                state_path,
                max_processes=max_processes,
                max_resources=max_resources
            )
            requests = _collect_requests(system_state, requests_path, request_specs)
        except (StateLoadError, CapacityExceededError) as e:
            logger.log(f"Failed to load state: {e}", "error")
            return None

        logger.log(f"\n{'='*60}")
        logger.log("BANKER'S SIMULATION START")
        logger.log(f"State: {state_path}")
        logger.log(f"{'='*60}\n")

        logger.log(system_state.display())

        safe, sequence = is_safe_state(system_state)
        logger.log_verdict(safe, sequence)
        event_log.add(_safety_event(0, safe, sequence))

        apply_requests(system_state, requests, logger, event_log, first_step=1)

        if requests:
            safe, sequence = is_safe_state(system_state)
            logger.log("\nFinal State:")
            logger.log(system_state.display())
            logger.log_verdict(safe, sequence)
            event_log.add(_safety_event(len(requests), safe, sequence))

        _display_statistics(event_log, logger)
        return event_log
    finally:
        logger.close()


def _collect_requests(
    system_state: SystemState,
    requests_path: Optional[str],
    request_specs: Sequence[str]
) -> List[Tuple[int, List[int]]]:
    """Gather file requests followed by command-line requests."""
    requests = []
    if requests_path:
        requests.extend(load_requests(requests_path, system_state.num_resources))
    for spec in request_specs:
        requests.append(parse_request_spec(spec, system_state.num_resources))
    return requests


def _safety_event(step: int, safe: bool, sequence: Optional[List[int]]) -> SimulationEvent:
    if safe:
        message = "SAFE, sequence: " + " -> ".join(f"P{p}" for p in sequence)
    else:
        message = "UNSAFE"
    return SimulationEvent(
        step=step,
        event_type=EventType.SAFETY_CHECK,
        process_id=-1,  # system-wide event
        message=message
    )


def _display_statistics(event_log: EventLog, logger: SimulatorLogger) -> None:
    """Display final simulation statistics."""
    logger.log("\nSimulation Statistics:")

    granted = len(event_log.get_events_by_type(EventType.ALLOCATION))
    denied = len(event_log.get_events_by_type(EventType.DENIAL))

    logger.log(f"  Requests: {granted + denied}")
    logger.log(f"  Granted: {granted}")
    logger.log(f"  Denied: {denied}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm Safety Simulator"
    )
    parser.add_argument(
        '--state',
        type=str,
        required=True,
        help='Path to system state file'
    )
    parser.add_argument(
        '--requests',
        type=str,
        default=None,
        help='Path to file of resource requests, one "pid v0 v1 ..." per line'
    )
    parser.add_argument(
        '--request',
        action='append',
        default=[],
        metavar='P:V0,V1,...',
        help='Resource request applied after --requests (repeatable)'
    )
    parser.add_argument(
        '--max-processes',
        type=int,
        default=None,
        help='Maximum number of processes a state may hold (default: 10)'
    )
    parser.add_argument(
        '--max-resources',
        type=int,
        default=None,
        help='Maximum number of resource types a state may hold (default: 10)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)

    event_log = run_simulation(
        args.state,
        requests_path=args.requests,
        request_specs=args.request,
        verbose=args.verbose,
        log_file=args.log_file,
        max_processes=args.max_processes,
        max_resources=args.max_resources
    )
    return 0 if event_log is not None else 1


if __name__ == '__main__':
    sys.exit(main())
