"""
Logger utility for the Banker's Algorithm Safety Simulator.

Provides request-by-request logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for request decisions and safety verdicts.

    Format: "Step X: P1 requests [1, 0, 2] - GRANTED/DENIED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Banker's Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_step(self, step: int, message: str) -> None:
        """Log a message prefixed with its request step."""
        self.log(f"Step {step}: {message}")

    def log_request(
        self,
        step: int,
        process: int,
        request: List[int],
        granted: bool,
        reason: str
    ) -> None:
        """
        Log a resource request decision.

        Args:
            step: Index of the request in the sequence
            process: Requesting process index
            request: Requested instances per resource type
            granted: Whether request was granted
            reason: Reason for decision
        """
        status = "GRANTED" if granted else "DENIED"
        self.log_step(step, f"P{process} requests {request} - {status} ({reason})")

    def log_verdict(self, safe: bool, sequence: Optional[List[int]]) -> None:
        """Log a safety verdict and, when safe, the completion order found."""
        if safe:
            order = " -> ".join(f"P{p}" for p in sequence)
            self.log(f"State is SAFE (sequence: {order or 'none'})")
        else:
            self.log("State is UNSAFE (no process can finish with available resources)", "warning")

    def log_system_state(self, step: int, state_str: str) -> None:
        """
        Log system state snapshot (verbose only).

        Args:
            step: Index of the request after which the snapshot was taken
            state_str: Formatted system state
        """
        if self.verbose:
            self.log_step(step, f"System State:\n{state_str}")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
