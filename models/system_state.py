"""
System State model for the Banker's Algorithm Safety Simulator.

Holds the claim, allocation and need matrices together with the total and
available resource vectors for a fixed number of processes and resource
types. Need and availability are derived from the other three.
"""

import copy
import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass, field


# Default capacity of a system state
MAX_PROCESSES = 10
MAX_RESOURCES = 10


class CapacityExceededError(Exception):
    """Raised when a state is sized beyond its process or resource capacity."""
    pass


def _empty_matrix() -> np.ndarray:
    return np.zeros((0, 0), dtype=int)


def _empty_vector() -> np.ndarray:
    return np.zeros(0, dtype=int)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


@dataclass(eq=False)
class SystemState:
    """
    Resource allocation state of a simulated system.

    Attributes:
        max_processes: Largest number of processes this state may hold
        max_resources: Largest number of resource types this state may hold
        _claim_matrix: [P][R] Maximum resources each process may ever hold
        _allocation_matrix: [P][R] Resources currently held by each process
        _need_matrix: [P][R] Derived as Claim - Allocation
        _total_vector: [R] Installed instances of each resource type
        _available_vector: [R] Derived as Total - sum of Allocation columns

    Invariants (not enforced, see invariant_violations()):
        allocation[p][r] <= claim[p][r]
        sum(allocation[:, r]) <= total[r]
    """
    max_processes: int = MAX_PROCESSES
    max_resources: int = MAX_RESOURCES

    _num_processes: int = 0
    _num_resources: int = 0
    _claim_matrix: np.ndarray = field(default_factory=_empty_matrix)
    _allocation_matrix: np.ndarray = field(default_factory=_empty_matrix)
    _need_matrix: np.ndarray = field(default_factory=_empty_matrix)
    _total_vector: np.ndarray = field(default_factory=_empty_vector)
    _available_vector: np.ndarray = field(default_factory=_empty_vector)

    def initialize(
        self,
        max_processes: Optional[int] = None,
        max_resources: Optional[int] = None
    ) -> None:
        """
        Reset to an empty state so the instance can be reused for a new load.

        Args:
            max_processes: New process capacity (keeps current if None)
            max_resources: New resource type capacity (keeps current if None)
        """
        if max_processes is not None:
            self.max_processes = max_processes
        if max_resources is not None:
            self.max_resources = max_resources

        self._num_processes = 0
        self._num_resources = 0
        self._claim_matrix = _empty_matrix()
        self._allocation_matrix = _empty_matrix()
        self._need_matrix = _empty_matrix()
        self._total_vector = _empty_vector()
        self._available_vector = _empty_vector()

    def set_dimensions(self, num_processes: int, num_resources: int) -> None:
        """
        Set the number of processes and resource types.

        All matrices and vectors are resized to zeros of the new shape.

        Args:
            num_processes: Number of processes (N)
            num_resources: Number of resource types (M)

        Raises:
            CapacityExceededError: If N or M exceeds this state's capacity
            ValueError: If N or M is negative
        """
        if num_processes < 0 or num_resources < 0:
            raise ValueError(
                f"Dimensions cannot be negative (processes={num_processes}, "
                f"resources={num_resources})"
            )
        if num_processes > self.max_processes or num_resources > self.max_resources:
            raise CapacityExceededError(
                f"Maximum exceeded, requested processes={num_processes} "
                f"resources={num_resources}, maximum={self.max_processes}, "
                f"{self.max_resources}"
            )

        self._num_processes = num_processes
        self._num_resources = num_resources

        shape = (num_processes, num_resources)
        self._claim_matrix = np.zeros(shape, dtype=int)
        self._allocation_matrix = np.zeros(shape, dtype=int)
        self._need_matrix = np.zeros(shape, dtype=int)
        self._total_vector = np.zeros(num_resources, dtype=int)
        self._available_vector = np.zeros(num_resources, dtype=int)

    def set_totals(self, vector: Sequence[int]) -> None:
        """Set the total installed instances of each resource type [R]."""
        self._total_vector = self._as_array(vector, (self._num_resources,), "total vector")

    def set_claims(self, matrix: Sequence[Sequence[int]]) -> None:
        """Set the claim (maximum demand) matrix [P][R]."""
        self._claim_matrix = self._as_array(matrix, self._matrix_shape, "claim matrix")

    def set_allocations(self, matrix: Sequence[Sequence[int]]) -> None:
        """Set the current allocation matrix [P][R]."""
        self._allocation_matrix = self._as_array(matrix, self._matrix_shape, "allocation matrix")

    def derive_need_and_availability(self) -> None:
        """
        Recompute the need matrix and available vector.

        Need = Claim - Allocation
        Available = Total - (sum of current allocations per resource)

        Must be called after claims or allocations change. Inconsistent
        inputs produce negative values silently.
        """
        self._need_matrix = self._claim_matrix - self._allocation_matrix
        self._available_vector = self._total_vector - self._allocation_matrix.sum(axis=0)

    @property
    def _matrix_shape(self):
        return (self._num_processes, self._num_resources)

    @staticmethod
    def _as_array(values, shape, name: str) -> np.ndarray:
        array = np.array(values, dtype=int)
        # an empty row list cannot carry its column count
        if array.size == 0 and int(np.prod(shape)) == 0:
            array = array.reshape(shape)
        if array.shape != shape:
            raise ValueError(f"{name} has shape {array.shape}, expected {shape}")
        return array

    @property
    def num_processes(self) -> int:
        """Number of processes in the system."""
        return self._num_processes

    @property
    def num_resources(self) -> int:
        """Number of resource types in the system."""
        return self._num_resources

    @property
    def claim_matrix(self) -> np.ndarray:
        """Get claim matrix [P][R]."""
        return _read_only(self._claim_matrix)

    @property
    def allocation_matrix(self) -> np.ndarray:
        """Get allocation matrix [P][R]."""
        return _read_only(self._allocation_matrix)

    @property
    def need_matrix(self) -> np.ndarray:
        """Get need matrix [P][R], Claim - Allocation."""
        return _read_only(self._need_matrix)

    @property
    def total_vector(self) -> np.ndarray:
        """Get total resources vector [R]."""
        return _read_only(self._total_vector)

    @property
    def available_vector(self) -> np.ndarray:
        """Get available resources vector [R]."""
        return _read_only(self._available_vector)

    def need_of(self, process: int) -> np.ndarray:
        """Need row [R] of one process."""
        return _read_only(self._need_matrix[process])

    def allocation_of(self, process: int) -> np.ndarray:
        """Allocation row [R] of one process."""
        return _read_only(self._allocation_matrix[process])

    def copy(self) -> 'SystemState':
        """Independent deep copy, used to evaluate hypothetical states."""
        return copy.deepcopy(self)

    def invariant_violations(self) -> List[str]:
        """
        Check the well-formedness invariants of the loaded state.

        Returns:
            One message per violation, empty if the state is well formed
        """
        violations = []

        for r in range(self._num_resources):
            if self._total_vector[r] < 0:
                violations.append(f"R{r}: total ({self._total_vector[r]}) is negative")

        for p in range(self._num_processes):
            for r in range(self._num_resources):
                claim = self._claim_matrix[p][r]
                allocation = self._allocation_matrix[p][r]
                if claim < 0:
                    violations.append(f"P{p}: claim for R{r} ({claim}) is negative")
                if allocation < 0:
                    violations.append(f"P{p}: allocation of R{r} ({allocation}) is negative")
                if allocation > claim:
                    violations.append(
                        f"P{p}: allocation of R{r} ({allocation}) exceeds claim ({claim})"
                    )

        allocated = self._allocation_matrix.sum(axis=0)
        for r in range(self._num_resources):
            if allocated[r] > self._total_vector[r]:
                violations.append(
                    f"R{r}: allocations ({allocated[r]}) exceed total instances "
                    f"({self._total_vector[r]})"
                )

        return violations

    def assert_resource_conservation(self, context=""):
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        allocated_per_resource = self._allocation_matrix.sum(axis=0)

        for r_idx in range(self._num_resources):
            allocated = allocated_per_resource[r_idx]
            available = self._available_vector[r_idx]
            total = self._total_vector[r_idx]

            assert allocated + available == total, (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

            assert available >= 0, (
                f"Negative available resources for R{r_idx} {context}\n"
                f"  Available: {available}"
            )

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []

        output.append("Claim matrix C")
        output.extend(self._matrix_lines(self._claim_matrix))
        output.append("")

        output.append("Allocation matrix A")
        output.extend(self._matrix_lines(self._allocation_matrix))
        output.append("")

        output.append("Need matrix C-A")
        output.extend(self._matrix_lines(self._need_matrix))
        output.append("")

        output.append("Resource vector R")
        output.extend(self._vector_lines(self._total_vector))
        output.append("")

        output.append("Available vector V")
        output.extend(self._vector_lines(self._available_vector))
        output.append("")

        return "\n".join(output)

    def _header_line(self) -> str:
        # 4 spaces for the row labels
        return " " * 4 + "".join(f"R{r:<3}" for r in range(self._num_resources))

    def _matrix_lines(self, matrix: np.ndarray) -> List[str]:
        lines = [self._header_line()]
        for p in range(self._num_processes):
            row = "".join(f"{matrix[p][r]:<4}" for r in range(self._num_resources))
            lines.append(f"P{p:<3}" + row)
        return lines

    def _vector_lines(self, vector: np.ndarray) -> List[str]:
        row = "".join(f"{vector[r]:<4}" for r in range(self._num_resources))
        return [self._header_line(), " " * 4 + row]

    def __str__(self) -> str:
        return self.display()
