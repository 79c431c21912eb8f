"""
State Loader for the Banker's Algorithm Safety Simulator.

Loads and validates plain-text system state files and resource request lists.

State file format (whitespace-separated integers, '#' starts a comment):

    n m
    r0 r1 ... r(m-1)            total resources
    c00 c01 ... c0(m-1)         n rows of claims
    ...
    a00 a01 ... a0(m-1)         n rows of allocations
    ...
"""

from typing import Iterator, List, Optional, Tuple

from models.system_state import SystemState


class StateLoadError(Exception):
    """Exception raised when a state or request file cannot be loaded or is invalid."""
    pass


def _strip_comment(line: str) -> str:
    return line.split('#', 1)[0]


class _TokenReader:
    """Reads integers one at a time from comment-stripped text."""

    def __init__(self, text: str):
        self._tokens = self._tokenize(text)
        self._position = 0

    @staticmethod
    def _tokenize(text: str) -> List[Tuple[int, str]]:
        tokens = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            for token in _strip_comment(line).split():
                tokens.append((line_number, token))
        return tokens

    def read_int(self, what: str) -> int:
        if self._position >= len(self._tokens):
            raise StateLoadError(f"Unexpected end of input while reading {what}")

        line_number, token = self._tokens[self._position]
        self._position += 1
        try:
            return int(token)
        except ValueError:
            raise StateLoadError(
                f"Line {line_number}: expected integer for {what}, found '{token}'"
            )

    def read_row(self, length: int, what: str) -> List[int]:
        return [self.read_int(f"{what}[{i}]") for i in range(length)]

    def remaining(self) -> List[Tuple[int, str]]:
        return self._tokens[self._position:]


def parse_state(
    text: str,
    state: Optional[SystemState] = None,
    validate: bool = True,
    max_processes: Optional[int] = None,
    max_resources: Optional[int] = None
) -> SystemState:
    """
    Parse a system state from text.

    Args:
        text: Contents of a state file
        state: Existing state to (re)load into; a new one is created if None
        validate: Reject states violating the claim/total invariants
        max_processes: Process capacity override
        max_resources: Resource type capacity override

    Returns:
        SystemState with need and availability derived

    Raises:
        StateLoadError: If the text is malformed or fails validation
        CapacityExceededError: If the dimensions exceed the state's capacity
    """
    if state is None:
        state = SystemState()
    state.initialize(max_processes, max_resources)

    reader = _TokenReader(text)

    num_processes = reader.read_int("number of processes")
    num_resources = reader.read_int("number of resources")
    if num_processes < 0 or num_resources < 0:
        raise StateLoadError(
            f"Dimensions cannot be negative (processes={num_processes}, "
            f"resources={num_resources})"
        )

    state.set_dimensions(num_processes, num_resources)

    totals = reader.read_row(num_resources, "total")
    claims = [reader.read_row(num_resources, f"claim P{p}") for p in range(num_processes)]
    allocations = [
        reader.read_row(num_resources, f"allocation P{p}") for p in range(num_processes)
    ]

    leftover = reader.remaining()
    if leftover:
        line_number, token = leftover[0]
        raise StateLoadError(
            f"Line {line_number}: unexpected data '{token}' after allocation matrix"
        )

    try:
        state.set_totals(totals)
        state.set_claims(claims)
        state.set_allocations(allocations)
    except OverflowError as e:
        raise StateLoadError(f"Resource count out of range: {e}")
    state.derive_need_and_availability()

    if validate:
        violations = state.invariant_violations()
        if violations:
            raise StateLoadError(
                "VALIDATION FAILED:\n" + "\n".join(f"  {v}" for v in violations)
            )

    return state


def load_state(
    file_path: str,
    state: Optional[SystemState] = None,
    validate: bool = True,
    max_processes: Optional[int] = None,
    max_resources: Optional[int] = None
) -> SystemState:
    """
    Load a system state from a file.

    Raises:
        StateLoadError: If file cannot be read, is malformed or is invalid
        CapacityExceededError: If the dimensions exceed the state's capacity
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError:
        raise StateLoadError(f"State file not found: {file_path}")
    except OSError as e:
        raise StateLoadError(f"Could not read state file {file_path}: {e}")

    return parse_state(text, state, validate, max_processes, max_resources)


def _request_lines(text: str) -> Iterator[Tuple[int, List[str]]]:
    for line_number, line in enumerate(text.splitlines(), start=1):
        fields = _strip_comment(line).split()
        if fields:
            yield line_number, fields


def _to_request(fields: List[str], num_resources: int, where: str) -> Tuple[int, List[int]]:
    if len(fields) != num_resources + 1:
        raise StateLoadError(
            f"{where}: expected process and {num_resources} amounts, "
            f"found {len(fields)} values"
        )
    try:
        values = [int(field) for field in fields]
    except ValueError:
        raise StateLoadError(f"{where}: request values must be integers: {' '.join(fields)}")

    return values[0], values[1:]


def parse_requests(text: str, num_resources: int) -> List[Tuple[int, List[int]]]:
    """
    Parse resource requests, one per line: "pid v0 v1 ... v(m-1)".

    Returns:
        List of (process, request vector) pairs in file order
    """
    return [
        _to_request(fields, num_resources, f"Line {line_number}")
        for line_number, fields in _request_lines(text)
    ]


def load_requests(file_path: str, num_resources: int) -> List[Tuple[int, List[int]]]:
    """
    Load resource requests from a file.

    Raises:
        StateLoadError: If file cannot be read or a request is malformed
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError:
        raise StateLoadError(f"Request file not found: {file_path}")
    except OSError as e:
        raise StateLoadError(f"Could not read request file {file_path}: {e}")

    return parse_requests(text, num_resources)


def parse_request_spec(spec: str, num_resources: int) -> Tuple[int, List[int]]:
    """
    Parse a command-line request of the form "P:v0,v1,...".

    Example: "1:1,0,2" is process 1 requesting [1, 0, 2].
    """
    process, sep, amounts = spec.partition(':')
    if not sep:
        raise StateLoadError(f"Request '{spec}' must look like PROCESS:AMOUNT,AMOUNT,...")

    amount_fields = [a.strip() for a in amounts.split(',')] if amounts.strip() else []
    if not all(amount_fields):
        raise StateLoadError(f"Request '{spec}' has an empty amount")

    fields = [process.strip()] + amount_fields
    return _to_request(fields, num_resources, f"Request '{spec}'")
