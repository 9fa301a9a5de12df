import re
from typing import List, Optional, Tuple
from ..models.config import PortConfig

_PORT_PATTERN = re.compile(r'^([A-Za-z-]+)(\d+(?:/\d+)*)$')
RANGE_SEPARATOR = " - "


def split_port_name(name: str) -> Optional[Tuple[str, Tuple[int, ...]]]:
    """Split 'GigabitEthernet1/0/2' into ('GigabitEthernet', (1, 0, 2))."""
    match = _PORT_PATTERN.match(name.strip())
    if not match:
        return None
    return match.group(1), tuple(int(part) for part in match.group(2).split('/'))


def port_sort_key(port: PortConfig) -> Tuple[str, Tuple[int, ...], str]:
    """Order by textual prefix, then numeric path compared component-wise."""
    name = port.range_start or port.port
    parts = split_port_name(name)
    if parts is None:
        return name, (), port.port
    prefix, numbers = parts
    return prefix, numbers, port.port


def _is_next(previous: str, candidate: str) -> bool:
    prev_parts = split_port_name(previous)
    cand_parts = split_port_name(candidate)
    if prev_parts is None or cand_parts is None:
        return False
    prev_prefix, prev_nums = prev_parts
    cand_prefix, cand_nums = cand_parts
    return (
        prev_prefix == cand_prefix
        and len(prev_nums) == len(cand_nums)
        and prev_nums[:-1] == cand_nums[:-1]
        and cand_nums[-1] == prev_nums[-1] + 1
    )


def _same_settings(a: PortConfig, b: PortConfig) -> bool:
    # The interface declaration line is the only line allowed to differ
    return (
        a.config[1:] == b.config[1:]
        and a.type == b.type
        and a.description == b.description
        and a.status == b.status
        and a.members == b.members
    )


def _emit(run: List[PortConfig]) -> PortConfig:
    first, last = run[0], run[-1]
    start = first.range_start or first.port
    end = last.range_end or last.port
    if len(run) == 1:
        return first.model_copy(update={"range_start": start, "range_end": end})
    return first.model_copy(update={
        "port": f"{start}{RANGE_SEPARATOR}{end}",
        "range_start": start,
        "range_end": end,
    })


def consolidate_ports(ports: List[PortConfig]) -> List[PortConfig]:
    """
    Merge numerically adjacent interfaces with identical settings into ranges.

    Two interfaces merge only when they share the alphabetic prefix, the
    numeric paths differ by +1 in the last component, and everything after
    the declaration line (plus description, status, type and members) is
    identical. Already-consolidated records never merge again, so the
    operation is idempotent.

    Args:
        ports: Interface records in any order

    Returns:
        Records sorted by port name, one per contiguous range
    """
    candidates = [p for p in ports or [] if p is not None and p.port and p.port.strip()]
    if not candidates:
        return []

    consolidated: List[PortConfig] = []
    run: List[PortConfig] = []
    for port in sorted(candidates, key=port_sort_key):
        if run:
            tail = run[-1]
            # Range records have a label, not a name, so they never extend
            mergeable = (
                tail.range_start in (None, tail.port)
                and port.range_start in (None, port.port)
                and _is_next(tail.port, port.port)
                and _same_settings(run[0], port)
            )
            if mergeable:
                run.append(port)
                continue
            consolidated.append(_emit(run))
        run = [port]

    consolidated.append(_emit(run))
    return consolidated


def expand_range(port: PortConfig) -> List[str]:
    """Interface names covered by a (possibly consolidated) record."""
    start = port.range_start or port.port
    end = port.range_end or port.port
    if start == end:
        return [start]
    start_parts = split_port_name(start)
    end_parts = split_port_name(end)
    if start_parts is None or end_parts is None:
        return [start, end]
    prefix, numbers = start_parts
    base = "/".join(str(n) for n in numbers[:-1])
    return [
        f"{prefix}{base}/{n}" if base else f"{prefix}{n}"
        for n in range(numbers[-1], end_parts[1][-1] + 1)
    ]
