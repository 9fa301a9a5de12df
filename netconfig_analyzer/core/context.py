from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ContextKind(str, Enum):
    GLOBAL = "global"
    INTERFACE = "interface"
    SVI = "svi"
    VLAN = "vlan"
    OSPF = "ospf"
    OSPF_AREA = "ospf-area"
    ACL = "acl"
    DHCP_POOL = "dhcp-pool"
    AAA = "aaa"
    LINE = "line"
    LOCAL_USER = "local-user"
    SERVICES = "services"
    SNMP = "snmp"
    BLOCK = "block"  # any other brace-delimited block


@dataclass
class Context:
    kind: ContextKind
    name: str = ""
    record: Any = None
    lines: List[str] = field(default_factory=list)
    indent: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)


class ContextStack:
    """
    Stack of open configuration blocks for a single parse call.

    The bottom entry is always the device-global context and is never popped.
    """

    def __init__(self):
        self._stack: List[Context] = [Context(ContextKind.GLOBAL)]

    def __len__(self) -> int:
        return len(self._stack) - 1

    @property
    def current(self) -> Context:
        return self._stack[-1]

    def push(self, kind: ContextKind, name: str = "", record: Any = None,
             indent: int = 0) -> Context:
        context = Context(kind, name, record, indent=indent)
        self._stack.append(context)
        return context

    def pop(self) -> Optional[Context]:
        """Pop the innermost block; the global context stays."""
        if len(self._stack) == 1:
            return None
        return self._stack.pop()

    def find(self, kind: ContextKind) -> Optional[Context]:
        """Innermost open context of the given kind."""
        for context in reversed(self._stack):
            if context.kind == kind:
                return context
        return None

    def path(self) -> List[str]:
        return [context.name for context in self._stack[1:]]

    def in_global(self) -> bool:
        return len(self._stack) == 1

    def clear(self) -> List[Context]:
        """Drop every open block, innermost first, and return them."""
        closed = list(reversed(self._stack[1:]))
        del self._stack[1:]
        return closed
