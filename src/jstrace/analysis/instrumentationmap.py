"""
The instrumentation map: what each counter id refers to.

An ``InstrumentationMap`` is pure data. It holds three read-only, ordered
mappings from dense 1-based integer ids to metadata:

- ``statements``: id -> ``Location`` of the statement
- ``branches``: id -> ``BranchInfo`` (kind, location, one location per
  alternative)
- ``functions``: id -> ``FunctionInfo`` (name, location of the whole
  function, location of its declaration head)

It is produced by ``jstrace.analysis.locations`` and consumed by the
rewriter (to size the zero-filled record entry written by the preamble) and
by report generators (``to_dict`` follows the istanbul ``statementMap`` /
``branchMap`` / ``fnMap`` layout).
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from jstrace.language.asttools.origin import Location


@dataclass(frozen=True)
class BranchInfo:
    """A branching construct.

    Attributes:
        kind: ``"if"``, ``"cond-expr"``, ``"binary-expr"`` or ``"switch"``.
        loc: Location of the whole construct.
        alternatives: One location per alternative, in slot order.
    """

    kind: str
    loc: Location
    alternatives: Tuple[Location, ...]

    @property
    def count(self):
        return len(self.alternatives)

    def to_dict(self):
        return {
            "type": self.kind,
            "loc": self.loc.to_dict(),
            "locations": [alt.to_dict() for alt in self.alternatives],
        }


@dataclass(frozen=True)
class FunctionInfo:
    """A function body.

    Attributes:
        name: Declared name, or ``(anonymous_<id>)``.
        loc: Location of the whole function.
        decl: Location of the part before the body (name and parameters).
    """

    name: str
    loc: Location
    decl: Location

    def to_dict(self):
        return {"name": self.name, "decl": self.decl.to_dict(), "loc": self.loc.to_dict()}


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


class InstrumentationMap(object):
    """Read-only description of every counter in one instrumented unit.

    Two maps built from byte-identical source compare equal.
    """

    __slots__ = "statements", "branches", "functions"

    def __init__(self, statements, branches, functions):
        self.statements: Mapping[int, Location] = _frozen(statements)
        self.branches: Mapping[int, BranchInfo] = _frozen(branches)
        self.functions: Mapping[int, FunctionInfo] = _frozen(functions)

        for name, table in (
            ("statement", self.statements),
            ("branch", self.branches),
            ("function", self.functions),
        ):
            if list(table) != list(range(1, len(table) + 1)):
                raise ValueError("%s ids must be dense and 1-based" % name)

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError("InstrumentationMap is read-only")
        object.__setattr__(self, name, value)

    def __eq__(self, other):
        if not isinstance(other, InstrumentationMap):
            return NotImplemented
        return (
            dict(self.statements) == dict(other.statements)
            and dict(self.branches) == dict(other.branches)
            and dict(self.functions) == dict(other.functions)
        )

    def __hash__(self):
        return hash(
            (
                tuple(self.statements.items()),
                tuple(self.branches.items()),
                tuple(self.functions.items()),
            )
        )

    def __repr__(self):
        return "InstrumentationMap(statements=%d, branches=%d, functions=%d)" % (
            len(self.statements),
            len(self.branches),
            len(self.functions),
        )

    def to_dict(self):
        """JSON-ready ``statementMap``/``branchMap``/``fnMap`` dictionary."""
        return {
            "statementMap": {str(k): v.to_dict() for k, v in self.statements.items()},
            "branchMap": {str(k): v.to_dict() for k, v in self.branches.items()},
            "fnMap": {str(k): v.to_dict() for k, v in self.functions.items()},
        }
