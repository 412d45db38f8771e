"""
Instrumenter configuration.

Options can be given either as an ``InstrumenterOptions`` instance or as a
plain mapping. Mappings may use the camelCase names JavaScript tooling uses
(``traceVariable``, ``embedSource``, ``noAutoWrap``...) or the snake_case
attribute names; unknown keys are rejected so that typos do not silently
fall back to defaults.
"""

import re
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from jstrace.application.errors import InputError

DEFAULT_TRACE_VARIABLE = "__trace__"

# The trace variable is spliced into generated code.
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

_ALIASES = {
    "traceVariable": "trace_variable",
    "coverageVariable": "trace_variable",
    "embedSource": "embed_source",
    "noAutoWrap": "no_auto_wrap",
    "noCompact": "no_compact",
    "walkDebug": "walk_debug",
}


@dataclass(frozen=True)
class InstrumenterOptions:
    """Options recognized by the instrumenter.

    Attributes:
        trace_variable: Global slot holding the runtime record.
        embed_source: Store the original source lines in the record entry.
        no_auto_wrap: Reject a ``return`` outside any function.
        no_compact: Emit the preamble one statement per line.
        debug: Print annotated source, generated code and phase timings.
        walk_debug: Log every node visited while indexing.
    """

    trace_variable: str = DEFAULT_TRACE_VARIABLE
    embed_source: bool = False
    no_auto_wrap: bool = False
    no_compact: bool = False
    debug: bool = False
    walk_debug: bool = False

    def __post_init__(self):
        if not isinstance(self.trace_variable, str) or not _IDENTIFIER.match(
            self.trace_variable
        ):
            raise InputError(
                "Trace variable must be an identifier, got %r" % (self.trace_variable,)
            )

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]):
        """Build options from a mapping of camelCase or snake_case keys.

        ``None`` values are ignored, so callers can forward optional settings
        without filtering them first.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InputError("Unknown instrumenter option %r" % (key,))
            if value is None:
                continue
            values[name] = value if name == "trace_variable" else bool(value)
        return cls(**values)
