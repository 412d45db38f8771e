from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

import pytest

from jstrace import Instrumenter, RuntimeRecord


@dataclass(frozen=True)
class RunResult:
    output: Any
    record: RuntimeRecord
    generated: str

    def only(self):
        """The single file entry of the record."""
        keys = self.record.keys()
        assert len(keys) == 1, keys
        return self.record[keys[0]]

    def statements(self):
        return self.only().s

    def branches(self):
        return self.only().b

    def functions(self):
        return self.only().f


class Verifier:
    """
    Small harness that:
    - instruments a list of source lines with the given options
    - runs the result as the body of ``function (args) { ... return output; }``
      in a fresh V8 context
    - reads back ``output`` and the runtime record
    """

    def __init__(self, racer_class, lines: Sequence[str], filename=None, options=None):
        self._racer_class = racer_class
        self.code = "\n".join(lines)
        self.filename = filename
        self.instrumenter = Instrumenter(options)
        self.generated = self.instrumenter.instrument_sync(self.code, filename)

    @property
    def traceVariable(self):
        return self.instrumenter.options.trace_variable

    def run(self, args: Sequence[Any]) -> RunResult:
        ctx = self._racer_class()
        script = (
            "var __run__ = (function (args) { var output;\n"
            + self.generated
            + "\nreturn output;\n});\n"
            + "JSON.stringify({output: __run__(%s), trace: %s});"
            % (json.dumps(list(args)), self.traceVariable)
        )
        data = json.loads(ctx.eval(script))
        return RunResult(
            output=data.get("output"),
            record=RuntimeRecord.from_dict(data.get("trace")),
            generated=self.generated,
        )

    def verify(
        self,
        args: Sequence[Any],
        output: Any,
        statements: Mapping[int, int],
        branches: Optional[Mapping[int, Sequence[int]]] = None,
        functions: Optional[Mapping[int, int]] = None,
    ) -> RunResult:
        result = self.run(args)
        assert result.output == output
        assert result.statements() == dict(statements)
        assert result.branches() == {k: list(v) for k, v in (branches or {}).items()}
        assert result.functions() == dict(functions or {})
        return result


@pytest.fixture()
def mini_racer():
    module = pytest.importorskip("py_mini_racer")
    return module.MiniRacer


@pytest.fixture()
def verifier(mini_racer):
    def _verifier(lines, filename="test.js", options=None):
        return Verifier(mini_racer, lines, filename, options)

    return _verifier


@pytest.fixture()
def run_js(mini_racer):
    """Evaluate a script in a fresh V8 context and return the result."""

    def _run(script):
        return mini_racer().eval(script)

    return _run
