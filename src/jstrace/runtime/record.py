"""
Runtime record: per-file hit counts collected by instrumented code.

Instrumented JavaScript keeps its counts in a global object shaped as::

    { <file key>: { s: {<id>: n}, b: {<id>: [n, ...]}, f: {<id>: n},
                    code?: [<line>, ...] } }

This module is the Python side of that structure. ``FileTrace`` is one
entry; ``RuntimeRecord`` is the keyed collection. A ``RuntimeRecord`` is an
ordinary object owned by whoever needs one (a test, a report generator, a
process collecting results from many runs). There is no module-level
singleton.

Keys are stored exactly as given: no path normalization of any kind.
"""

import copy
from typing import Dict, Iterator, List, Mapping, Optional


class FileTrace(object):
    """Hit counts for one file key.

    Attributes:
        s: Statement id -> hit count.
        b: Branch id -> list of per-alternative hit counts.
        f: Function id -> invocation count.
        code: Original source lines, or None when not embedded.
    """

    __slots__ = "s", "b", "f", "code"

    def __init__(self, s=None, b=None, f=None, code=None):
        self.s: Dict[int, int] = dict(s or {})
        self.b: Dict[int, List[int]] = {k: list(v) for k, v in (b or {}).items()}
        self.f: Dict[int, int] = dict(f or {})
        self.code: Optional[List[str]] = list(code) if code is not None else None

    @classmethod
    def initial(cls, imap, code=None):
        """Zero-filled entry for an ``InstrumentationMap``."""
        return cls(
            {sid: 0 for sid in imap.statements},
            {bid: [0] * info.count for bid, info in imap.branches.items()},
            {fid: 0 for fid in imap.functions},
            code,
        )

    @classmethod
    def from_dict(cls, data: Mapping):
        """Build from the wire shape (string keys, as JSON produces them)."""
        return cls(
            {int(k): int(v) for k, v in data.get("s", {}).items()},
            {int(k): [int(n) for n in v] for k, v in data.get("b", {}).items()},
            {int(k): int(v) for k, v in data.get("f", {}).items()},
            data.get("code"),
        )

    def to_dict(self):
        result = {
            "s": {str(k): v for k, v in self.s.items()},
            "b": {str(k): list(v) for k, v in self.b.items()},
            "f": {str(k): v for k, v in self.f.items()},
        }
        if self.code is not None:
            result["code"] = list(self.code)
        return result

    def copy(self):
        return copy.deepcopy(self)

    def merge(self, other):
        """Add ``other``'s counts into this entry."""
        for k, v in other.s.items():
            self.s[k] = self.s.get(k, 0) + v
        for k, v in other.f.items():
            self.f[k] = self.f.get(k, 0) + v
        for k, counts in other.b.items():
            mine = self.b.setdefault(k, [])
            if len(mine) < len(counts):
                mine.extend([0] * (len(counts) - len(mine)))
            for i, n in enumerate(counts):
                mine[i] += n
        if self.code is None and other.code is not None:
            self.code = list(other.code)
        return self

    def summary(self):
        """Covered and total counters per category.

        Returns:
            ``{"statements": (covered, total), "branches": ..., "functions": ...}``
            where each branch alternative counts separately.
        """
        alternatives = [n for counts in self.b.values() for n in counts]
        return {
            "statements": (sum(1 for n in self.s.values() if n), len(self.s)),
            "branches": (sum(1 for n in alternatives if n), len(alternatives)),
            "functions": (sum(1 for n in self.f.values() if n), len(self.f)),
        }

    def __eq__(self, other):
        if not isinstance(other, FileTrace):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "FileTrace(s=%r, b=%r, f=%r)" % (self.s, self.b, self.f)


class RuntimeRecord(object):
    """File key -> ``FileTrace`` registry.

    Entries are created on first use with ``ensure`` and only grow
    afterwards (``merge``), until ``reset`` is called explicitly.
    """

    def __init__(self):
        self._files: Dict[str, FileTrace] = {}

    @classmethod
    def from_dict(cls, data: Optional[Mapping]):
        """Build from the global object read back from a JavaScript runtime."""
        record = cls()
        for key, entry in (data or {}).items():
            record._files[key] = FileTrace.from_dict(entry)
        return record

    def ensure(self, key, template: FileTrace):
        """Return the entry for ``key``, creating it from ``template`` if absent.

        Calling it again for a known key leaves the collected counts alone.
        """
        entry = self._files.get(key)
        if entry is None:
            entry = template.copy()
            self._files[key] = entry
        return entry

    def merge(self, other):
        """Add every entry of another record (or its dict form) into this one."""
        if not isinstance(other, RuntimeRecord):
            other = RuntimeRecord.from_dict(other)
        for key, entry in other.items():
            if key in self._files:
                self._files[key].merge(entry)
            else:
                self._files[key] = entry.copy()
        return self

    def reset(self, key=None):
        """Forget one key, or every key when ``key`` is None."""
        if key is None:
            self._files.clear()
        else:
            self._files.pop(key, None)

    def summary(self, key):
        return self._files[key].summary()

    def keys(self):
        return list(self._files)

    def items(self):
        return list(self._files.items())

    def to_dict(self):
        return {key: entry.to_dict() for key, entry in self._files.items()}

    def __getitem__(self, key) -> FileTrace:
        return self._files[key]

    def __contains__(self, key):
        return key in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self):
        return len(self._files)
