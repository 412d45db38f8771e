"""
Ordered text insertions over a parsed source buffer.

The rewriter never regenerates code from the AST. It records insertions at
byte offsets of the parsed text and applies them in one pass, so every
character of the original program is emitted unchanged and in order.

Several insertions often land on the same offset (a block wrapper, a branch
counter and a statement counter in front of the same statement; several
closing parentheses after the same expression). They are ordered by the
sequence in which the rewriter recorded them. Since the rewriter works
pre-order (outer constructs before inner ones):

- at one offset, closing insertions come before opening insertions;
- openings are emitted in recording order (outer first);
- closings are emitted in reverse recording order (inner first).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Insertion:
    offset: int
    text: str
    closing: bool
    seq: int

    def sortKey(self):
        if self.closing:
            return (self.offset, 0, -self.seq)
        return (self.offset, 1, self.seq)


class EditList(object):
    """Collects insertions and applies them to a UTF-8 buffer."""

    __slots__ = "insertions"

    def __init__(self):
        self.insertions = []

    def __len__(self):
        return len(self.insertions)

    def _add(self, offset, text, closing):
        self.insertions.append(Insertion(offset, text, closing, len(self.insertions)))

    def open(self, offset, text):
        """Insert ``text`` at ``offset`` as (part of) an opening construct."""
        self._add(offset, text, False)

    def close(self, offset, text):
        """Insert ``text`` at ``offset`` as (part of) a closing construct."""
        self._add(offset, text, True)

    def wrap(self, start, end, opening, closing):
        """Surround the byte range ``[start, end)``."""
        self.open(start, opening)
        self.close(end, closing)

    def apply(self, data):
        """Return ``data`` (bytes) with every insertion applied, as text."""
        out = []
        position = 0
        for insertion in sorted(self.insertions, key=Insertion.sortKey):
            if insertion.offset > position:
                out.append(data[position : insertion.offset].decode("utf-8"))
                position = insertion.offset
            out.append(insertion.text)
        out.append(data[position:].decode("utf-8"))
        return "".join(out)
