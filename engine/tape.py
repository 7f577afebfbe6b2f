from engine.errors import InvalidHeadIndex, InvalidSymbol


class Tape:
    """Visited window of an unbounded tape.

    Only cells the head has reached are stored. Moving past either end grows
    the tape by exactly one empty cell, so the tape is never empty and the head
    is always a valid index.

    Cells grown to the left are kept in a second list in reverse order, so
    growing at either end is an append and indexing stays constant time.
    """

    def __init__(self, empty_symbol, cells=None, head=0, alphabet=None):
        cells = list(cells) if cells else []
        if cells and (head < 0 or head >= len(cells)):
            raise InvalidHeadIndex(f"Invalid initial head index {head}")

        self.empty_symbol = empty_symbol
        self.alphabet = None if alphabet is None else set(alphabet)
        self._left = []
        self._right = cells or [empty_symbol]
        self._head = head if cells else 0

    @property
    def head(self):
        return self._head

    def _locate(self, index):
        offset = len(self._left)
        if index < offset:
            return self._left, offset - 1 - index
        return self._right, index - offset

    def read(self):
        cells, i = self._locate(self._head)
        return cells[i]

    def write(self, symbol):
        if self.alphabet is not None and symbol not in self.alphabet:
            raise InvalidSymbol(
                f"Invalid Printed symbol '{symbol}'. Choose from: {', '.join(sorted(self.alphabet))}")
        cells, i = self._locate(self._head)
        cells[i] = symbol

    def move_left(self):
        self._head -= 1
        if self._head < 0:
            self._head = 0
            self._left.append(self.empty_symbol)

    def move_right(self):
        self._head += 1
        if self._head == len(self):
            self._right.append(self.empty_symbol)

    def snapshot(self):
        return tuple(reversed(self._left)) + tuple(self._right)

    def __len__(self):
        return len(self._left) + len(self._right)

    def __repr__(self):
        return f"Tape({''.join(str(c) for c in self.snapshot())!r}, head={self._head})"
