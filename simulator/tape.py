class TapeMemory:
    """
    Unbounded tape stored sparsely: only cells holding a non-blank symbol
    live in the dict. Writing the blank symbol removes the cell.
    """

    def __init__(self, blank, on_read=None, on_write=None):
        self.blank = blank
        self.on_read = on_read
        self.on_write = on_write
        self._cells = {}

    def read(self, address):
        value = self._cells.get(address, self.blank)
        if self.on_read is not None:
            self.on_read(address, value)
        return value

    def write(self, address, symbol):
        old = self._cells.get(address, self.blank)
        if symbol == self.blank:
            self._cells.pop(address, None)
        else:
            self._cells[address] = symbol
        if self.on_write is not None:
            self.on_write(address, old, symbol)

    __getitem__ = read
    __setitem__ = write

    def used_size(self):
        return len(self._cells)

    @property
    def cells(self):
        """Copy of the stored (non-blank) cells."""
        return dict(self._cells)

    def bounds(self):
        """(lowest, highest) non-blank address, or None for an empty tape."""
        if not self._cells:
            return None
        return min(self._cells), max(self._cells)

    def to_dense_array(self):
        """Symbols from the lowest to the highest non-blank cell; () when the tape is empty."""
        span = self.bounds()
        if span is None:
            return ()
        low, high = span
        return tuple(self.read(address) for address in range(low, high + 1))

    def window(self, center, radius):
        return [self.read(address) for address in range(center - radius, center + radius + 1)]

    def load(self, symbols, start=0):
        for offset, symbol in enumerate(symbols):
            self.write(start + offset, symbol)

    def clear(self):
        self._cells.clear()

    def __repr__(self):
        return f"TapeMemory(blank={self.blank!r}, used={len(self._cells)})"
