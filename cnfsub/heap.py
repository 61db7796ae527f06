"""Binary min-heap of non-negative integers with position tracking for key updates."""

from __future__ import annotations

from typing import Callable, Iterable


def _left(i: int) -> int:
    return 2 * i + 1


def _right(i: int) -> int:
    return 2 * (i + 1)


def _parent(i: int) -> int:
    return (i - 1) >> 1


class Heap:
    """A min-heap ordered by ``less_than`` whose elements can be moved after a key change."""

    def __init__(self, less_than: Callable[[int, int], bool]) -> None:
        self._lt = less_than
        self._heap: list[int] = []
        self._indices: list[int] = []

    def _percolate_up(self, i: int) -> None:
        heap, indices = self._heap, self._indices
        x = heap[i]
        p = _parent(i)
        while i != 0 and self._lt(x, heap[p]):
            heap[i] = heap[p]
            indices[heap[p]] = i
            i = p
            p = _parent(p)
        heap[i] = x
        indices[x] = i

    def _percolate_down(self, i: int) -> None:
        heap, indices = self._heap, self._indices
        x = heap[i]
        size = len(heap)
        while _left(i) < size:
            left, right = _left(i), _right(i)
            child = right if right < size and self._lt(heap[right], heap[left]) else left
            if not self._lt(heap[child], x):
                break
            heap[i] = heap[child]
            indices[heap[i]] = i
            i = child
        heap[i] = x
        indices[x] = i

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, n: int) -> bool:
        return 0 <= n < len(self._indices) and self._indices[n] >= 0

    def __getitem__(self, index: int) -> int:
        if not 0 <= index < len(self._heap):
            raise IndexError("heap index out of range")
        return self._heap[index]

    def _position(self, n: int) -> int:
        if n not in self:
            raise KeyError(n)
        return self._indices[n]

    def decrease(self, n: int) -> None:
        """Restore order after the key of ``n`` went down."""
        self._percolate_up(self._position(n))

    def increase(self, n: int) -> None:
        """Restore order after the key of ``n`` went up."""
        self._percolate_down(self._position(n))

    def update(self, n: int) -> None:
        """Insert ``n``, or move it to its place if it is already present."""
        if n not in self:
            self.insert(n)
        else:
            self._percolate_up(self._indices[n])
            self._percolate_down(self._indices[n])

    def insert(self, n: int) -> None:
        if n < 0:
            raise ValueError("heap elements must be non-negative")
        if n in self:
            raise ValueError(f"{n} is already in the heap")
        if len(self._indices) <= n:
            self._indices.extend([-1] * (n + 1 - len(self._indices)))
        self._indices[n] = len(self._heap)
        self._heap.append(n)
        self._percolate_up(self._indices[n])

    def remove_min(self) -> int:
        if not self._heap:
            raise IndexError("remove_min from an empty heap")
        heap, indices = self._heap, self._indices
        x = heap[0]
        heap[0] = heap[-1]
        indices[heap[0]] = 0
        indices[x] = -1
        heap.pop()
        if len(heap) > 1:
            self._percolate_down(0)
        return x

    def build(self, items: Iterable[int]) -> None:
        """Replace the content with ``items`` and heapify."""
        items = list(items)
        for n in self._heap:
            self._indices[n] = -1
        self._heap = []
        for position, n in enumerate(items):
            if n < 0:
                raise ValueError("heap elements must be non-negative")
            if len(self._indices) <= n:
                self._indices.extend([-1] * (n + 1 - len(self._indices)))
            self._indices[n] = position
            self._heap.append(n)
        for i in range(len(self._heap) // 2 - 1, -1, -1):
            self._percolate_down(i)

    def clear(self) -> None:
        for n in self._heap:
            self._indices[n] = -1
        self._heap = []