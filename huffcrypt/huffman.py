"""
Huffman tree construction for byte streams.

Symbols are ints: 0-255 for byte values plus PSEUDO_EOF, a reserved end
marker whose code terminates an encoded body.
"""

from contextlib import contextmanager
from functools import partial
from heapq import heappush, heappop
from itertools import count
from typing import BinaryIO, Dict, Iterator, Optional

from bitarray import bitarray
from loguru import logger

from .bitstream import DEFAULT_CHUNK_SIZE

PSEUDO_EOF = 256


class HuffmanNode:
    """A leaf carrying a symbol, or an internal node with exactly two children."""

    __slots__ = ("symbol", "weight", "zero", "one")

    def __init__(self, symbol: Optional[int], weight: int,
                 zero: "HuffmanNode" = None, one: "HuffmanNode" = None) -> None:
        self.symbol = symbol
        self.weight = weight
        self.zero = zero
        self.one = one

    @property
    def is_leaf(self) -> bool:
        return self.zero is None and self.one is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol}, weight={self.weight})"
        return f"HuffmanNode(weight={self.weight})"


def get_frequency_table(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Dict[int, int]:
    """
    Counts how often every byte value occurs in the stream.

    Parameters:
    stream (BinaryIO): Readable binary stream, consumed to exhaustion.
    chunk_size (int): Number of bytes read per call.

    Returns:
    Dict[int, int]: Byte value to count, plus PSEUDO_EOF mapped to 1.
    """
    counts = [0] * 256
    for chunk in iter(partial(stream.read, chunk_size), b""):
        for byte in chunk:
            counts[byte] += 1

    frequencies = {byte: n for byte, n in enumerate(counts) if n}
    frequencies[PSEUDO_EOF] = 1
    return frequencies


def build_encoding_tree(frequencies: Dict[int, int]) -> HuffmanNode:
    """
    Builds a Huffman tree from a frequency table.

    Leaves are queued in ascending symbol order and nodes of equal weight are
    dequeued in the order they were queued, so equal tables always give equal
    trees. The first node dequeued in each round becomes the zero-child.

    Parameters:
    frequencies (Dict[int, int]): Non-empty symbol to weight mapping.

    Returns:
    HuffmanNode: The root. Release it with free_tree when done.
    """
    if not frequencies:
        raise ValueError("Cannot build an encoding tree from an empty frequency table.")

    order = count()
    queue = []
    for symbol in sorted(frequencies):
        weight = frequencies[symbol]
        heappush(queue, (weight, next(order), HuffmanNode(symbol, weight)))

    while len(queue) > 1:
        _, _, zero = heappop(queue)
        _, _, one = heappop(queue)
        parent = HuffmanNode(None, zero.weight + one.weight, zero, one)
        heappush(queue, (parent.weight, next(order), parent))

    return heappop(queue)[2]


def free_tree(root: Optional[HuffmanNode]) -> None:
    """Detaches every child slot below root, leaves first."""
    if root is None:
        return
    free_tree(root.zero)
    free_tree(root.one)
    root.zero = root.one = None


@contextmanager
def encoding_tree(frequencies: Dict[int, int]) -> Iterator[HuffmanNode]:
    root = build_encoding_tree(frequencies)
    logger.debug("Built encoding tree for {} symbols, total weight {}", len(frequencies), root.weight)
    try:
        yield root
    finally:
        free_tree(root)


def generate_codes(root: HuffmanNode) -> Dict[int, bitarray]:
    """
    Derives the code of every leaf from its root-to-leaf path.

    Parameters:
    root (HuffmanNode): Root of the encoding tree.

    Returns:
    Dict[int, bitarray]: Symbol to code. A tree that is a single leaf gives
    that symbol an empty code.
    """
    codes = {}
    stack = [(root, bitarray(endian="big"))]
    while stack:
        node, path = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = path
            continue
        stack.append((node.one, path + bitarray("1", endian="big")))
        stack.append((node.zero, path + bitarray("0", endian="big")))
    return codes
