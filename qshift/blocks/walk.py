"""Depth-first traversals of block trees."""

from __future__ import annotations

from typing import Callable, Iterator

from .abstract import AbstractBlock


def iter_preorder(block: AbstractBlock) -> Iterator[AbstractBlock]:
    """Yield ``block`` and then every descendant, parents before children."""
    yield block
    for child in block.subblocks():
        yield from iter_preorder(child)


def iter_postorder(block: AbstractBlock) -> Iterator[AbstractBlock]:
    """Yield every descendant and then ``block``, children before parents."""
    for child in block.subblocks():
        yield from iter_postorder(child)
    yield block


def prewalk(fn: Callable[[AbstractBlock], object], block: AbstractBlock) -> None:
    """Call ``fn`` on every node in pre-order."""
    for node in iter_preorder(block):
        fn(node)


def postwalk(fn: Callable[[AbstractBlock], object], block: AbstractBlock) -> None:
    """Call ``fn`` on every node in post-order."""
    for node in iter_postorder(block):
        fn(node)
