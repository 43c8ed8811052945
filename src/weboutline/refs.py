"""Attach PDF object references to outline nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import pymupdf

from .extract import HeadingNode


class RefAllocator(Protocol):
    def allocate(self) -> int: ...


class DocumentAllocator:
    """Hand out fresh xref numbers from one PyMuPDF document."""

    def __init__(self, doc: pymupdf.Document) -> None:
        self.doc = doc

    def allocate(self) -> int:
        return self.doc.get_new_xref()


@dataclass(frozen=True)
class OutlineRef:
    title: str
    destination: str
    y_position: float
    depth: int
    ref: int
    parent_ref: int
    children: tuple[OutlineRef, ...] = ()
    bold: bool = False
    italic: bool = False
    color: tuple[float, float, float] | None = None


def add_refs(
    outline: list[HeadingNode], allocator: RefAllocator, parent_ref: int
) -> list[OutlineRef]:
    """Give every node its own reference, parents before children."""
    result: list[OutlineRef] = []
    for node in outline:
        ref = allocator.allocate()
        result.append(OutlineRef(
            title=node.title,
            destination=node.destination,
            y_position=node.y_position,
            depth=node.depth,
            ref=ref,
            parent_ref=parent_ref,
            children=tuple(add_refs(node.children, allocator, ref)),
            bold=node.bold,
            italic=node.italic,
            color=node.color,
        ))
    return result


def count_nodes(outline) -> int:
    """Total number of nodes in a forest, all depths included."""
    return sum(1 + count_nodes(n.children) for n in outline)
