"""In-memory view of a structural (METS) document.

Physical pages hang below a single physical root, logical divisions form a
tree, references link a logical node to a physical node and are stored on
both endpoints, and content files point at the physical nodes that use them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass(eq=False)
class Reference:
    source: "LogicalNode"
    target: "PhysicalNode"
    ref_type: str = "logical_physical"


@dataclass(eq=False)
class LogicalNode:
    id: str
    type: str
    label: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["LogicalNode"] = field(default_factory=list)
    to_references: List[Reference] = field(default_factory=list)
    # non-div child elements (mptr, fptr) carried through unchanged
    extras: List[Any] = field(default_factory=list)

    def add_child(self, child: "LogicalNode") -> "LogicalNode":
        self.children.append(child)
        return child

    def remove_reference_to(self, target: "PhysicalNode") -> None:
        self.to_references = [ref for ref in self.to_references if ref.target is not target]

    def iter_nodes(self) -> Iterator["LogicalNode"]:
        yield self
        for child in self.children:
            yield from child.iter_nodes()


@dataclass(eq=False)
class PhysicalNode:
    id: str
    type: str
    image_name: Optional[str] = None
    metadata: Dict[str, List[str]] = field(default_factory=dict)
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["PhysicalNode"] = field(default_factory=list)
    from_references: List[Reference] = field(default_factory=list)
    extras: List[Any] = field(default_factory=list)

    def add_child(self, child: "PhysicalNode") -> "PhysicalNode":
        self.children.append(child)
        return child

    def remove_reference_from(self, source: LogicalNode) -> None:
        self.from_references = [ref for ref in self.from_references if ref.source is not source]

    def get_metadata(self, type_name: str) -> List[str]:
        return self.metadata.get(type_name, [])


@dataclass(eq=False)
class ContentFile:
    id: str
    location: str
    mimetype: Optional[str] = None
    use: str = "LOCAL"
    referenced: List[PhysicalNode] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)
    location_attributes: Dict[str, str] = field(default_factory=dict)
    extras: List[Any] = field(default_factory=list)


@dataclass
class StructuralDocument:
    physical_root: PhysicalNode
    logical_root: Optional[LogicalNode] = None
    files: List[ContentFile] = field(default_factory=list)
    # fileGrp USE -> its other attributes, in document order
    file_groups: Dict[str, Dict[str, str]] = field(default_factory=dict)
    source_tree: Any = None

    @property
    def pages(self) -> List[PhysicalNode]:
        return self.physical_root.children

    def link(self, source: LogicalNode, target: PhysicalNode, ref_type: str = "logical_physical") -> Reference:
        reference = Reference(source=source, target=target, ref_type=ref_type)
        source.to_references.append(reference)
        target.from_references.append(reference)
        return reference

    def iter_references(self) -> Iterator[Reference]:
        if self.logical_root is None:
            return
        for node in self.logical_root.iter_nodes():
            yield from node.to_references

    def physical_nodes(self) -> List[PhysicalNode]:
        return [self.physical_root, *self.physical_root.children]
