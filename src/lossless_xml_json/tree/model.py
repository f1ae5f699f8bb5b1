"""Intermediate document model for lossless XML/JSON conversion.

The JSON side of a conversion is a loosely typed mapping that uses reserved
keys (``@name``, ``$``, ``$attrOrder`` ...) to mark attributes, text and
bookkeeping. Inside the package the same information is held by explicit
types, so that reserved keys only exist at the codec boundary and can never
collide with legitimate element or attribute names.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

# Reserved keys of the JSON representation
ATTRIBUTE_PREFIX = "@"
METADATA_PREFIX = "$"
XMLNS_KEY = "@xmlns"
DEFAULT_PREFIX_KEY = "$default"
ATTR_ORDER_KEY = "$attrOrder"
TEXT_KEY = "$"
CDATA_KEY = "$cdata"
RAW_KEY = "$raw"
ORDER_MAP_KEY = "$orderMap"
PI_KEY = "$pi"
DOCTYPE_KEY = "$doctype"
COMMENT_KEY = "$comment"

DEFAULT_PREFIX = ""
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
PATH_SEPARATOR = "/"


def local_name(name: str) -> str:
    """Get the local part of a stored element name.

    Namespaced names are stored as ``uri:local``; the URI itself may contain
    colons, so the local part is whatever follows the last one.
    """
    return name.rsplit(":", 1)[-1]


def join_path(names: Sequence[str]) -> str:
    """Join ancestor element names into an order map path."""
    return PATH_SEPARATOR.join(names)


@dataclass(eq=False)
class Element:
    """Represents a single XML element of the intermediate tree."""

    attributes: Dict[str, str] = field(default_factory=dict)
    namespaces: Dict[str, str] = field(default_factory=dict)
    attr_order: Optional[List[str]] = None
    text: Optional[str] = None
    cdata: Optional[str] = None
    raw: Optional[str] = None
    children: Dict[str, List["Element"]] = field(default_factory=dict)

    @property
    def has_content(self) -> bool:
        """Check if element has text, CDATA, raw content or children."""
        return (
            self.text is not None
            or self.cdata is not None
            or self.raw is not None
            or any(self.children.values())
        )

    @property
    def child_names(self) -> List[str]:
        """Names of child elements in first-inserted order."""
        return [name for name, items in self.children.items() if items]

    def add_child(self, name: str, child: "Element") -> "Element":
        """Append a child element under ``name`` and return it."""
        if not name:
            raise ValueError("Element name cannot be empty")
        if not isinstance(child, Element):
            raise TypeError("Child must be an Element instance")
        self.children.setdefault(name, []).append(child)
        return child

    def get_children(self, name: str) -> List["Element"]:
        """Get all direct children stored under ``name``."""
        return self.children.get(name, [])

    def iter_children(self) -> Iterator[Tuple[str, "Element"]]:
        """Iterate over (name, child) pairs grouped by name."""
        for name, items in self.children.items():
            for child in items:
                yield name, child

    def count_elements(self) -> int:
        """Count this element and all of its descendants."""
        return 1 + sum(child.count_elements() for _, child in self.iter_children())


@dataclass(frozen=True)
class ProcessingInstruction:
    """A processing instruction found at document level."""

    target: str
    data: str = ""

    def __post_init__(self) -> None:
        """Validate processing instruction."""
        if not self.target:
            raise ValueError("Processing instruction target cannot be empty")

    def to_xml(self) -> str:
        """Render as markup."""
        if self.data:
            return f"<?{self.target} {self.data}?>"
        return f"<?{self.target}?>"


class OrderMap:
    """First-seen order of distinct child element names per ancestor path."""

    def __init__(self, entries: Optional[Dict[str, List[str]]] = None) -> None:
        self._entries: Dict[str, List[str]] = {}
        for path, names in (entries or {}).items():
            self._entries[path] = list(names)

    def record(self, ancestors: Sequence[str], name: str) -> None:
        """Record ``name`` as a child of the element at ``ancestors``.

        Only the first occurrence counts; repeated names keep their position.
        """
        names = self._entries.setdefault(join_path(ancestors), [])
        if name not in names:
            names.append(name)

    def get(self, path: str) -> Optional[List[str]]:
        """Get the recorded child order for ``path``, if any."""
        return self._entries.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderMap):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"OrderMap({self._entries!r})"

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to a plain mapping for JSON encoding."""
        return {path: list(names) for path, names in self._entries.items()}


@dataclass(eq=False)
class Document:
    """Complete intermediate document: root-level elements plus metadata.

    Comments, processing instructions and the DOCTYPE are only ever kept at
    document level.
    """

    elements: Dict[str, List[Element]] = field(default_factory=dict)
    comments: List[str] = field(default_factory=list)
    processing_instructions: List[ProcessingInstruction] = field(default_factory=list)
    doctype: Optional[str] = None
    order_map: OrderMap = field(default_factory=OrderMap)

    @property
    def declaration(self) -> Optional[ProcessingInstruction]:
        """The XML declaration, stored as the processing instruction ``xml``."""
        for instruction in self.processing_instructions:
            if instruction.target == "xml":
                return instruction
        return None

    @property
    def root_name(self) -> Optional[str]:
        """Name of the first root-level element."""
        for name, items in self.elements.items():
            if items:
                return name
        return None

    @property
    def root(self) -> Optional[Element]:
        """The first root-level element."""
        name = self.root_name
        return self.elements[name][0] if name is not None else None

    def iter_elements(self) -> Iterator[Tuple[str, Element]]:
        """Iterate over (name, element) pairs at document level."""
        for name, items in self.elements.items():
            for element in items:
                yield name, element

    @property
    def element_count(self) -> int:
        """Total number of elements in the document."""
        return sum(element.count_elements() for _, element in self.iter_elements())
