"""Namespace context propagation for the tree writer."""

from typing import Dict, Iterator, Mapping, Optional, Tuple

from lossless_xml_json.tree.model import DEFAULT_PREFIX


class NamespaceContext:
    """Inherited prefix-to-URI mapping, extended by copy at each declaration.

    A context is never modified after construction. ``extend`` returns a new
    context for the subtree that made the declarations, so sibling and parent
    subtrees keep seeing the mapping they inherited.
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Optional[Mapping[str, str]] = None) -> None:
        self._mapping: Dict[str, str] = dict(mapping or {})

    def extend(self, declarations: Mapping[str, str]) -> "NamespaceContext":
        """Return a copy of this context with ``declarations`` merged in."""
        if not declarations:
            return self
        merged = dict(self._mapping)
        merged.update(declarations)
        return NamespaceContext(merged)

    def resolve(self, name: str, is_attribute: bool = False) -> str:
        """Rewrite a stored ``uri:local`` name to ``prefix:local``.

        The first prefix, in declaration order, whose URI matches wins. The
        default namespace yields the bare local name for elements; attributes
        are never in the default namespace and need an explicit prefix. Names
        with no matching URI are returned unchanged.
        """
        for prefix, uri in self._mapping.items():
            if not uri or not name.startswith(uri + ":"):
                continue
            local = name[len(uri) + 1:]
            if not local:
                continue
            if prefix == DEFAULT_PREFIX:
                if is_attribute:
                    continue
                return local
            return f"{prefix}:{local}"
        return name

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._mapping.items())

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._mapping

    def get(self, prefix: str) -> Optional[str]:
        """Get the URI bound to ``prefix``."""
        return self._mapping.get(prefix)
