"""
Conditional form sections.

A section opens when its controller field holds one of the listed values.
The active field set is a pure function of the current values, recomputed on
every change; nothing stores show/hide flags.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionalSection:
    """A group of fields gated by another field's value."""

    name: str
    controller: str
    equals: FrozenSet[str]
    fields: Tuple[str, ...]
    parent: Optional[str] = None
    label: str = ""

    def predicate(self, values: Mapping[str, Any]) -> bool:
        """True when the controller field currently selects this section."""
        value = values.get(self.controller)
        if value is None:
            return False
        return str(value) in self.equals


def open_sections(sections: Iterable[ConditionalSection], values: Mapping[str, Any],
                  field_names: Iterable[str]) -> List[str]:
    """
    Return the names of sections that are currently open.

    A section is open when its predicate holds, its parent section (if any) is
    open, and its controller field is itself active. Nested sections therefore
    close as soon as an enclosing section closes.

    Args:
        sections: Declared sections, in schema order
        values: Current field values
        field_names: All field names declared by the schema
    """
    sections = list(sections)
    gated: Set[str] = set()
    for section in sections:
        gated.update(section.fields)
    ungated = set(field_names) - gated

    opened: Dict[str, bool] = {}
    # Iterate to a fixed point so declaration order does not matter.
    for _ in range(len(sections) + 1):
        active = set(ungated)
        for section in sections:
            if opened.get(section.name):
                active.update(section.fields)

        changed = False
        for section in sections:
            is_open = (
                section.predicate(values)
                and section.controller in active
                and (section.parent is None or opened.get(section.parent, False))
            )
            if opened.get(section.name) != is_open:
                opened[section.name] = is_open
                changed = True
        if not changed:
            break

    return [section.name for section in sections if opened.get(section.name)]


def active_fields(sections: Iterable[ConditionalSection], values: Mapping[str, Any],
                  field_names: Iterable[str]) -> Set[str]:
    """
    Compute the set of active field names for the given values.

    Fields outside every section are always active; gated fields are active
    only while at least one section containing them is open.
    """
    sections = list(sections)
    field_names = list(field_names)
    gated: Set[str] = set()
    for section in sections:
        gated.update(section.fields)

    active = set(field_names) - gated
    opened = set(open_sections(sections, values, field_names))
    for section in sections:
        if section.name in opened:
            active.update(section.fields)

    return active
