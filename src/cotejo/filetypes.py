"""Filetype definitions and the filetype registry.

A filetype is the schema a document is validated against: which
front-matter fields it has, which block kinds may appear at the top level,
which level-2 sections it needs, and whether task-list checkboxes and
reference resolution are enabled.

Thread Safety:
Filetype and FiletypeRegistry are immutable after creation. Safe to share.
Use FiletypeRegistryBuilder for mutable construction.

Example:
    >>> builder = FiletypeRegistryBuilder()
    >>> builder.register(Filetype("recipe", fields=(FieldSpec("title", FieldType.STRING, True),)))
    >>> registry = builder.build()
    >>> registry.get("recipe").name
    'recipe'
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from cotejo.errors import RegistryError
from cotejo.nodes import FieldValue, NodeKind

# Front-matter key that selects the filetype; never part of a schema
FILETYPE_KEY = "filetype"


class FieldType(Enum):
    """Value types a front-matter field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    DATE = "date"

    def accepts(self, value: FieldValue) -> bool:
        """Check whether a decoded value has this type."""
        match self:
            case FieldType.STRING:
                return isinstance(value, str)
            case FieldType.NUMBER:
                return isinstance(value, int | float) and not isinstance(value, bool)
            case FieldType.BOOLEAN:
                return isinstance(value, bool)
            case FieldType.STRING_LIST:
                return isinstance(value, tuple) and all(isinstance(v, str) for v in value)
            case FieldType.DATE:
                return isinstance(value, date) and not isinstance(value, datetime)
        return False


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One front-matter field of a filetype schema."""

    name: str
    type: FieldType
    required: bool = False


# Block kinds that can appear at the top level of a document
BLOCK_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.FRONT_MATTER,
        NodeKind.HEADING,
        NodeKind.PARAGRAPH,
        NodeKind.LIST,
        NodeKind.BLOCK_QUOTE,
        NodeKind.CODE_BLOCK,
        NodeKind.TABLE,
        NodeKind.THEMATIC_BREAK,
    }
)


@dataclass(frozen=True, slots=True)
class Filetype:
    """Immutable per-filetype configuration record.

    Attributes:
        name: Identifier used in front matter and as a caller hint
        fields: Ordered front-matter schema
        allowed_nodes: Block kinds permitted at the top level
        resolve_references: Check link targets against the reference index
        task_lists: Recognize ``[ ]`` / ``[x]`` at the start of list items
        required_sections: Level-2 heading titles that must be present
        allowed_sections: Level-2 heading titles permitted (None = any)
        renamed_sections: Old level-2 titles mapped to their current name;
            an old title counts as the new one and draws a warning
        completion_field: Boolean field that, when true, requires every
            task-list item under the actions section to be checked
        actions_section: Level-2 title holding the task list

    """

    name: str
    fields: tuple[FieldSpec, ...] = ()
    allowed_nodes: frozenset[NodeKind] = BLOCK_KINDS
    resolve_references: bool = True
    task_lists: bool = False
    required_sections: tuple[str, ...] = ()
    allowed_sections: frozenset[str] | None = None
    renamed_sections: tuple[tuple[str, str], ...] = ()
    completion_field: str | None = None
    actions_section: str = "Actions"

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a schema field by name."""
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(spec.name for spec in self.fields)

    @property
    def required_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.required)


class FiletypeRegistry:
    """Immutable registry of filetypes.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_filetypes", "_by_name")

    def __init__(
        self,
        filetypes: tuple[Filetype, ...],
        by_name: dict[str, Filetype],
    ) -> None:
        """Initialize registry with pre-built mappings.

        Use FiletypeRegistryBuilder to create instances.
        """
        self._filetypes = filetypes
        self._by_name = by_name

    def get(self, name: str) -> Filetype | None:
        """Get filetype by name.

        Args:
            name: Filetype name (e.g., "note", "project")

        Returns:
            Filetype if registered, None otherwise
        """
        return self._by_name.get(name)

    def has(self, name: str) -> bool:
        """Check if filetype name is registered."""
        return name in self._by_name

    @property
    def names(self) -> frozenset[str]:
        """Get all registered filetype names."""
        return frozenset(self._by_name.keys())

    @property
    def filetypes(self) -> tuple[Filetype, ...]:
        """Get all registered filetypes in registration order."""
        return self._filetypes

    def __contains__(self, name: str) -> bool:
        """Support 'name in registry' syntax."""
        return self.has(name)

    def __len__(self) -> int:
        return len(self._by_name)


class FiletypeRegistryBuilder:
    """Mutable builder for FiletypeRegistry.

    Use this to register filetypes, then call build() to create
    an immutable registry.

    Example:
        >>> builder = FiletypeRegistryBuilder()
        >>> builder.register(Filetype("journal"))
        >>> registry = builder.build()
    """

    __slots__ = ("_filetypes", "_by_name")

    def __init__(self) -> None:
        self._filetypes: list[Filetype] = []
        self._by_name: dict[str, Filetype] = {}

    def register(self, filetype: Filetype) -> FiletypeRegistryBuilder:
        """Register a filetype.

        Args:
            filetype: Filetype to register

        Returns:
            Self for chaining

        Raises:
            RegistryError: If the name is taken or the schema is invalid
        """
        if not filetype.name:
            raise RegistryError(filetype.name, "name must not be empty")
        if filetype.name in self._by_name:
            raise RegistryError(filetype.name, "already registered")

        seen: set[str] = set()
        for spec in filetype.fields:
            if spec.name == FILETYPE_KEY:
                msg = f"field name '{FILETYPE_KEY}' is reserved"
                raise RegistryError(filetype.name, msg)
            if spec.name in seen:
                raise RegistryError(filetype.name, f"duplicate field '{spec.name}'")
            seen.add(spec.name)

        if filetype.allowed_sections is not None:
            missing = [s for s in filetype.required_sections if s not in filetype.allowed_sections]
            if missing:
                msg = f"required sections not allowed: {', '.join(missing)}"
                raise RegistryError(filetype.name, msg)

        if filetype.completion_field is not None:
            spec = filetype.get_field(filetype.completion_field)
            if spec is None or spec.type is not FieldType.BOOLEAN:
                msg = f"completion field '{filetype.completion_field}' must be a boolean field"
                raise RegistryError(filetype.name, msg)

        self._by_name[filetype.name] = filetype
        self._filetypes.append(filetype)
        return self

    def register_all(self, filetypes: list[Filetype]) -> FiletypeRegistryBuilder:
        """Register multiple filetypes.

        Returns:
            Self for chaining
        """
        for filetype in filetypes:
            self.register(filetype)
        return self

    def build(self) -> FiletypeRegistry:
        """Build immutable registry from registered filetypes."""
        return FiletypeRegistry(
            filetypes=tuple(self._filetypes),
            by_name=dict(self._by_name),
        )

    def __len__(self) -> int:
        return len(self._filetypes)


# =============================================================================
# Built-in filetypes
# =============================================================================

NOTE = Filetype(
    name="note",
    fields=(
        FieldSpec("title", FieldType.STRING),
        FieldSpec("tags", FieldType.STRING_LIST),
        FieldSpec("date", FieldType.DATE),
    ),
)

PROJECT = Filetype(
    name="project",
    fields=(
        FieldSpec("title", FieldType.STRING, required=True),
        FieldSpec("status", FieldType.STRING),
        FieldSpec("tags", FieldType.STRING_LIST),
        FieldSpec("created", FieldType.DATE),
        FieldSpec("priority", FieldType.NUMBER),
        FieldSpec("complete", FieldType.BOOLEAN),
    ),
    task_lists=True,
    required_sections=("Goal", "Actions"),
    allowed_sections=frozenset({"Goal", "Info", "Actions"}),
    renamed_sections=(("Action Items", "Actions"),),
    completion_field="complete",
)

CONTEXT = Filetype(
    name="context",
    fields=(
        FieldSpec("title", FieldType.STRING, required=True),
        FieldSpec("tags", FieldType.STRING_LIST),
    ),
    allowed_nodes=frozenset(
        {
            NodeKind.FRONT_MATTER,
            NodeKind.HEADING,
            NodeKind.PARAGRAPH,
            NodeKind.LIST,
            NodeKind.THEMATIC_BREAK,
        }
    ),
    task_lists=True,
)

BUILTIN_FILETYPES: tuple[Filetype, ...] = (NOTE, PROJECT, CONTEXT)


def _build_default_registry() -> FiletypeRegistry:
    """Build the default registry (internal, not cached)."""
    return FiletypeRegistryBuilder().register_all(list(BUILTIN_FILETYPES)).build()


# Cached singleton; FiletypeRegistry is immutable
_DEFAULT_REGISTRY: FiletypeRegistry | None = None


def create_default_registry() -> FiletypeRegistry:
    """Get the default filetype registry (cached singleton).

    Returns:
        Registry with the built-in filetypes:
        - note: free-form notes, every block kind allowed
        - project: Goal / Info / Actions sections with task lists
        - context: a titled list of actions

    Thread Safety:
        Returns a cached immutable registry. Safe for concurrent access.
    """
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = _build_default_registry()
    return _DEFAULT_REGISTRY


def create_registry_with_defaults() -> FiletypeRegistryBuilder:
    """Create a builder pre-populated with the built-in filetypes.

        >>> builder = create_registry_with_defaults()
        >>> builder.register(Filetype("journal"))
        >>> registry = builder.build()
    """
    return FiletypeRegistryBuilder().register_all(list(BUILTIN_FILETYPES))
