"""
Read-only document tree for parsed workflow and manifest files.

Parsed YAML/JSON is converted into a small tagged tree:
- Mapping: string keys to child nodes
- Sequence: ordered child nodes
- Scalar: strings, numbers, booleans and null
- ABSENT: the single "nothing here" node

Every accessor fails closed. Looking up a missing key, an out-of-range
index or a key on the wrong kind of node returns ABSENT (or None from the
typed getters) instead of raising, so presence checks stay at the call site.

Paths use dots for keys, [n] for indices and quoted brackets for keys that
contain dots or colons:

    jobs.build.steps[1].with['node-version']
    scripts['build:frontend']
"""

import re
from abc import ABC, abstractmethod
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterator, Optional, Union

from pipecheck.commands.errors import ParseError, ValidationError

_KEY = re.compile(r"[^.\[\]'\"]+")
_BRACKET = re.compile(r"""\[(?:(?P<index>\d+)|(?P<quote>['"])(?P<quoted>.*?)(?P=quote))\]""")

PathSegment = Union[str, int]


@lru_cache(maxsize=256)
def parse_path(path: str) -> tuple[PathSegment, ...]:
    """
    Split a path expression into key and index segments.

    Args:
        path: Path such as "jobs.build.steps[0].name"

    Returns:
        Tuple of segments; strings are mapping keys, ints are indices.

    Raises:
        ValidationError: If the path is empty or malformed
    """
    if not isinstance(path, str) or not path:
        raise ValidationError("Path must be a non-empty string", field="path", value=path)

    segments: list[PathSegment] = []
    pos = 0
    while pos < len(path):
        if not segments:
            match = _KEY.match(path, pos) or _BRACKET.match(path, pos)
        elif path[pos] == ".":
            pos += 1
            match = _KEY.match(path, pos)
        else:
            match = _BRACKET.match(path, pos)

        if match is None:
            raise ValidationError(
                f"Malformed path '{path}' at position {pos}", field="path", value=path
            )

        if match.re is _KEY:
            segments.append(match.group(0))
        elif match.group("index") is not None:
            segments.append(int(match.group("index")))
        else:
            segments.append(match.group("quoted"))
        pos = match.end()

    return tuple(segments)


class Node(ABC):
    """Base class for all tree nodes."""

    kind = "node"

    def get(self, path: str) -> "Node":
        """Resolve a path relative to this node, returning ABSENT when missing."""
        current: Node = self
        for segment in parse_path(path):
            current = current._child(segment)
            if current is ABSENT:
                break
        return current

    def _child(self, segment: PathSegment) -> "Node":
        return ABSENT

    def get_string(self, path: str) -> Optional[str]:
        node = self.get(path)
        if isinstance(node, Scalar) and isinstance(node.value, str):
            return node.value
        return None

    def get_sequence(self, path: str) -> Optional["Sequence"]:
        node = self.get(path)
        return node if isinstance(node, Sequence) else None

    def get_mapping(self, path: str) -> Optional["Mapping"]:
        node = self.get(path)
        return node if isinstance(node, Mapping) else None

    def exists(self, path: str) -> bool:
        """True when the path resolves to a non-null node."""
        node = self.get(path)
        return node is not ABSENT and not (isinstance(node, Scalar) and node.value is None)

    @abstractmethod
    def to_python(self) -> Any:
        """Return the node as plain dicts, lists and scalars."""


class Mapping(Node):
    kind = "mapping"

    def __init__(self, entries: dict[str, Node]):
        self._entries = MappingProxyType(dict(entries))

    def _child(self, segment: PathSegment) -> Node:
        if isinstance(segment, str):
            return self._entries.get(segment, ABSENT)
        return ABSENT

    def child(self, key: str) -> Node:
        return self._entries.get(key, ABSENT)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self):
        return self._entries.items()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Mapping) and dict(self._entries) == dict(other._entries)

    def __repr__(self) -> str:
        return f"Mapping({dict(self._entries)!r})"

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self._entries.items()}


class Sequence(Node):
    kind = "sequence"

    def __init__(self, items: list[Node]):
        self._items = tuple(items)

    def _child(self, segment: PathSegment) -> Node:
        # Dotted digits ("steps.0") are accepted as indices too
        if isinstance(segment, str) and segment.isdigit():
            segment = int(segment)
        if isinstance(segment, int) and 0 <= segment < len(self._items):
            return self._items[segment]
        return ABSENT

    def __iter__(self) -> Iterator[Node]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Node:
        return self._items[index]

    def __contains__(self, value: object) -> bool:
        if isinstance(value, Node):
            return value in self._items
        return any(item.to_python() == value for item in self._items)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Sequence) and self._items == other._items

    def __repr__(self) -> str:
        return f"Sequence({list(self._items)!r})"

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self._items]


class Scalar(Node):
    kind = "scalar"

    def __init__(self, value: Union[str, int, float, bool, None]):
        self.value = value

    def __eq__(self, other: object) -> bool:
        # bool is an int subclass; keep True and 1 apart
        return (
            isinstance(other, Scalar)
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))

    def __repr__(self) -> str:
        return f"Scalar({self.value!r})"

    def to_python(self) -> Any:
        return self.value


class _Absent(Node):
    kind = "absent"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def to_python(self) -> None:
        return None


ABSENT = _Absent()


def build_tree(raw: Any) -> Node:
    """
    Convert parser output (dicts, lists, scalars) into a read-only tree.

    Non-string mapping keys are converted with str(); other values that are
    not dicts, lists or plain scalars are kept as their string form.

    Raises:
        ParseError: If a container contains itself (a recursive YAML alias)
            or two keys of one mapping convert to the same string
    """
    return _build(raw, set())


def _build(raw: Any, open_containers: set[int]) -> Node:
    if raw is None or isinstance(raw, (str, int, float, bool)):
        return Scalar(raw)
    if not isinstance(raw, (dict, list, tuple)):
        return Scalar(str(raw))

    # Only containers on the current path count; shared aliases are fine
    marker = id(raw)
    if marker in open_containers:
        raise ParseError("Document contains a self-referencing alias")
    open_containers.add(marker)
    try:
        if isinstance(raw, dict):
            entries: dict[str, Node] = {}
            for key, value in raw.items():
                name = str(key)
                if name in entries:
                    raise ParseError(
                        f"Duplicate key '{name}' after converting keys to strings",
                        details={"key": name},
                    )
                entries[name] = _build(value, open_containers)
            return Mapping(entries)
        return Sequence([_build(item, open_containers) for item in raw])
    finally:
        open_containers.discard(marker)


class TreeView:
    """Typed view over a tree node; accessors delegate to the node."""

    def __init__(self, node: Node):
        self.node = node

    def get(self, path: str) -> Node:
        return self.node.get(path)

    def get_string(self, path: str) -> Optional[str]:
        return self.node.get_string(path)

    def get_sequence(self, path: str) -> Optional[Sequence]:
        return self.node.get_sequence(path)

    def get_mapping(self, path: str) -> Optional[Mapping]:
        return self.node.get_mapping(path)

    def exists(self, path: str) -> bool:
        return self.node.exists(path)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.node == other.node


class StepSpec(TreeView):
    """One step of a job, identified by name. Unknown fields are ignored."""

    def __init__(self, node: Node, index: int):
        super().__init__(node)
        self.index = index

    @property
    def name(self) -> Optional[str]:
        return self.get_string("name")

    @property
    def uses(self) -> Optional[str]:
        return self.get_string("uses")

    @property
    def inputs(self) -> Optional[Mapping]:
        """The step's `with` block."""
        return self.get_mapping("with")

    @property
    def run(self) -> Optional[str]:
        return self.get_string("run")

    @property
    def env(self) -> Optional[Mapping]:
        return self.get_mapping("env")

    def describe(self) -> str:
        return self.name or f"step #{self.index + 1}"

    def __repr__(self) -> str:
        return f"StepSpec(index={self.index}, name={self.name!r})"


class JobSpec(TreeView):
    """A named job: a runner label plus an ordered list of steps."""

    def __init__(self, node: Node, name: str):
        super().__init__(node)
        self.name = name
        steps = node.get_sequence("steps")
        self._steps = [StepSpec(step, i) for i, step in enumerate(steps or [])]

    @property
    def runs_on(self) -> Optional[str]:
        return self.get_string("runs-on")

    @property
    def has_steps(self) -> bool:
        return self.get_sequence("steps") is not None

    @property
    def steps(self) -> list[StepSpec]:
        return list(self._steps)

    @property
    def step_names(self) -> list[Optional[str]]:
        return [step.name for step in self._steps]

    def __repr__(self) -> str:
        return f"JobSpec(name={self.name!r}, steps={len(self._steps)})"


class WorkflowDocument(TreeView):
    """Root of a parsed workflow file."""

    def __init__(self, node: Node, source: Optional[str] = None):
        super().__init__(node)
        self.source = source

    @property
    def triggers(self) -> Optional[Mapping]:
        """The `on` block."""
        return self.get_mapping("on")

    @property
    def jobs(self) -> Optional[Mapping]:
        return self.get_mapping("jobs")

    def job(self, name: str) -> Optional[JobSpec]:
        jobs = self.jobs
        if jobs is None or name not in jobs:
            return None
        return JobSpec(jobs.child(name), name)

    def branches(self, event: str) -> Optional[Sequence]:
        triggers = self.triggers
        if triggers is None:
            return None
        return triggers.child(event).get_sequence("branches")

    def __repr__(self) -> str:
        return f"WorkflowDocument(source={self.source!r})"


class ManifestDocument(TreeView):
    """Root of a parsed package manifest (package.json)."""

    def __init__(self, node: Node, source: Optional[str] = None):
        super().__init__(node)
        self.source = source

    @property
    def dependencies(self) -> Optional[Mapping]:
        return self.get_mapping("dependencies")

    @property
    def scripts(self) -> Optional[Mapping]:
        return self.get_mapping("scripts")

    def script(self, name: str) -> Optional[str]:
        return self.get_string(f"scripts['{name}']")

    def __repr__(self) -> str:
        return f"ManifestDocument(source={self.source!r})"
