"""Format-preserving TOML document helpers built on tomlkit.

tomlkit keeps comments, whitespace and key order of the parsed text, so a
document that is not mutated serializes back to exactly the input. The helpers
here add the few structural operations the manifest engine needs on top of it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.container import Container
from tomlkit.exceptions import ParseError
from tomlkit.items import AoT, Comment, InlineTable, Item, Key, Null, Table, Whitespace

from .errors import ManifestParseError


def parse_document(content: str, source: str = "<string>") -> TOMLDocument:
    """Parse TOML text into a format-preserving document.

    Args:
        content: The TOML text
        source: Where the text came from, used in error messages

    Returns:
        Parsed document
    """
    try:
        return tomlkit.parse(content)
    except ParseError as e:
        raise ManifestParseError(f"Unable to parse {source}: {e}") from e


def is_table_like(node) -> bool:
    """True for block tables, inline tables and the document root."""
    return isinstance(node, Mapping)


def is_str(node) -> bool:
    return isinstance(node, str)


def snapshot(node):
    """Deep copy a node into plain Python values detached from the document."""
    if isinstance(node, Mapping):
        return {str(key): snapshot(value) for key, value in node.items()}
    if isinstance(node, list):
        return [snapshot(value) for value in node]
    if isinstance(node, Item):
        return node.unwrap()
    return node


def format_inline_table(table: InlineTable) -> InlineTable:
    """Rebuild an inline table in the canonical ``{ key = value, ... }`` form.

    Keys and values keep their own spelling, only the spacing around them changes.
    """
    pairs = [f"{key.as_string().strip()} = {item.as_string()}" for key, item in table.value.body if key is not None]
    return tomlkit.value("{ " + ", ".join(pairs) + " }" if pairs else "{}")


@dataclass
class _Entry:
    key: Key
    item: Item
    slots: list[tuple] = field(default_factory=list)  # leading comments/blank lines, then the pair itself


def _value_entries(table: Table) -> list[_Entry]:
    """Split the leading key/value region of a table body into entries.

    Dotted keys (``foo.version = "1"``) are stored as super tables but render
    as plain pairs, so they belong to the region. The region ends at the first
    sub-table or array of tables. Trivia after the last pair is not part of
    any entry.
    """
    entries: list[_Entry] = []
    pending: list[tuple] = []
    for key, item in table.value.body:
        if key is None:
            if isinstance(item, (Comment, Whitespace, Null)):
                pending.append((key, item))
                continue
            break
        if isinstance(item, AoT) or (isinstance(item, Table) and not key.is_dotted()):
            break
        entries.append(_Entry(key, item, [*pending, (key, item)]))
        pending = []
    return entries


def _reindex(container: Container) -> None:
    """Rebuild the key index and key order of a container whose body was reordered."""
    index: dict = {}
    for position, (key, _) in enumerate(container.body):
        if key is None:
            continue
        if key in index:
            previous = index[key]
            index[key] = (*previous, position) if isinstance(previous, tuple) else (previous, position)
        else:
            index[key] = position
    container._map = index
    container._table_keys = [key for key, item in container.body if key is not None and item.is_table()]


def _reorder_keys(mapping: dict, keys: list[str]) -> None:
    stored = dict(dict.items(mapping))
    dict.clear(mapping)
    for key in keys:
        if key in stored:
            dict.__setitem__(mapping, key, stored.pop(key))
    for key, value in stored.items():
        dict.__setitem__(mapping, key, value)


def sort_table_values(table: Table) -> bool:
    """Sort the key/value pairs of a block table by key, in place.

    Comments and blank lines directly above a key move with it. Sub-tables and
    comments after the last pair stay where they are. Returns False when the
    table was already sorted, in which case nothing is touched.
    """
    entries = _value_entries(table)
    ordered = sorted(entries, key=lambda entry: entry.key.key)
    if [entry.key.key for entry in ordered] == [entry.key.key for entry in entries]:
        return False

    # The old last pair may end up mid-table.
    last = entries[-1].item
    if not isinstance(last, Table) and "\n" not in last.trivia.trail:
        last.trivia.trail += "\n"

    container = table.value
    slots = [slot for entry in ordered for slot in entry.slots]
    container.body[: len(slots)] = slots
    _reindex(container)

    keys = list(dict.fromkeys(key.key for key, _ in container.body if key is not None))
    _reorder_keys(container, keys)
    _reorder_keys(table, keys)
    return True
