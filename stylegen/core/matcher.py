"""Palette color name -> index matcher.

The set of declared color names is compiled into a compressed trie: a node
branches on the character at its depth only while more than one candidate
shares the prefix; once a single candidate remains the node becomes a leaf
that checks the length and the remaining suffix in one comparison.

The same trie is both interpreted (lookup, used by the runtime palette model)
and compiled to the C++ `getPaletteIndex` function (generate_matcher_code).
Children are kept in descending lexicographic order, which is also the order
the generated `case` labels appear in.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stylegen.core.encoding import string_to_encoded_string

NOT_FOUND = -1


@dataclass
class TrieLeaf:
    depth: int
    name: str
    index: int


@dataclass
class TrieBranch:
    depth: int
    terminal: int = NOT_FOUND  # index of the name ending exactly at `depth`, if any
    children: dict[str, TrieLeaf | TrieBranch] = field(default_factory=dict)


TrieNode = TrieLeaf | TrieBranch


def _build(entries: list[tuple[str, int]], depth: int) -> TrieNode:
    if len(entries) == 1:
        name, index = entries[0]
        return TrieLeaf(depth=depth, name=name, index=index)

    branch = TrieBranch(depth=depth)
    groups: dict[str, list[tuple[str, int]]] = {}
    for name, index in entries:
        if len(name) == depth:
            branch.terminal = index
        else:
            groups.setdefault(name[depth], []).append((name, index))
    for ch, group in groups.items():
        branch.children[ch] = _build(group, depth + 1)
    return branch


def build_trie(names: dict[str, int]) -> TrieNode | None:
    """Compile name -> index into a trie, or None for an empty name set."""
    if not names:
        return None
    entries = sorted(names.items(), reverse=True)
    return _build(entries, 0)


def lookup(trie: TrieNode | None, name: str) -> int:
    """Index of `name`, or NOT_FOUND. Case-sensitive, exact match only."""
    node = trie
    while isinstance(node, TrieBranch):
        if len(name) == node.depth:
            return node.terminal
        node = node.children.get(name[node.depth])
    if node is None or node.name != name:
        return NOT_FOUND
    return node.index


def _leaf_code(leaf: TrieLeaf) -> str:
    size = len(leaf.name)
    if size == leaf.depth:
        return f'return (size == {size}) ? {leaf.index} : -1;'
    suffix = leaf.name[leaf.depth :]
    suffix_len = len(suffix.encode('utf-8'))
    compare = f'!memcmp(data + {leaf.depth}, {string_to_encoded_string(suffix)}, {suffix_len})'
    return f'return (size == {size} && {compare}) ? {leaf.index} : -1;'


def _branch_lines(branch: TrieBranch, tabs: str) -> list[str]:
    lines = []
    if branch.terminal != NOT_FOUND:
        lines.append(f'{tabs}if (size == {branch.depth}) return {branch.terminal};')
    lines.append(f'{tabs}if (size > {branch.depth}) switch (data[{branch.depth}]) {{')
    for ch, child in branch.children.items():
        label = f"{tabs}case '{ch}':"
        if isinstance(child, TrieLeaf):
            lines.append(f'{label} {_leaf_code(child)}')
        else:
            lines.append(label)
            lines.extend(_branch_lines(child, tabs + '\t'))
            lines.append(f'{tabs}\tbreak;')
    lines.append(f'{tabs}}}')
    return lines


def generate_matcher_code(names: dict[str, int], function_name: str = 'getPaletteIndex') -> str:
    """C++ source of `int <function_name>(QLatin1String name)` for the given names."""
    lines = [
        f'int {function_name}(QLatin1String name) {{',
        '\tauto size = name.size();',
        '\tauto data = name.data();',
    ]
    trie = build_trie(names)
    if isinstance(trie, TrieLeaf):
        lines.append(f'\t{_leaf_code(trie)}')
    elif isinstance(trie, TrieBranch):
        lines.extend(_branch_lines(trie, '\t'))
    lines.append('')
    lines.append('\treturn -1;')
    lines.append('}')
    return '\n'.join(lines) + '\n'


class PaletteMatcher:
    """Name -> palette index lookup backed by a compiled trie."""

    def __init__(self, names: dict[str, int]):
        self.names = dict(names)
        self.trie = build_trie(self.names)

    def lookup(self, name: str) -> int:
        return lookup(self.trie, name)

    def code(self, function_name: str = 'getPaletteIndex') -> str:
        return generate_matcher_code(self.names, function_name)
