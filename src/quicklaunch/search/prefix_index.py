"""
Prefix trie mapping lowercased title prefixes to page indices.

Every node on an inserted path records the page index, so a lookup
costs one step per query character and returns all pages whose title
starts with the query.
"""
from dataclasses import dataclass, field


@dataclass
class TrieNode:
    """Single node in the trie."""
    children: dict[str, "TrieNode"] = field(default_factory=dict)
    page_indices: list[int] = field(default_factory=list)


class PrefixIndex:
    """Title prefix trie. Rebuilt wholesale, never patched."""

    def __init__(self):
        self._root = TrieNode()
        self._size = 0

    @property
    def size(self) -> int:
        """Number of titles inserted."""
        return self._size

    def insert(self, title: str, page_index: int):
        node = self._root
        for ch in title.lower():
            child = node.children.get(ch)
            if child is None:
                child = TrieNode()
                node.children[ch] = child
            node = child
            node.page_indices.append(page_index)
        self._size += 1

    def get_prefix_matches(self, prefix: str) -> list[int]:
        """
        Return page indices whose lowercased title starts with prefix.

        The list may hold duplicates if the same index was inserted more
        than once; callers dedupe.
        """
        if not prefix:
            return []
        node = self._root
        for ch in prefix.lower():
            node = node.children.get(ch)
            if node is None:
                return []
        return list(node.page_indices)

    @classmethod
    def from_titles(cls, titles: list[str]) -> "PrefixIndex":
        index = cls()
        for i, title in enumerate(titles):
            index.insert(title, i)
        return index
