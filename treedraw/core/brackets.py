"""Labeled-bracket (Penn treebank style) text codec for forests.

Each root tree is written as its own group, with metadata as a trailing
bracketed group::

    ( (IP-MAT (NP-SBJ (D The) (N cat)) (VBD sat))
      (METADATA (ID cat.1)))

Root groups are separated by a blank line. Terminals are ``(LABEL token)``,
or ``(LABEL token-lemma)`` when the leaf has a lemma.
"""

import re
from typing import Iterable, Optional

from ..labels import is_empty_token
from ..state import Forest, Node

TOKEN_RE = re.compile(r'\(|\)|[^\s()]+')

METADATA_LABEL = 'METADATA'


class BracketSyntaxError(ValueError):
    pass


# ---- Writing ----

def node_to_brackets(node: Node) -> str:
    if node.is_terminal:
        text = node.token
        if node.lemma:
            text += '-' + node.lemma
        return f'({node.label} {text})'
    return '({} {})'.format(node.label, ' '.join(node_to_brackets(c) for c in node.children))


def metadata_to_brackets(metadata: Optional[dict]) -> str:
    if not metadata:
        return ''
    entries = ' '.join(f'({k} {v})' for k, v in metadata.items())
    return f'({METADATA_LABEL} {entries})'


def to_labeled_brackets(trees: Iterable[Node]) -> str:
    """Serialize root trees, one blank-line-separated group per root."""
    groups = []
    for tree in trees:
        meta = metadata_to_brackets(tree.metadata)
        body = node_to_brackets(tree)
        groups.append(f'( {body}\n  {meta})' if meta else f'( {body})')
    return '\n\n'.join(groups) + ('\n' if groups else '')


# ---- Reading ----

class _Reader:
    def __init__(self, text: str):
        self.tokens = TOKEN_RE.findall(text)
        self.pos = 0

    def peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> str:
        tok = self.peek()
        if tok is None:
            raise BracketSyntaxError("Unexpected end of input")
        self.pos += 1
        return tok

    def expect(self, tok: str):
        got = self.next()
        if got != tok:
            raise BracketSyntaxError(f"Expected {tok!r} at token {self.pos}, got {got!r}")

    def sexp(self):
        """Parse one group into nested lists of strings."""
        self.expect('(')
        items = []
        while self.peek() != ')':
            if self.peek() is None:
                raise BracketSyntaxError("Unbalanced parentheses")
            items.append(self.sexp() if self.peek() == '(' else self.next())
        self.next()
        return items


def _build(sexp, forest: Forest, dash_lemmas: bool) -> Node:
    if not sexp or not isinstance(sexp[0], str):
        raise BracketSyntaxError(f"Node without a label: {sexp!r}")
    label, rest = sexp[0], sexp[1:]
    if not rest:
        raise BracketSyntaxError(f"Empty node: ({label})")
    if len(rest) == 1 and isinstance(rest[0], str):
        token, lemma = rest[0], None
        if dash_lemmas and not is_empty_token(token) and '-' in token:
            token, lemma = token.rsplit('-', 1)
        return forest.create_terminal(label, token, lemma)
    if any(isinstance(r, str) for r in rest):
        raise BracketSyntaxError(f"Mixed words and phrases under ({label} ...)")
    return forest.create_phrasal(label, [_build(r, forest, dash_lemmas) for r in rest])


def _metadata(sexp, into: dict):
    for entry in sexp[1:]:
        if isinstance(entry, str) or not entry or not isinstance(entry[0], str):
            raise BracketSyntaxError(f"Malformed metadata entry: {entry!r}")
        into[entry[0]] = ' '.join(v for v in entry[1:] if isinstance(v, str))


def parse_labeled_brackets(text: str, forest: Forest, dash_lemmas: bool = False) -> list:
    """Parse bracketed text into root trees with fresh ids from `forest`.

    The trees are not inserted into the forest. Raises BracketSyntaxError.
    """
    reader = _Reader(text)
    trees = []
    while reader.peek() is not None:
        group = reader.sexp()
        if group and isinstance(group[0], str):
            # a bare tree without the outer wrapper
            trees.append(_build(group, forest, dash_lemmas))
            continue
        tree, metadata = None, {}
        for item in group:
            if item and item[0] == METADATA_LABEL:
                _metadata(item, metadata)
            elif item and item[0] == 'ID' and len(item) == 2 and isinstance(item[1], str):
                metadata['ID'] = item[1]
            elif tree is None:
                tree = _build(item, forest, dash_lemmas)
            else:
                raise BracketSyntaxError("More than one tree in a root group")
        if tree is None:
            raise BracketSyntaxError("Root group without a tree")
        tree.metadata = metadata or None
        trees.append(tree)
    return trees
