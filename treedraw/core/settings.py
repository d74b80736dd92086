"""User-facing settings - persisted to ~/.config/treedraw/settings.json.

Covers the annotation scheme (dash tag orderings, clause categories, trace
tokens, comment kinds), the optional label legality oracle, and editor
behaviour such as the undo depth and leaf defaults.

Hard-coded values that are plausible candidates to move here in the future:
  - Empty category prefixes (currently '*', '{' and a bare '0')
  - The FLAG dash tag cleared by fix_error
"""

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'treedraw' / 'settings.json'

DEFAULTS = {
    # Ordered legal dash tags; order is the canonical position on a label
    'leaf_extensions': ['SBJ', 'RSP', 'LFD', 'PRN', 'SPE', 'XXX'],
    'extensions': ['SBJ', 'RSP', 'LFD', 'PRN', 'SPE', 'XXX', 'FLAG'],
    'clause_extensions': ['RSP', 'LFD', 'PRN', 'SPE', 'SBJ', 'XXX', 'FLAG'],
    'clause_categories': ['IP', 'CP'],
    'tag_categories': [],          # phrasal categories that never take children
    'trace_prefixes': ['*T*', '*ICH*', '*CL*', '*EXP*'],
    'comment_types': ['COM', 'TODO', 'MAN'],
    'default_leaf_label': 'NP-SBJ',
    'default_leaf_token': '*con*',
    'default_phrase_label': 'XP',
    'split_marker': '@',
    # Empty base lists = no legality oracle for that node kind
    'valid_leaf_bases': [],
    'valid_leaf_dashes': [],
    'valid_phrase_bases': [],
    'valid_phrase_dashes': [],
    'dash_lemmas': False,          # bracketed text encodes lemmas as token-lemma
    'undo_max_size': 100,
}

_LIST_KEYS = (
    'leaf_extensions', 'extensions', 'clause_extensions', 'clause_categories',
    'tag_categories', 'trace_prefixes', 'comment_types',
    'valid_leaf_bases', 'valid_leaf_dashes',
    'valid_phrase_bases', 'valid_phrase_dashes',
)
_STR_KEYS = ('default_leaf_label', 'default_leaf_token',
             'default_phrase_label', 'split_marker')


class Settings:
    def __init__(self, path=None):
        self.path = Path(path) if path else CONFIG_PATH
        self.leaf_extensions: list[str] = list(DEFAULTS['leaf_extensions'])
        self.extensions: list[str] = list(DEFAULTS['extensions'])
        self.clause_extensions: list[str] = list(DEFAULTS['clause_extensions'])
        self.clause_categories: list[str] = list(DEFAULTS['clause_categories'])
        self.tag_categories: list[str] = list(DEFAULTS['tag_categories'])
        self.trace_prefixes: list[str] = list(DEFAULTS['trace_prefixes'])
        self.comment_types: list[str] = list(DEFAULTS['comment_types'])
        self.default_leaf_label: str = DEFAULTS['default_leaf_label']
        self.default_leaf_token: str = DEFAULTS['default_leaf_token']
        self.default_phrase_label: str = DEFAULTS['default_phrase_label']
        self.split_marker: str = DEFAULTS['split_marker']
        self.valid_leaf_bases: list[str] = list(DEFAULTS['valid_leaf_bases'])
        self.valid_leaf_dashes: list[str] = list(DEFAULTS['valid_leaf_dashes'])
        self.valid_phrase_bases: list[str] = list(DEFAULTS['valid_phrase_bases'])
        self.valid_phrase_dashes: list[str] = list(DEFAULTS['valid_phrase_dashes'])
        self.dash_lemmas: bool = DEFAULTS['dash_lemmas']
        self.undo_max_size: int = DEFAULTS['undo_max_size']
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            for key in _LIST_KEYS:
                if key in d:
                    setattr(self, key, [str(v) for v in d[key]])
            for key in _STR_KEYS:
                if key in d:
                    setattr(self, key, str(d[key]))
            self.dash_lemmas = bool(d.get('dash_lemmas', self.dash_lemmas))
            self.undo_max_size = int(d.get('undo_max_size', self.undo_max_size))
        except (OSError, ValueError, TypeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.path, e)

    def to_dict(self) -> dict:
        d = {key: list(getattr(self, key)) for key in _LIST_KEYS}
        d.update({key: getattr(self, key) for key in _STR_KEYS})
        d['dash_lemmas'] = self.dash_lemmas
        d['undo_max_size'] = self.undo_max_size
        return d

    def save(self):
        """Persist current settings to the user config file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            log.warning("Could not write settings to %s: %s", self.path, e)
