"""Main application class - creates the window, wires input to tree operations."""

import logging

from PySide6.QtWidgets import (QMainWindow, QTreeWidget, QTreeWidgetItem,
                               QFileDialog, QMessageBox, QInputDialog, QApplication)
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut, QColor, QBrush

from .state import SessionState
from .errors import InputError
from .core.brackets import BracketSyntaxError
from .ops import coindex as coindex_ops
from .ops import creation, deletion, history, label_edit, metadata, movement, tree_io

log = logging.getLogger(__name__)

PRIMARY_COLOR = QColor('#e94560')
SECONDARY_COLOR = QColor('#3a6ea5')

# Labels cycled by the number keys, as in the browser editor's default setup
LABEL_CYCLES = {
    '1': {'ADJP': ['ADJP', 'ADJP-SPR', 'ADJP-PRD'], 'NP': ['NP', 'NP-SBJ', 'NP-OB1']},
    '2': ['IP-SUB', 'IP-INF', 'IP-SMC'],
    '3': ['CP-REL', 'CP-THT', 'CP-QUE', 'CP-ADV'],
    '4': ['PP', 'ADVP', 'ADVP-TMP', 'ADVP-LOC'],
}


class App(QMainWindow):
    """Main application - owns the session, shows the forest, dispatches keys."""

    def __init__(self, path=None, settings=None):
        super().__init__()
        self.state = SessionState(settings)

        self._setup_theme()
        self._build_ui()
        self._bind_keys()
        self.state.on_change(self._on_state_change)

        if path:
            self._load(path)
        else:
            self._refresh()

    def _setup_theme(self):
        """Configure Qt stylesheet for dark mode."""
        self.setStyleSheet("""
            QMainWindow, QWidget {
                background-color: #16213e;
                color: #eeeeee;
            }
            QTreeWidget {
                background-color: #1a1a30;
                color: #eeeeee;
                border: 1px solid #2a2a4a;
                font-family: monospace;
            }
            QStatusBar {
                color: #e9c46a;
            }
        """)

    def _build_ui(self):
        self.setWindowTitle('Tree Editor')
        self.resize(1000, 750)

        self.tree_view = QTreeWidget()
        self.tree_view.setHeaderHidden(True)
        self.tree_view.setSelectionMode(QTreeWidget.NoSelection)
        self.tree_view.setContextMenuPolicy(Qt.CustomContextMenu)
        self.tree_view.itemClicked.connect(self._on_item_clicked)
        self.tree_view.customContextMenuRequested.connect(self._on_right_click)
        self.setCentralWidget(self.tree_view)
        self._items = {}

    def _bind_keys(self):
        """Bind the fixed keyboard shortcuts."""
        bindings = [
            (QKeySequence.Undo, self._on_undo),
            (QKeySequence('Ctrl+Y'), self._on_redo),
            (QKeySequence.Save, self.save_trees),
            (QKeySequence.Open, self.load_trees),
            ('X', lambda: self._wrap('XP')),
            ('N', lambda: self._wrap('NP')),
            ('D', self._on_prune),
            ('C', self._on_coindex),
            ('Q', lambda: self._on_make_leaf(before=False)),
            ('Shift+Q', lambda: self._on_make_leaf(before=True)),
            ('L', self._on_edit),
            ('S', self._on_split),
            ('M', self._on_metadata),
            ('F', lambda: self._action(label_edit.fix_error, self._primary())),
            ('Shift+S', lambda: self._toggle_tag('SBJ')),
            ('Shift+P', lambda: self._toggle_tag('PRN')),
            ('Shift+Z', lambda: self._action(label_edit.zero_dash_tags, self._primary())),
            ('Left', lambda: self._step(-1)),
            ('Right', lambda: self._step(1)),
            ('Escape', self._on_escape),
        ]
        for key, labels in LABEL_CYCLES.items():
            bindings.append((key, lambda labels=labels: self._action(
                label_edit.set_label, self._primary(), labels)))
        for key, handler in bindings:
            QShortcut(QKeySequence(key) if isinstance(key, str) else key, self, handler)

    # ---- Rendering ----

    def _on_state_change(self, source=None):
        """Called whenever state changes. Rebuilds the tree view."""
        self._refresh()

    def _refresh(self):
        self.tree_view.clear()
        self._items = {}
        for tree in self.state.forest.trees:
            self.tree_view.addTopLevelItem(self._make_item(tree))
        self.tree_view.expandAll()
        sel = self.state.selection
        for node, color in ((sel.primary, PRIMARY_COLOR), (sel.secondary, SECONDARY_COLOR)):
            item = self._items.get(node.id) if node is not None else None
            if item is not None:
                item.setBackground(0, QBrush(color))
                self.tree_view.scrollToItem(item)
        title = 'Tree Editor'
        if self.state._path:
            title += f' - {self.state._path}'
        self.setWindowTitle(title)

    def _make_item(self, node):
        if node.is_terminal:
            text = f'{node.label}  {node.token}'
            if node.lemma:
                text += f'-{node.lemma}'
        else:
            text = node.label
        if node.metadata:
            text += '   ' + ' '.join(f'[{k}={v}]' for k, v in node.metadata.items())
        item = QTreeWidgetItem([text])
        item.setData(0, Qt.UserRole, node.id)
        self._items[node.id] = item
        for child in node.children:
            item.addChild(self._make_item(child))
        return item

    def _node_at(self, item):
        if item is None:
            return None
        return self.state.forest.find(item.data(0, Qt.UserRole))

    def _primary(self):
        return self.state.selection.primary

    def _message(self, text):
        self.statusBar().showMessage(text, 5000)

    # ---- Action dispatch ----

    def _action(self, fn, *args):
        """Run one operation as one undoable user action."""
        try:
            result = fn(self.state, *args)
        except InputError as e:
            self._message(str(e))
            result = None
        finally:
            self.state.end_action()
        return result

    def _on_item_clicked(self, item, _column):
        node = self._node_at(item)
        if node is None:
            return
        if QApplication.keyboardModifiers() & Qt.ControlModifier:
            self.state.selection.set(node)
        else:
            self.state.selection.select(node, from_mouse=True)
        self._refresh()

    def _on_right_click(self, pos):
        """Move the selection under the clicked node (empty space: root level)."""
        sel = self.state.selection
        if sel.primary is None:
            return
        target = self._node_at(self.tree_view.itemAt(pos))
        if sel.secondary is not None:
            self._action(movement.move_range, sel.primary, sel.secondary, target)
        else:
            self._action(movement.move_node, sel.primary, target)

    def _step(self, offset):
        if self.state.selection.select_sibling(self.state.forest, offset):
            self._refresh()

    def _on_escape(self):
        self.state.selection.clear()
        self._refresh()

    def _wrap(self, label):
        sel = self.state.selection
        if sel.primary is not None:
            self._action(creation.wrap_in_phrase, sel.primary, sel.secondary, label)

    def _toggle_tag(self, tag):
        if self.state.selection.is_single:
            self._action(label_edit.toggle_dash_tag, self._primary(), tag)

    def _on_prune(self):
        if self.state.selection.is_single:
            self._action(deletion.prune, self._primary())

    def _on_coindex(self):
        sel = self.state.selection
        self._action(coindex_ops.coindex, sel.primary, sel.secondary)

    def _on_make_leaf(self, before):
        sel = self.state.selection
        if sel.primary is None:
            return
        # with two nodes selected the new leaf is a trace of the second
        self._action(creation.make_leaf, sel.primary, before, None, None, sel.secondary)

    def _on_undo(self):
        msg = history.undo(self.state)
        if msg:
            self._message(msg)
        self.state.end_action()

    def _on_redo(self):
        msg = history.redo(self.state)
        if msg:
            self._message(msg)
        self.state.end_action()

    # ---- Dialog-driven edits ----

    def _on_edit(self):
        node = self._primary()
        if node is None or not self.state.selection.is_single:
            return
        if label_edit.is_comment(self.state, node):
            kind, text = label_edit.parse_comment(node)
            text, ok = QInputDialog.getText(self, 'Edit Comment', 'Comment:', text=text)
            if not ok:
                return
            types = self.state.settings.comment_types
            kind, ok = QInputDialog.getItem(self, 'Edit Comment', 'Type:', types,
                                            types.index(kind) if kind in types else 0,
                                            False)
            if ok:
                self._action(label_edit.edit_comment, node, text, kind)
        elif node.is_terminal:
            text = f'{node.label} {node.token}'
            if node.lemma:
                text += f' {node.lemma}'
            text, ok = QInputDialog.getText(self, 'Edit Leaf',
                                            'Label, text and lemma:', text=text)
            if ok:
                parts = text.split()
                if not parts:
                    self._message("Cannot create an empty leaf.")
                    return
                label, token = parts[0], parts[1] if len(parts) > 1 else ''
                lemma = parts[2] if len(parts) > 2 else ''
                self._action(label_edit.edit_leaf, node, label, token, lemma)
        else:
            label, ok = QInputDialog.getText(self, 'Relabel', 'Label:', text=node.label)
            if ok:
                self._action(label_edit.relabel, node, label)

    def _on_split(self):
        node = self._primary()
        if node is None or not node.is_terminal or not self.state.selection.is_single:
            return
        text, ok = QInputDialog.getText(
            self, 'Split word',
            f'Enter {self.state.settings.split_marker} at the place to split the word:',
            text=node.token)
        if ok:
            self._action(creation.split_token, node, text)

    def _on_metadata(self):
        node = self._primary()
        if node is None:
            return
        root = self.state.forest.root_of(node)
        text, ok = QInputDialog.getText(
            self, 'Metadata', 'KEY value (empty value deletes the key):')
        if not ok or not text.strip():
            return
        key, _, value = text.strip().partition(' ')
        if value.strip():
            self._action(metadata.set_metadata, root, key, value)
        else:
            self._action(metadata.delete_metadata, root, key)

    # ---- Save/Load ----

    def save_trees(self):
        path = self.state._path
        if not path:
            path, _ = QFileDialog.getSaveFileName(
                self, 'Save Trees', '', 'Penn treebank files (*.psd);;All files (*.*)')
        if path:
            try:
                tree_io.save_trees(self.state, path)
                self._message(f'Saved {path}')
            except OSError as e:
                QMessageBox.critical(self, 'Error', f'Failed to save trees: {e}')
            self._refresh()

    def load_trees(self):
        path, _ = QFileDialog.getOpenFileName(
            self, 'Open Trees', '', 'Penn treebank files (*.psd);;All files (*.*)')
        if path:
            self._load(path)

    def _load(self, path):
        try:
            tree_io.load_trees(self.state, path)
        except (OSError, UnicodeDecodeError, BracketSyntaxError) as e:
            log.error("Failed to load %s: %s", path, e)
            QMessageBox.critical(self, 'Error', f'Failed to load trees: {e}')
            self._refresh()
