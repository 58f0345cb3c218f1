# SPDX-License-Identifier: MIT
"""State machine for the interactive picker.

The picker has two phases:

- browse: typing edits the query, arrows move through ranked results,
  space marks files, Ctrl+R (or left/right) cycles the role preset,
  Enter opens the action sheet, Escape quits.
- actions: arrows move through ACTIONS, Enter runs the highlighted action,
  Escape/Backspace return to browse, any printable key returns to browse
  and is appended to the query.

PickerState holds no widgets; the Textual app feeds it key names and
renders whatever it exposes, so every transition is testable without a
terminal.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from conv.models import ROLE_PRESETS, RoleFilter, SearchResult
from conv.search import CachedFile, rank_files

BROWSE = "browse"
ACTIONS_PHASE = "actions"

MODE_SEARCH = "search"
MODE_LATEST = "latest"

CANCEL = "cancel"

NEXT_ROLE_KEYS = ("ctrl+r", "right")
PREV_ROLE_KEYS = ("ctrl+shift+r", "left")
TOGGLE_KEYS = ("space",)
ERASE_KEYS = ("backspace", "delete")


@dataclass(frozen=True)
class Action:
    id: str
    label: str

    @property
    def markdown(self) -> bool:
        return self.id.endswith("-md")


ACTIONS: Tuple[Action, ...] = (
    Action("stdout-md", "Print to stdout (Markdown)"),
    Action("stdout-txt", "Print to stdout (Plain Text)"),
    Action("file-md", "Write to file (Markdown)"),
    Action("file-txt", "Write to file (Plain Text)"),
    Action("clipboard-md", "Copy to Clipboard (Markdown)"),
    Action("clipboard-txt", "Copy to Clipboard (Plain Text)"),
    Action(CANCEL, "Cancel"),
)


@dataclass
class PickerOutcome:
    """What the picker decided when it closed.

    ``action`` is an Action id, or CANCEL when the user quit.
    """

    action: str
    files: List[Path] = field(default_factory=list)
    roles: RoleFilter = field(default_factory=RoleFilter.any)

    @property
    def markdown(self) -> bool:
        return self.action.endswith("-md")


def _printable(character: Optional[str]) -> bool:
    return character is not None and len(character) == 1 and character.isprintable()


@dataclass
class PickerState:
    """Everything the picker shows, plus the key-driven transitions."""

    cache: List[CachedFile] = field(default_factory=list)
    mode: str = MODE_SEARCH
    query: str = ""
    preset_index: int = 0
    phase: str = BROWSE
    cursor: int = 0
    window_start: int = 0
    action_cursor: int = 0
    selected: List[Path] = field(default_factory=list)
    page_size: int = 4
    limit: int = 200
    latest_file: Optional[Path] = None
    _memo_key: Optional[Tuple[str, int]] = field(default=None, init=False, repr=False)
    _memo: List[SearchResult] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.mode == MODE_LATEST:
            self.phase = ACTIONS_PHASE

    # -- derived state ---------------------------------------------------

    @property
    def preset(self) -> str:
        return ROLE_PRESETS[self.preset_index]

    @property
    def roles(self) -> RoleFilter:
        return RoleFilter.from_preset(self.preset)

    @property
    def results(self) -> List[SearchResult]:
        """Ranked results for the current query and preset, capped at limit."""
        if self.mode != MODE_SEARCH:
            return []
        key = (self.query, self.preset_index)
        if key != self._memo_key:
            self._memo = rank_files(self.cache, self.query, self.roles)[: self.limit]
            self._memo_key = key
        return self._memo

    def visible_results(self) -> Sequence[SearchResult]:
        return self.results[self.window_start : self.window_start + self.page_size]

    @property
    def current(self) -> Optional[SearchResult]:
        results = self.results
        if 0 <= self.cursor < len(results):
            return results[self.cursor]
        return None

    def target_files(self) -> List[Path]:
        """Files an action applies to: marked ones, else the highlighted one."""
        if self.selected:
            return list(self.selected)
        if self.mode == MODE_LATEST and self.latest_file is not None:
            return [self.latest_file]
        current = self.current
        return [current.path] if current else []

    # -- cursor helpers --------------------------------------------------

    def _move_cursor(self, new_index: int) -> None:
        total = len(self.results)
        if total == 0:
            self.cursor = 0
            self.window_start = 0
            return
        self.cursor = max(0, min(new_index, total - 1))
        if self.cursor < self.window_start:
            self.window_start = self.cursor
        elif self.cursor >= self.window_start + self.page_size:
            self.window_start = self.cursor - self.page_size + 1

    def _results_changed(self) -> None:
        self._move_cursor(self.cursor)

    def _set_query(self, query: str) -> None:
        self.query = query
        self._results_changed()

    def _cycle_roles(self, step: int) -> None:
        self.preset_index = (self.preset_index + step) % len(ROLE_PRESETS)
        self._results_changed()

    def _toggle_current(self) -> None:
        current = self.current
        if current is None:
            return
        if current.path in self.selected:
            self.selected.remove(current.path)
        else:
            self.selected.append(current.path)

    def _open_actions(self) -> None:
        self.phase = ACTIONS_PHASE
        self.action_cursor = 0

    # -- transitions -----------------------------------------------------

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[PickerOutcome]:
        """Apply one key press.

        Args:
            key: Textual key name ("up", "enter", "ctrl+r", "a", ...)
            character: Printable character for the key, if any

        Returns:
            A PickerOutcome when the picker should close, else None
        """
        if self.phase == ACTIONS_PHASE:
            return self._handle_actions_key(key, character)
        return self._handle_browse_key(key, character)

    def _handle_browse_key(self, key: str, character: Optional[str]) -> Optional[PickerOutcome]:
        if key == "escape":
            return PickerOutcome(CANCEL, [], self.roles)
        if key == "enter":
            self._open_actions()
            return None
        if self.mode != MODE_SEARCH:
            return None

        if key in NEXT_ROLE_KEYS:
            self._cycle_roles(1)
        elif key in PREV_ROLE_KEYS:
            self._cycle_roles(-1)
        elif key == "up":
            self._move_cursor(self.cursor - 1)
        elif key == "down":
            self._move_cursor(self.cursor + 1)
        elif key in TOGGLE_KEYS:
            self._toggle_current()
        elif key in ERASE_KEYS:
            self._set_query(self.query[:-1])
        elif _printable(character):
            self._set_query(self.query + character)
        return None

    def _handle_actions_key(self, key: str, character: Optional[str]) -> Optional[PickerOutcome]:
        if key == "up":
            self.action_cursor = max(0, self.action_cursor - 1)
        elif key == "down":
            self.action_cursor = min(len(ACTIONS) - 1, self.action_cursor + 1)
        elif key == "enter":
            return self._run_action()
        elif key == "escape" or key in ERASE_KEYS:
            self.phase = BROWSE
        elif _printable(character):
            self.phase = BROWSE
            if self.mode == MODE_SEARCH:
                self._set_query(self.query + character)
        return None

    def _run_action(self) -> Optional[PickerOutcome]:
        action = ACTIONS[self.action_cursor]
        files = self.target_files()
        if action.id == CANCEL or not files:
            self.phase = BROWSE
            return None
        return PickerOutcome(action.id, files, self.roles)
