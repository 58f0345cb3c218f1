#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Textual front end for the transcript picker.

Rendering only: every key press is handed to PickerState, and the app
exits with the PickerOutcome it returns. The outcome is executed by the
caller once the terminal has been restored, so printed transcripts land
on the real stdout.
"""

from pathlib import Path
from typing import Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Static

from conv.models import SearchResult
from conv.tui.app_state import (
    ACTIONS,
    ACTIONS_PHASE,
    MODE_LATEST,
    MODE_SEARCH,
    PickerOutcome,
    PickerState,
)

BROWSE_HELP = (
    "Live search: ↑/↓ move (scrolls), Space select, Enter continue, Esc exit, "
    "Ctrl+R or ←/→ roles"
)
ACTIONS_HELP = "Action Sheet: ↑/↓ select, Enter run, Esc/Backspace back"
LATEST_HELP = "Latest file selected: press Enter for actions, Esc to exit"


def highlight(text: str, query: str, base_style: str = "") -> Text:
    """Text with every case-insensitive occurrence of ``query`` in bold yellow."""
    rendered = Text(text, style=base_style)
    if query:
        rendered.highlight_words([query], style="bold yellow", case_sensitive=False)
    return rendered


def render_result(result: SearchResult, query: str, is_cursor: bool, marked: bool) -> Text:
    """Three lines for one result: name/count/title, snippet, full path."""
    line = Text()
    line.append("> " if is_cursor else "  ", style="yellow" if is_cursor else "")
    line.append("● " if marked else "○ ")
    line.append(
        f"{result.path.name} ({result.count} hits)", style="yellow" if is_cursor else ""
    )
    if result.title:
        line.append(" — ")
        line.append_text(highlight(result.title, query))
    line.append("\n")
    if result.snippet:
        line.append_text(highlight(result.snippet, query, "dim"))
        line.append("\n")
    line.append(f"  {result.path}", style="dim")
    return line


class PickerApp(App[PickerOutcome]):
    """Search-as-you-type picker over session files, followed by an action sheet."""

    CSS_PATH = "styles/picker.tcss"
    ENABLE_COMMAND_PALETTE = False
    TITLE = "conv"

    def __init__(self, state: PickerState) -> None:
        """
        Initialize the picker.

        Args:
            state: Picker state, already loaded with the file cache
        """
        super().__init__()
        self.state = state

    def compose(self) -> ComposeResult:
        yield Static(id="picker-header")
        yield Static(id="picker-roles")
        yield Static(id="picker-body")
        yield Static(id="picker-query")

    def on_mount(self) -> None:
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        outcome = self.state.handle_key(event.key, event.character)
        if outcome is not None:
            self.exit(outcome)
            return
        self.refresh_view()

    # -- rendering -------------------------------------------------------

    def _header_text(self) -> str:
        if self.state.phase == ACTIONS_PHASE:
            return ACTIONS_HELP
        if self.state.mode == MODE_LATEST:
            return LATEST_HELP
        return BROWSE_HELP

    def _roles_text(self) -> Text:
        text = Text("Roles filter: ")
        text.append(self.state.preset, style="green")
        text.append("  (Ctrl+R or →/← to cycle)", style="dim")
        return text

    def _selection_label(self) -> str:
        names = [Path(p).name for p in self.state.target_files()]
        return ", ".join(names) if names else "none"

    def _actions_text(self) -> Text:
        text = Text(f"Selected: {self._selection_label()}\n\n", style="dim")
        for index, action in enumerate(ACTIONS):
            is_cursor = index == self.state.action_cursor
            text.append(
                f"{'>' if is_cursor else ' '} {action.label}\n",
                style="yellow" if is_cursor else "",
            )
        return text

    def _results_text(self) -> Text:
        state = self.state
        results = state.results
        if not results:
            return Text("No matches", style="dim")
        text = Text()
        for offset, result in enumerate(state.visible_results()):
            index = state.window_start + offset
            if offset:
                text.append("\n")
            text.append_text(
                render_result(
                    result,
                    state.query,
                    is_cursor=index == state.cursor,
                    marked=result.path in state.selected,
                )
            )
        shown_to = min(state.window_start + state.page_size, len(results))
        text.append(f"\n\n{state.window_start + 1}-{shown_to} of {len(results)}", style="dim")
        return text

    def _body_text(self) -> Optional[Text]:
        if self.state.phase == ACTIONS_PHASE:
            return self._actions_text()
        if self.state.mode == MODE_SEARCH:
            return self._results_text()
        return None

    def refresh_view(self) -> None:
        """Redraw every panel from the current state."""
        state = self.state
        browsing_search = state.mode == MODE_SEARCH and state.phase != ACTIONS_PHASE

        self.query_one("#picker-header", Static).update(self._header_text())
        self.query_one("#picker-roles", Static).update(self._roles_text())

        body = self.query_one("#picker-body", Static)
        content = self._body_text()
        body.update(content if content is not None else "")

        query_line = self.query_one("#picker-query", Static)
        query_text = Text("Query: ")
        query_text.append(state.query, style="green")
        query_line.update(query_text)
        query_line.set_class(not browsing_search, "hidden")
