# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
The "list, pick a number, confirm" interaction used by the management screens,
written as an explicit state machine so it can be driven by a terminal or a script.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
from ..UTILS.console import Console


class SelectionState(str, Enum):
    IDLE = "idle"
    LISTING = "listing"
    AWAITING_SELECTION = "awaiting_selection"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class SelectionOutcome(str, Enum):
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    INVALID = "invalid"
    EMPTY = "empty"


@dataclass
class SelectionResult:
    outcome: SelectionOutcome
    # None together with CONFIRMED means "all items"
    item: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.outcome == SelectionOutcome.CONFIRMED


def is_yes(answer: str) -> bool:
    """Only a single 'y' or 'Y' counts as yes."""
    return answer.strip() in ("y", "Y")


class SelectionFlow:
    """
    Idle -> Listing -> AwaitingSelection -> AwaitingConfirmation -> Idle.

    ``q`` cancels at the selection step. Empty input selects every item when
    ``allow_all`` is set. Any invalid number ends the flow with INVALID.
    """
    def __init__(self,
                 items: List[str],
                 column: str,
                 select_prompt: str,
                 confirm_prompt: Callable[[Optional[str]], str],
                 console: Optional[Console] = None,
                 allow_all: bool = False,
                 empty_message: str = "Nothing to show"):
        self.items = list(items)
        self.column = column
        self.select_prompt = select_prompt
        self.confirm_prompt = confirm_prompt
        self.console = console or Console()
        self.allow_all = allow_all
        self.empty_message = empty_message
        self.state = SelectionState.IDLE
        self.result: Optional[SelectionResult] = None
        self._pending: Optional[str] = None

    def start(self) -> None:
        """Prints the numbered list and waits for a selection."""
        if self.state != SelectionState.IDLE:
            raise RuntimeError(f"Cannot start selection in state {self.state.value}")
        self.result = None
        self.state = SelectionState.LISTING
        if not self.items:
            self.console.warning(self.empty_message)
            self._finish(SelectionOutcome.EMPTY)
            return

        self.console.header(f"No.\t{self.column}")
        for i, item in enumerate(self.items, start=1):
            self.console.plain(f"{i}\t{item}")
        self.state = SelectionState.AWAITING_SELECTION

    @property
    def prompt(self) -> Optional[str]:
        """Text to show for the next input, or None when no input is expected."""
        if self.state == SelectionState.AWAITING_SELECTION:
            return self.select_prompt
        if self.state == SelectionState.AWAITING_CONFIRMATION:
            return self.confirm_prompt(self._pending)
        return None

    def feed(self, text: str) -> None:
        """Advances the flow with one line of user input."""
        text = (text or "").strip()
        if self.state == SelectionState.AWAITING_SELECTION:
            self._on_selection(text)
        elif self.state == SelectionState.AWAITING_CONFIRMATION:
            if is_yes(text):
                self._finish(SelectionOutcome.CONFIRMED, self._pending)
            else:
                self.console.info("Operation cancelled")
                self._finish(SelectionOutcome.DECLINED, self._pending)
        else:
            raise RuntimeError(f"No input expected in state {self.state.value}")

    def _on_selection(self, text: str) -> None:
        if text.lower() == "q":
            self._finish(SelectionOutcome.CANCELLED)
            return
        if not text and self.allow_all:
            self._pending = None
            self.state = SelectionState.AWAITING_CONFIRMATION
            return
        index = self._parse_index(text)
        if index is not None:
            self._pending = self.items[index]
            self.state = SelectionState.AWAITING_CONFIRMATION
            return
        self.console.error("Invalid number!")
        self._finish(SelectionOutcome.INVALID)

    def _parse_index(self, text: str) -> Optional[int]:
        """Zero-based index for a 1-based ASCII number, or None if out of range."""
        if not (text.isascii() and text.isdecimal()):
            return None
        try:
            number = int(text)
        except ValueError:
            return None
        if 1 <= number <= len(self.items):
            return number - 1
        return None

    def _finish(self, outcome: SelectionOutcome, item: Optional[str] = None) -> None:
        self.result = SelectionResult(outcome, item)
        self._pending = None
        self.state = SelectionState.IDLE

    def run(self, ask: Callable[[str], str]) -> SelectionResult:
        """
        Drives the whole flow, reading answers from ``ask``.
        """
        self.start()
        while self.prompt is not None:
            self.feed(ask(self.prompt))
        return self.result
