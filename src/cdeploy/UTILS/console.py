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
Coloured console output for the interactive tool.
"""
from typing import Callable, Optional
import click


class Console:
    """
    Thin wrapper over ``click.echo`` giving each message kind its colour.
    ``echo`` is injectable so tests can collect lines.
    """
    def __init__(self, echo: Optional[Callable[..., None]] = None):
        self._echo = echo or click.echo

    def _emit(self, text: str, **style) -> None:
        self._echo(click.style(text, **style) if style else text)

    def plain(self, text: str = "") -> None:
        self._emit(text)

    def header(self, text: str) -> None:
        self._emit(text, fg="green")

    def title(self, text: str, fg: str = "bright_cyan") -> None:
        self._emit(text, fg=fg, bold=True)

    def step(self, text: str) -> None:
        self._emit(f"➜ {text}", fg="green")

    def info(self, text: str) -> None:
        self._emit(f"ℹ {text}", fg="blue")

    def success(self, text: str) -> None:
        self._emit(f"✔ {text}", fg="green")

    def warning(self, text: str) -> None:
        self._emit(f"⚠ {text}", fg="yellow")

    def error(self, text: str) -> None:
        self._emit(f"✘ {text}", fg="red")

    def command(self, name: str, argv) -> None:
        """Echo an external command before it runs (verbose mode)."""
        self._emit(f"[{name}] $ {' '.join(argv)}", fg="bright_black")
