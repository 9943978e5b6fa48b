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
Compose-style variable interpolation.
"""
import re
from typing import Any, Mapping


class InterpolationError(ValueError):
    """Raised for ``${VAR:?message}`` when VAR is unset (or empty)."""


class EnvironmentInterpolator:
    """
    Interpolates ``$VAR``, ``${VAR}``, ``${VAR:-default}``, ``${VAR-default}``,
    ``${VAR:+alt}``, ``${VAR+alt}``, ``${VAR:?err}`` and ``${VAR?err}``.
    Defaults may themselves contain placeholders, e.g. ``${IMG:-${REG}/app}``.
    ``$$`` is a literal dollar sign. Unset plain variables become ''.
    """
    NAME = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
    BRACED = re.compile(r'(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:?[-+?])(?P<arg>.*))?', re.DOTALL)

    @classmethod
    def interpolate(cls, template: str, context: Mapping[str, str]) -> str:
        """
        Interpolates variables in the template using the provided context.

        :param template: Text containing placeholders.
        :param context: Variable values.
        :return: The interpolated text.
        :raises InterpolationError: For a required variable that is missing
            or a malformed placeholder.
        """
        out = []
        i = 0
        n = len(template)
        while i < n:
            ch = template[i]
            if ch != '$':
                out.append(ch)
                i += 1
                continue

            nxt = template[i + 1:i + 2]
            if nxt == '$':
                out.append('$')
                i += 2
            elif nxt == '{':
                end = cls._closing_brace(template, i + 2)
                if end == -1:
                    raise InterpolationError(f"Unterminated placeholder in {template!r}")
                out.append(cls._expand(template[i + 2:end], context))
                i = end + 1
            else:
                match = cls.NAME.match(template, i + 1)
                if match:
                    out.append(context.get(match.group(0), ''))
                    i = match.end()
                else:
                    out.append('$')
                    i += 1
        return ''.join(out)

    @classmethod
    def interpolate_tree(cls, value: Any, context: Mapping[str, str]) -> Any:
        """
        Interpolates every string scalar of a parsed YAML document.
        Mapping keys and non-string scalars are left as they are.
        """
        if isinstance(value, str):
            return cls.interpolate(value, context)
        if isinstance(value, dict):
            return {k: cls.interpolate_tree(v, context) for k, v in value.items()}
        if isinstance(value, list):
            return [cls.interpolate_tree(v, context) for v in value]
        return value

    @staticmethod
    def _closing_brace(text: str, start: int) -> int:
        """Index of the '}' closing a placeholder body starting at ``start``."""
        depth = 1
        for i in range(start, len(text)):
            if text[i] == '{':
                depth += 1
            elif text[i] == '}':
                depth -= 1
                if depth == 0:
                    return i
        return -1

    @classmethod
    def _expand(cls, body: str, context: Mapping[str, str]) -> str:
        match = cls.BRACED.fullmatch(body)
        if not match:
            raise InterpolationError(f"Invalid interpolation format for ${{{body}}}")

        name = match.group('name')
        op = match.group('op')
        value = context.get(name)
        if op is None:
            return value or ''

        # ':' variants treat empty the same as unset
        present = bool(value) if op.startswith(':') else value is not None
        kind = op[-1]
        # the argument is only expanded when it is used
        if kind == '-':
            return value if present else cls.interpolate(match.group('arg'), context)
        if kind == '+':
            return cls.interpolate(match.group('arg'), context) if present else ''
        if not present:
            message = cls.interpolate(match.group('arg'), context)
            raise InterpolationError(message or f"Required variable {name} is missing a value")
        return value
