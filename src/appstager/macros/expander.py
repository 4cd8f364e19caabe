"""Single-pass ${NAME} substitution over template text."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from appstager.errors import MacroResolutionError
from appstager.macros.macro_id import MACRO_NAMES, MacroId

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\$\{([^}]*)\}")


def missing_macros(text: str | None) -> list[str]:
    """Names of ${...} tokens in text that are not recognized macros."""
    if not text:
        return []
    return [name for name in _TOKEN.findall(text) if name not in MACRO_NAMES]


class MacroExpander:
    """Expands recognized macros using a fixed table of values.

    Values are substituted once and never re-scanned, so a value that
    itself contains '${...}' is emitted literally.
    """

    def __init__(self, values: Mapping[MacroId, str]) -> None:
        self._values = {MacroId(k).value: str(v) for k, v in values.items()}

    @property
    def values(self) -> dict[str, str]:
        return dict(self._values)

    def expand(
        self, text: str | None, *, strict: bool = True, source: str = "template"
    ) -> str | None:
        """Return text with every recognized ${NAME} replaced.

        In strict mode an unknown token raises MacroResolutionError naming
        the token and ``source``; otherwise it is left as-is.
        """
        if text is None:
            return None

        def _sub(match: re.Match) -> str:
            name = match.group(1)
            if name in self._values:
                return self._values[name]
            if strict:
                raise MacroResolutionError(name, source)
            logger.debug("Leaving unknown macro ${%s} in %s", name, source)
            return match.group(0)

        return _TOKEN.sub(_sub, text)
