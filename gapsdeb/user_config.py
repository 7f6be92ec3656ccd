"""i3 configuration snippet and user config updates."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gapsdeb.prompts import APPEND_USER_CONFIG, DecisionProvider, ask

logger = logging.getLogger(__name__)

GAPS_CONFIG_SNIPPET = """\
# i3-gaps settings (added by gapsdeb)
# Borders must be disabled for gaps to show on every window.
for_window [class=".*"] border pixel 0
default_border pixel 0
default_floating_border pixel 0

gaps inner 10
gaps outer 0

# Only draw gaps when a workspace has more than one container
smart_gaps on
smart_borders on

set $mode_gaps Gaps: (o) outer, (i) inner
bindsym $mod+Shift+g mode "$mode_gaps"
mode "$mode_gaps" {
        bindsym o gaps outer current plus 5
        bindsym Shift+o gaps outer current minus 5
        bindsym i gaps inner current plus 5
        bindsym Shift+i gaps inner current minus 5
        bindsym 0 gaps inner current set 0; gaps outer current set 0
        bindsym Return mode "default"
        bindsym Escape mode "default"
}
"""


def writable_config_paths(paths: list[Path]) -> list[Path]:
    """Return the paths that exist and are writable by the current user."""
    return [p for p in paths if p.is_file() and os.access(p, os.W_OK)]


def append_snippet(path: Path, snippet: str = GAPS_CONFIG_SNIPPET) -> None:
    """Append the configuration snippet to a config file."""
    with path.open("a", encoding="utf-8") as f:
        f.write("\n" + snippet)
    logger.info("Appended gaps configuration to %s", path)


def offer_user_config(paths: list[Path], decider: DecisionProvider) -> list[Path]:
    """Offer to append the snippet to each writable config file.

    Returns:
        The files that were updated.
    """
    updated: list[Path] = []
    for path in writable_config_paths(paths):
        prompt = f"Append the gaps configuration snippet to {path}?"
        if ask(decider, APPEND_USER_CONFIG, prompt=prompt):
            append_snippet(path)
            updated.append(path)
    return updated


__all__ = [
    "GAPS_CONFIG_SNIPPET",
    "append_snippet",
    "offer_user_config",
    "writable_config_paths",
]
