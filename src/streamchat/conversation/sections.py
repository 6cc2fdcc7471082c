"""Section derivation for the conversation log."""

from __future__ import annotations

from collections.abc import Sequence

from streamchat.conversation.models import Message, Section


def derive_sections(messages: Sequence[Message]) -> tuple[Section, ...]:
    """Partition *messages* into sections in a single pass.

    A message flagged ``starts_new_section`` closes the open section (when it
    holds anything) and seeds a new one. Every other message joins the open
    section. Only the last section is active. Concatenating the sections'
    messages always gives back *messages* unchanged.
    """
    groups: list[tuple[bool, list[Message]]] = []
    current: list[Message] = []
    current_is_new = False

    for message in messages:
        if message.starts_new_section:
            if current:
                groups.append((current_is_new, current))
            current = [message]
            current_is_new = True
        else:
            current.append(message)

    if current:
        groups.append((current_is_new, current))

    last = len(groups) - 1
    return tuple(
        Section(
            id=f"section-{index}",
            index=index,
            messages=tuple(group),
            is_new_section=is_new,
            is_active=index == last,
        )
        for index, (is_new, group) in enumerate(groups)
    )
