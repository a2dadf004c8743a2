"""Deterministic adventure copy used when AI generation is unavailable."""
from typing import Iterable

from adventure_api.domain.adventure.models import Participant


def participant_names(participants: Iterable[Participant]) -> str:
    names = ", ".join(p.username for p in participants)
    return names or "friends"


def template_description(title: str, participants: Iterable[Participant]) -> str:
    return " ".join([
        f"Idea: {title}.",
        f"Crew: {participant_names(participants)}.",
        "It will be fun and memorable.",
    ])


def template_summary(title: str, participants: Iterable[Participant], description: str) -> str:
    return " ".join([
        f'{participant_names(participants)} completed "{title}".',
        f"Recap: {description[:120]}...",
    ])


def content_type_from_filename(filename: str | None) -> str | None:
    """Image content type by extension; None when unknown."""
    if not filename:
        return None
    lower = filename.lower()
    if lower.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    if lower.endswith(".png"):
        return "image/png"
    if lower.endswith(".webp"):
        return "image/webp"
    return None
