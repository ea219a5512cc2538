"""
Guidance document loader.

Reads the plain-text guidance documents referenced by the topic registry
from a guidance root directory. Documents for one topic are read
concurrently; the returned sections always follow registry order.
"""

import asyncio
import logging
from pathlib import Path

from wa_guidance.core.errors import DocumentUnavailableError
from wa_guidance.core.telemetry import get_tracer
from wa_guidance.models.guidance import GuidanceEntry, GuidanceMetadata
from wa_guidance.services.guidance_map import (
    GUIDANCE_BY_TOPIC,
    GUIDANCE_SHARED,
    TopicId,
    entries_for,
)

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"


def resolve_reference(entry: GuidanceEntry, base_dir: str | Path) -> Path:
    """Join a registry reference onto the guidance root, never as an absolute path."""
    return Path(base_dir) / entry.reference.lstrip("/")


async def load_document(entry: GuidanceEntry, base_dir: str | Path) -> str:
    """
    Load one guidance document and prefix it with its citation header.

    Raises:
        DocumentUnavailableError: The file is missing or unreadable.
    """
    path = resolve_reference(entry, base_dir)
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentUnavailableError(str(path), str(exc)) from exc
    return f"Source: {entry.label}\n\n{text.strip()}"


async def _load_shared_document(
    entry: GuidanceEntry, base_dir: str | Path
) -> str | None:
    try:
        return await load_document(entry, base_dir)
    except DocumentUnavailableError as exc:
        logger.warning("Optional shared guidance not available: %s", exc.path)
        return None


async def load_guidance_for_topic(topic: TopicId, base_dir: str | Path) -> list[str]:
    """
    Load every document for a topic, followed by the shared documents.

    A missing topic document fails the whole load. A missing shared
    document is logged and left out.
    """
    with get_tracer().start_as_current_span("guidance.load_documents") as span:
        entries = entries_for(topic)
        required = len(GUIDANCE_BY_TOPIC[topic])
        span.set_attribute("guidance.topic", topic)
        span.set_attribute("guidance.entry_count", len(entries))

        sections = await asyncio.gather(
            *(
                load_document(entry, base_dir)
                if index < required
                else _load_shared_document(entry, base_dir)
                for index, entry in enumerate(entries)
            )
        )
        loaded = [section for section in sections if section is not None]
        span.set_attribute("guidance.loaded_count", len(loaded))
        return loaded


def get_guidance_metadata(base_dir: str | Path | None) -> GuidanceMetadata:
    """Read metadata.json from the guidance root. Never raises."""
    if base_dir is not None:
        path = Path(base_dir) / METADATA_FILENAME
        try:
            return GuidanceMetadata.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.debug("Guidance metadata unavailable at %s: %s", path, exc)
    return GuidanceMetadata(
        note="Metadata not available - guidance may be provided externally",
    )


def find_missing_documents(base_dir: str | Path) -> list[GuidanceEntry]:
    """Return every registry entry whose document does not exist under base_dir."""
    missing: list[GuidanceEntry] = []
    seen: set[GuidanceEntry] = set()
    for entries in (*GUIDANCE_BY_TOPIC.values(), GUIDANCE_SHARED):
        for entry in entries:
            if entry in seen:
                continue
            seen.add(entry)
            if not resolve_reference(entry, base_dir).is_file():
                missing.append(entry)
    return missing
