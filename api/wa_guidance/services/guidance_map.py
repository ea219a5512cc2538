"""
Topic registry: which guidance documents back each service category.

References are relative to a guidance root directory.
"""

from types import MappingProxyType
from typing import Literal, TypeGuard

from wa_guidance.models.guidance import GuidanceEntry

TopicId = Literal[
    "it",
    "marketing",
    "webdev",
    "software",
    "engineering",
    "staffing",
    "security",
    "presentations",
    "professional-services",
    "data-processing",
    "contracts",
]


def _entry(topic: str, label: str) -> tuple[GuidanceEntry, ...]:
    return (
        GuidanceEntry(
            reference=f"/wa-guidance/{topic}/guidance.txt",
            label=f"Interim Guidance — {label} (ESSB 5814)",
        ),
    )


GUIDANCE_BY_TOPIC: MappingProxyType[str, tuple[GuidanceEntry, ...]] = MappingProxyType(
    {
        "it": _entry("it", "Information Technology Services"),
        "marketing": _entry("marketing", "Advertising Services"),
        "webdev": _entry("webdev", "Custom Website Development"),
        "software": _entry("software", "Custom Software"),
        "engineering": _entry(
            "engineering", "Professional Services with Digital Delivery"
        ),
        "staffing": _entry("staffing", "Temporary Staffing Services"),
        "security": _entry(
            "security",
            "Investigation, Security, Security Monitoring, and Armored Car",
        ),
        "presentations": _entry("presentations", "Live Presentations"),
        "professional-services": _entry(
            "professional-services", "Professional Services & DAS Features"
        ),
        "data-processing": _entry(
            "data-processing", "Data Processing & AI Platforms"
        ),
        "contracts": _entry(
            "contracts", "Existing Contracts prior to Oct 1, 2025"
        ),
    }
)

# Cross-cutting references appended to every topic's context.
GUIDANCE_SHARED: tuple[GuidanceEntry, ...] = (
    GuidanceEntry(
        reference="/wa-guidance/shared/das-retail/guidance.txt",
        label='Interim Guidance — DAS exclusions and definition of "retail sale" (ESSB 5814)',
    ),
)


def is_valid_topic(value: object) -> TypeGuard[TopicId]:
    """Exact, case-sensitive membership test. Non-strings are never valid."""
    return isinstance(value, str) and value in GUIDANCE_BY_TOPIC


def entries_for(topic: TopicId) -> list[GuidanceEntry]:
    """Topic-specific entries followed by the shared entries, in declaration order."""
    return [*GUIDANCE_BY_TOPIC[topic], *GUIDANCE_SHARED]
