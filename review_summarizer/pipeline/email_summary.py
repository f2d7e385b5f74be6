from review_summarizer.models.insights import CategoryBuckets

_EXAMPLE_ORDER = (
    ("Security", "security"),
    ("Amenity", "amenity"),
    ("Pet-waste", "pet"),
    ("Safety", "safety"),
)


def build_email_summary(
    name: str,
    location: str,
    counts: dict[str, int],
    buckets: CategoryBuckets,
    *,
    examples_per_category: int = 3,
) -> str:
    lines = [
        f"Subject: Quick security takeaways – {name or 'Property'} ({location or 'City, ST'})",
        "",
        "Hi [Name] —",
        "",
        (
            f"I pulled public reviews for {name or 'your community'} in {location or 'your area'} "
            "and filtered for security, pet waste, amenity misuse, and safety."
        ),
        "Here’s the snapshot:",
        f"• Security mentions: {counts.get('security', 0)}",
        f"• Pet-waste mentions: {counts.get('pet', 0)}",
        f"• Amenity-misuse mentions: {counts.get('amenity', 0)}",
        f"• Safety mentions: {counts.get('safety', 0)}",
        "",
    ]

    for label, category in _EXAMPLE_ORDER:
        hits = getattr(buckets, category)
        if not hits:
            continue
        lines.append(f"{label} examples:")
        lines.extend(f"  – {hit.sentence}" for hit in hits[:examples_per_category])
        lines.append("")

    lines.extend(
        [
            "How we help (VIDISKY):",
            "• AI + live agents monitoring your existing cameras in real time",
            "• Voice-down trespassers, alert staff, or call police per protocol",
            "• Evidence-grade reports for insurers and PD",
            "",
            "Open to a 15-minute walkthrough to quantify impact (inc. pet-waste fines & amenity enforcement)?",
            "– Stan",
        ]
    )
    return "\n".join(lines)
