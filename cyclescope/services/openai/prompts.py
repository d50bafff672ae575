"""
Instructions sent to the domain analysis assistant.

The assistant itself carries the long-form analyst persona. The message built
here tells it which domain is being analyzed, which indicators the attached
charts belong to, in which order the charts arrive, and the JSON it must
return.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from cyclescope.domain.catalog import DomainDefinition, chart_urls


OUTPUT_FORMAT = """{
  "as_of_date": "YYYY-MM-DD",
  "dimension_name": "<domain name>",
  "dimension_code": "<domain code>",
  "indicators": [
    {
      "indicator_id": "<id>",
      "indicator_name": "<name>",
      "symbol": "<symbol>",
      "role": "<role>",
      "long_term": {"timeframe": "...", "analysis": "...", "takeaway": "..."},
      "short_term": {"timeframe": "...", "analysis": "...", "takeaway": "..."}
    }
  ],
  "integrated_dimension_read": {"bullets": ["<Indicator>: <one-line summary>"]},
  "overall_conclusion": {"summary": "<2-3 sentences>"},
  "dimension_tone": {"tone_headline": "<short phrase>", "tone_bullets": ["..."]}
}"""


def build_domain_instructions(domain: DomainDefinition, as_of_date: date) -> str:
    """Build the single instruction block for one domain analysis."""
    urls = chart_urls(domain)

    parts: list[str] = [
        f"Domain: {domain.name} (code: {domain.code})",
        f"As-of date: {as_of_date.isoformat()}",
        f"Description: {domain.description}",
        "",
        f"Indicators ({len(domain.indicators)}):",
    ]

    position = 1
    chart_lines: list[str] = []
    for number, indicator in enumerate(domain.indicators, start=1):
        parts.append(
            f"{number}. {indicator.name} [{indicator.symbol}] (id: {indicator.id}) - {indicator.role}"
        )
        if indicator.long_term_chart_url:
            chart_lines.append(f"- Image {position}: {indicator.name} long-term chart")
            position += 1
        chart_lines.append(f"- Image {position}: {indicator.name} short-term chart")
        position += 1

    parts.append("")
    parts.append(f"{len(urls)} chart images are attached in this order:")
    parts.extend(chart_lines)

    missing_long_term = [i.name for i in domain.indicators if not i.long_term_chart_url]
    if missing_long_term:
        parts.append("")
        parts.append(
            "No long-term chart is available for: "
            + ", ".join(missing_long_term)
            + ". Base their long_term section on the short-term chart and say so."
        )

    parts.extend([
        "",
        "Analyze every indicator on both timeframes, then give the integrated read,",
        "the overall conclusion and the dimension tone.",
        f"Use \"{domain.code}\" as dimension_code and \"{domain.name}\" as dimension_name.",
        "Respond with a single JSON object only, in exactly this format:",
        OUTPUT_FORMAT,
    ])

    return "\n".join(parts)


def build_message_content(instructions: str, image_urls: list[str]) -> list[dict[str, Any]]:
    """Message content: the instruction text followed by the images in order."""
    content: list[dict[str, Any]] = [{"type": "text", "text": instructions}]
    content.extend(
        {"type": "image_url", "image_url": {"url": url}} for url in image_urls
    )
    return content
