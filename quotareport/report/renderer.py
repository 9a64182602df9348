"""HTML report renderer."""
import itertools
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..quota.models import QuotaSummary, RunMetadata

CRITICAL_THRESHOLD = 80
HIGH_THRESHOLD = 50
MEDIUM_THRESHOLD = 25

TIERS = ("critical", "high", "medium", "low")


def usage_tier(percentage: float) -> str:
    """Classify a usage percentage into a presentation tier."""
    if percentage >= CRITICAL_THRESHOLD:
        return "critical"
    if percentage >= HIGH_THRESHOLD:
        return "high"
    if percentage >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def bar_width(percentage: float) -> float:
    """Progress bar fill width, kept within 0..100."""
    return max(0.0, min(float(percentage), 100.0))


def format_count(value: int) -> str:
    return f"{value:,}"


class ReportRenderer:
    """Renders aggregated quota summaries as a self-contained HTML page."""

    def __init__(self, template_name: str = "report.html.j2"):
        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["tier"] = usage_tier
        self.jinja_env.filters["bar_width"] = bar_width
        self.jinja_env.filters["thousands"] = format_count
        self.template_name = template_name

    def render(self, summaries_by_category: Mapping[str, Sequence[QuotaSummary]], metadata: RunMetadata) -> str:
        """Render the report.

        Args:
            summaries_by_category: Ordered summaries keyed by category label.
            metadata: Run information shown in the report header.

        Returns:
            str: Complete HTML document.
        """
        row_ids = itertools.count(1)
        sections = []
        for index, (label, summaries) in enumerate(summaries_by_category.items(), start=1):
            rows = []
            for summary in summaries:
                rows.append({
                    "summary": summary,
                    # Only rows with details need an id linking them to a detail row
                    "row_id": f"row-{next(row_ids)}" if summary.has_details else None,
                })
            sections.append({
                "label": label,
                "anchor": f"category-{index}",
                "rows": rows,
                "tier_counts": self._tier_counts(summaries),
            })

        template = self.jinja_env.get_template(self.template_name)
        return template.render(
            metadata=metadata,
            sections=sections,
            thresholds={
                "critical": CRITICAL_THRESHOLD,
                "high": HIGH_THRESHOLD,
                "medium": MEDIUM_THRESHOLD,
            },
        )

    def write(self, output_path: str, summaries_by_category: Mapping[str, Sequence[QuotaSummary]],
              metadata: RunMetadata) -> Path:
        """Render the report and write it to a file.

        Returns:
            Path: Path of the written file.
        """
        content = self.render(summaries_by_category, metadata)
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    @staticmethod
    def _tier_counts(summaries: Sequence[QuotaSummary]) -> Dict[str, int]:
        counts = {tier: 0 for tier in TIERS}
        for summary in summaries:
            counts[usage_tier(summary.usage_percentage)] += 1
        return counts


def render(summaries_by_category: Mapping[str, Sequence[QuotaSummary]], metadata: RunMetadata) -> str:
    """Render summaries with the default template."""
    return ReportRenderer().render(summaries_by_category, metadata)


def critical_summaries(summaries_by_category: Mapping[str, Sequence[QuotaSummary]]) -> List[QuotaSummary]:
    """Summaries at or above the critical threshold, across all categories."""
    return [
        summary
        for summaries in summaries_by_category.values()
        for summary in summaries
        if summary.usage_percentage >= CRITICAL_THRESHOLD
    ]
