"""
Lighthouse Report Parsing

Turns a Lighthouse result (``lhr``), as returned by PageSpeed Insights or
written by the local Lighthouse CLI, into PerformanceMetrics.
"""

import logging
from typing import Any, Dict, List, Optional

from webanalyzer.constants import MAX_PERFORMANCE_DIAGNOSTICS, MAX_PERFORMANCE_OPPORTUNITIES
from webanalyzer.models import (
    PerformanceDiagnostic,
    PerformanceMetrics,
    PerformanceOpportunity,
)

logger = logging.getLogger(__name__)

# Google's Core Web Vitals thresholds (in milliseconds unless noted)
METRIC_THRESHOLDS = {
    "largest_contentful_paint": {"good": 2500, "poor": 4000},
    "first_contentful_paint": {"good": 1800, "poor": 3000},
    "total_blocking_time": {"good": 200, "poor": 600},
    "cumulative_layout_shift": {"good": 0.1, "poor": 0.25},  # unitless
    "speed_index": {"good": 3400, "poor": 5800},
    "time_to_interactive": {"good": 3800, "poor": 7300},
}


def _score(category: Optional[Dict]) -> int:
    """Category score (0-1) as a rounded 0-100 integer, 0 when missing."""
    if not category:
        return 0
    return int(round((category.get("score") or 0) * 100))


def _numeric(audit: Optional[Dict], default: Optional[float] = 0.0) -> Optional[float]:
    if not audit or audit.get("numericValue") is None:
        return default
    return audit["numericValue"]


def _extract_opportunities(audits: Dict[str, Any]) -> List[PerformanceOpportunity]:
    """Audits of type 'opportunity' that report a positive saving."""
    opportunities = []

    for audit_id, audit in audits.items():
        details = audit.get("details") or {}
        if details.get("type") != "opportunity":
            continue
        if not (audit.get("numericValue") or 0) > 0:
            continue

        opportunities.append(PerformanceOpportunity(
            id=audit_id,
            title=audit.get("title", ""),
            description=audit.get("description", ""),
            score=audit.get("score") or 0,
            numeric_value=audit.get("numericValue") or 0,
            display_value=audit.get("displayValue", ""),
            details=details,
        ))
        if len(opportunities) >= MAX_PERFORMANCE_OPPORTUNITIES:
            break

    return opportunities


def _extract_diagnostics(audits: Dict[str, Any]) -> List[PerformanceDiagnostic]:
    """Audits of type 'diagnostic' that did not pass."""
    diagnostics = []

    for audit_id, audit in audits.items():
        details = audit.get("details") or {}
        if details.get("type") != "diagnostic":
            continue
        score = audit.get("score")
        if score is None or score >= 1:
            continue

        diagnostics.append(PerformanceDiagnostic(
            id=audit_id,
            title=audit.get("title", ""),
            description=audit.get("description", ""),
            score=score,
            display_value=audit.get("displayValue", ""),
            details=details,
        ))
        if len(diagnostics) >= MAX_PERFORMANCE_DIAGNOSTICS:
            break

    return diagnostics


def extract_screenshot(lhr: Dict[str, Any]) -> Optional[str]:
    """
    Pick the best screenshot data URI from a Lighthouse result.

    The final screenshot is preferred; otherwise the last filmstrip thumbnail
    (usually the final state of the page) is used.
    """
    audits = lhr.get("audits") or {}

    final = ((audits.get("final-screenshot") or {}).get("details") or {}).get("data")
    if isinstance(final, str) and final.startswith("data:image/"):
        return final

    thumbnails = ((audits.get("screenshot-thumbnails") or {}).get("details") or {}).get("items")
    if thumbnails:
        last = (thumbnails[-1] or {}).get("data")
        if isinstance(last, str) and last.startswith("data:image/"):
            return last

    return None


def parse_lighthouse_result(
    lhr: Dict[str, Any],
    requested_url: str,
    source: str = "pagespeed",
) -> PerformanceMetrics:
    """
    Parse a Lighthouse report and extract key metrics.

    Args:
        lhr: Lighthouse report JSON (lhr = Lighthouse Result)
        requested_url: URL that was audited, used when the report has no finalUrl
        source: Backend that produced the report ('pagespeed' or 'lighthouse')

    Returns:
        PerformanceMetrics
    """
    categories = lhr.get("categories") or {}
    audits = lhr.get("audits") or {}

    metrics = PerformanceMetrics(
        url=lhr.get("finalUrl") or requested_url,
        source=source,
        # Scores (0-100)
        performance_score=_score(categories.get("performance")),
        accessibility_score=_score(categories.get("accessibility")),
        best_practices_score=_score(categories.get("best-practices")),
        seo_score=_score(categories.get("seo")),
        # Core Web Vitals and lab metrics
        first_contentful_paint=_numeric(audits.get("first-contentful-paint")),
        largest_contentful_paint=_numeric(audits.get("largest-contentful-paint")),
        total_blocking_time=_numeric(audits.get("total-blocking-time")),
        cumulative_layout_shift=_numeric(audits.get("cumulative-layout-shift")),
        speed_index=_numeric(audits.get("speed-index")),
        time_to_interactive=_numeric(audits.get("interactive")),
        first_input_delay=_numeric(audits.get("max-potential-fid"), default=None),
        interaction_to_next_paint=_numeric(
            audits.get("interaction-to-next-paint"), default=None
        ),
        analysis_time=(lhr.get("timing") or {}).get("total") or 0,
        user_agent=lhr.get("userAgent") or "Unknown",
        screenshot=extract_screenshot(lhr),
        opportunities=_extract_opportunities(audits),
        diagnostics=_extract_diagnostics(audits),
    )

    logger.info(
        f"[{source}] {metrics.url}: Performance={metrics.performance_score}, "
        f"LCP={metrics.largest_contentful_paint}ms, CLS={metrics.cumulative_layout_shift}"
    )
    return metrics


def get_metrics_status(metrics: Dict[str, Any]) -> Dict[str, str]:
    """
    Categorize metrics into good/needs-improvement/poor based on Google thresholds.

    Args:
        metrics: Metric values keyed by PerformanceMetrics field name

    Returns:
        Dictionary with status for each thresholded metric
    """
    statuses = {}
    for name, threshold in METRIC_THRESHOLDS.items():
        value = metrics.get(name)
        if value is None:
            statuses[name] = "unknown"
        elif value <= threshold["good"]:
            statuses[name] = "good"
        elif value <= threshold["poor"]:
            statuses[name] = "needs-improvement"
        else:
            statuses[name] = "poor"
    return statuses
