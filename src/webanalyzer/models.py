"""Data models for web page analysis."""

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Optional
from datetime import datetime


# ============================================================================
# Technology Detection Models
# ============================================================================

@dataclass(frozen=True)
class DetectedTechnology:
    """A technology detected on a page."""

    name: str
    confidence: float  # 0-100
    categories: tuple[str, ...]
    version: Optional[str] = None
    detection_method: str = "pattern"  # pattern/header/merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "confidence": round(self.confidence, 2),
            "categories": list(self.categories),
            "version": self.version,
            "detection_method": self.detection_method,
        }


@dataclass(frozen=True)
class DetectionStats:
    """Statistics about a single detection run."""

    total_signatures: int = 0
    detection_time_ms: float = 0.0
    html_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_signatures": self.total_signatures,
            "detection_time_ms": round(self.detection_time_ms, 3),
            "html_size": self.html_size,
        }


@dataclass
class DetectionResult:
    """Deduplicated, confidence-ranked technologies plus the category index."""

    technologies: list[DetectedTechnology] = field(default_factory=list)
    categorized: dict[str, list[DetectedTechnology]] = field(default_factory=dict)
    stats: DetectionStats = field(default_factory=DetectionStats)

    @classmethod
    def empty(cls) -> "DetectionResult":
        """Result used when the page could not be fetched or analyzed."""
        return cls()

    @property
    def names(self) -> list[str]:
        return [tech.name for tech in self.technologies]

    def get(self, name: str) -> Optional[DetectedTechnology]:
        for tech in self.technologies:
            if tech.name == name:
                return tech
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "technologies": [tech.to_dict() for tech in self.technologies],
            "categorized": {
                category: [tech.to_dict() for tech in techs]
                for category, techs in self.categorized.items()
            },
            "stats": self.stats.to_dict(),
        }


@dataclass
class LegacyTechnologies:
    """Fixed ten-bucket view kept for older response consumers."""

    frameworks: list[str] = field(default_factory=list)
    cms: list[str] = field(default_factory=list)
    analytics: list[str] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)
    cdn: list[str] = field(default_factory=list)
    servers: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    databases: list[str] = field(default_factory=list)
    ecommerce: list[str] = field(default_factory=list)
    marketing: list[str] = field(default_factory=list)

    @classmethod
    def bucket_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.bucket_names())

    def to_dict(self) -> dict[str, list[str]]:
        return asdict(self)


# ============================================================================
# Page Fetch and Metadata Models
# ============================================================================

@dataclass
class FetchResult:
    """Result of fetching a single page."""

    url: str
    html: str = ""
    headers: dict[str, str] = field(default_factory=dict)  # lower-cased names
    status_code: int = 0
    load_time: float = 0.0  # seconds
    success: bool = True
    error: Optional[str] = None


@dataclass
class PageMetadata:
    """Preview metadata extracted from a web page."""

    url: str  # canonical URL, or the requested URL when none is declared
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None  # og:image
    favicon: Optional[str] = None  # absolute URL

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "url": self.url,
            "favicon": self.favicon,
        }


# ============================================================================
# SEO Models
# ============================================================================

@dataclass
class TextElementDetails:
    """Presence and length of a title or description."""

    exists: bool = False
    length: int = 0
    optimal: bool = False


@dataclass
class HeadingDetails:
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    has_h1: bool = False
    multiple_h1: bool = False


@dataclass
class ImageDetails:
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    alt_coverage: float = 0.0  # percent


@dataclass
class LinkDetails:
    internal: int = 0
    external: int = 0
    nofollow: int = 0


@dataclass
class SEODetails:
    title: TextElementDetails = field(default_factory=TextElementDetails)
    description: TextElementDetails = field(default_factory=TextElementDetails)
    headings: HeadingDetails = field(default_factory=HeadingDetails)
    images: ImageDetails = field(default_factory=ImageDetails)
    links: LinkDetails = field(default_factory=LinkDetails)


@dataclass
class SEOAnalysis:
    """On-page SEO score (0-100) with issues and recommendations."""

    score: int = 0
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    details: SEODetails = field(default_factory=SEODetails)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ============================================================================
# Performance Models
# ============================================================================

@dataclass
class PerformanceOpportunity:
    id: str
    title: str
    description: str
    score: float
    numeric_value: float
    display_value: str = ""
    details: Optional[dict] = None


@dataclass
class PerformanceDiagnostic:
    id: str
    title: str
    description: str
    score: float
    display_value: str = ""
    details: Optional[dict] = None


@dataclass
class PerformanceMetrics:
    """Lighthouse scores and metrics, from PageSpeed Insights or a local run."""

    url: str
    source: str  # pagespeed or lighthouse

    # Scores (0-100)
    performance_score: int = 0
    accessibility_score: int = 0
    best_practices_score: int = 0
    seo_score: int = 0

    # Core Web Vitals and lab metrics (ms, CLS unitless)
    first_contentful_paint: float = 0.0
    largest_contentful_paint: float = 0.0
    cumulative_layout_shift: float = 0.0
    total_blocking_time: float = 0.0
    speed_index: float = 0.0
    time_to_interactive: float = 0.0
    first_input_delay: Optional[float] = None  # max-potential-fid
    interaction_to_next_paint: Optional[float] = None

    analysis_time: float = 0.0  # ms, as reported by Lighthouse
    user_agent: str = "Unknown"
    screenshot: Optional[str] = None  # data URI

    opportunities: list[PerformanceOpportunity] = field(default_factory=list)
    diagnostics: list[PerformanceDiagnostic] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["fetched_at"] = self.fetched_at.isoformat()
        return data


@dataclass
class BasicPerformanceMetrics:
    """Timing-only performance estimate used when Lighthouse is unavailable."""

    url: str
    score: int = 0
    response_time_ms: float = 0.0
    ttfb_ms: float = 0.0
    content_size: int = 0
    status_code: int = 0
    recommendations: list[str] = field(default_factory=list)
    source: str = "basic"
    fetched_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["fetched_at"] = self.fetched_at.isoformat()
        return data


# ============================================================================
# Hosted Technology Lookup Models
# ============================================================================

@dataclass
class TechLookupResult:
    """Technologies reported by the hosted Wappalyzer lookup API."""

    url: str
    technologies: list[dict[str, Any]] = field(default_factory=list)
    analysis_time_ms: float = 0.0

    @property
    def total_technologies(self) -> int:
        return len(self.technologies)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "technologies": self.technologies,
            "total_technologies": self.total_technologies,
            "analysis_time_ms": round(self.analysis_time_ms, 1),
        }
