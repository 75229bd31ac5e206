"""Web page analyzer: metadata, SEO score, technology fingerprint and performance."""

__version__ = "0.1.0"

from webanalyzer.analyzer import PageAnalyzer
from webanalyzer.crawler import (
    WebCrawler,
    ensure_public_url,
    extract_metadata,
    is_blocked_host,
    validate_url,
)
from webanalyzer.seo_analyzer import SEOAnalyzer
from webanalyzer.performance import PerformanceAnalyzer
from webanalyzer.technology_detector import (
    TechnologyDetector,
    convert_to_legacy_format,
    detect_technologies,
)
from webanalyzer.signatures import SIGNATURES, HEADER_RULES, Signature, HeaderRule
from webanalyzer.models import (
    DetectedTechnology,
    DetectionResult,
    DetectionStats,
    LegacyTechnologies,
    PageMetadata,
    FetchResult,
    SEOAnalysis,
    PerformanceMetrics,
    BasicPerformanceMetrics,
    TechLookupResult,
)
from webanalyzer.config import Config, AnalysisThresholds
from webanalyzer.exceptions import (
    WebAnalyzerError,
    InvalidURLError,
    BlockedHostError,
    InvalidAnalysisModeError,
    PerformanceAnalysisError,
    TechLookupError,
    ScreenshotError,
)

__all__ = [
    "PageAnalyzer",
    "WebCrawler",
    "ensure_public_url",
    "extract_metadata",
    "is_blocked_host",
    "validate_url",
    "SEOAnalyzer",
    "PerformanceAnalyzer",
    "TechnologyDetector",
    "convert_to_legacy_format",
    "detect_technologies",
    "SIGNATURES",
    "HEADER_RULES",
    "Signature",
    "HeaderRule",
    "DetectedTechnology",
    "DetectionResult",
    "DetectionStats",
    "LegacyTechnologies",
    "PageMetadata",
    "FetchResult",
    "SEOAnalysis",
    "PerformanceMetrics",
    "BasicPerformanceMetrics",
    "TechLookupResult",
    "Config",
    "AnalysisThresholds",
    "WebAnalyzerError",
    "InvalidURLError",
    "BlockedHostError",
    "InvalidAnalysisModeError",
    "PerformanceAnalysisError",
    "TechLookupError",
    "ScreenshotError",
]
