"""Technology stack detection for web pages.

Matches the signature table against page HTML in two passes (frameworks first,
then everything else), resolves known framework conflicts, applies contextual
confidence boosts, adds header-based detections and merges everything into one
confidence-ranked result.
"""

import logging
import time
from typing import Dict, Iterable, List, Mapping, Optional, Set

from webanalyzer.constants import (
    DETECTION_METHOD_HEADER,
    DETECTION_METHOD_MERGED,
    DETECTION_METHOD_PATTERN,
    FRAMEWORK_CONFIDENCE_MULTIPLIER,
    FRAMEWORK_MATCH_THRESHOLD,
    GENERAL_MATCH_THRESHOLD,
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    REQUIRES_ALL_THRESHOLD,
)
from webanalyzer.models import (
    DetectedTechnology,
    DetectionResult,
    DetectionStats,
    LegacyTechnologies,
)
from webanalyzer.signatures import (
    CONTEXTUAL_BOOSTS,
    FRAMEWORK_PRECEDENCE,
    HEADER_RULES,
    LEGACY_CATEGORY_MAP,
    SIGNATURES,
    HeaderRule,
    PatternLike,
    Signature,
)

logger = logging.getLogger(__name__)


def _clamp_confidence(value: float) -> float:
    return max(MIN_CONFIDENCE, min(value, MAX_CONFIDENCE))


def _normalize_headers(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    if not headers:
        return {}
    return {str(name).lower(): str(value) for name, value in headers.items()}


def _pattern_matches(pattern: PatternLike, html: str, html_lower: str) -> bool:
    if isinstance(pattern, str):
        return pattern.lower() in html_lower
    return pattern.search(html) is not None


class TechnologyDetector:
    """Detects technologies used by a web page from its HTML and headers.

    The detector only reads its signature and header tables, so one instance can
    be shared between threads and requests.
    """

    def __init__(
        self,
        signatures: Iterable[Signature] = SIGNATURES,
        header_rules: Iterable[HeaderRule] = HEADER_RULES,
    ):
        self.signatures = tuple(signatures)
        self.header_rules = tuple(header_rules)
        self._framework_signatures = tuple(s for s in self.signatures if s.is_framework)
        self._other_signatures = tuple(s for s in self.signatures if not s.is_framework)

    def detect(
        self,
        html: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetectionResult:
        """Detect technologies in a page.

        Args:
            html: Raw HTML of the page (may be empty)
            headers: HTTP response headers, any name casing

        Returns:
            DetectionResult with technologies sorted by confidence, the category
            index and detection stats
        """
        start = time.perf_counter()
        html = html or ""
        html_lower = html.lower()

        # Pass 1: frameworks
        framework_hits = [
            tech
            for tech in (
                self._evaluate(
                    signature,
                    html,
                    html_lower,
                    threshold=FRAMEWORK_MATCH_THRESHOLD,
                    multiplier=FRAMEWORK_CONFIDENCE_MULTIPLIER,
                )
                for signature in self._framework_signatures
            )
            if tech is not None
        ]

        suppressed = self._suppressed_names({tech.name for tech in framework_hits})
        if suppressed:
            logger.debug(f"Framework precedence suppresses: {sorted(suppressed)}")

        pattern_hits = [tech for tech in framework_hits if tech.name not in suppressed]

        # Pass 2: everything else
        for signature in self._other_signatures:
            if signature.name in suppressed:
                continue
            tech = self._evaluate(
                signature,
                html,
                html_lower,
                threshold=GENERAL_MATCH_THRESHOLD,
                multiplier=1.0,
            )
            if tech is not None:
                pattern_hits.append(tech)

        pattern_hits = self._apply_contextual_boosts(pattern_hits)

        header_hits = self.detect_from_headers(headers)
        technologies = sorted(
            self._merge(pattern_hits + header_hits),
            key=lambda tech: tech.confidence,
            reverse=True,
        )

        categorized: Dict[str, List[DetectedTechnology]] = {}
        for tech in technologies:
            for category in tech.categories:
                categorized.setdefault(category, []).append(tech)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Detected {len(technologies)} technologies in {elapsed_ms:.2f}ms "
            f"({len(html)} chars of HTML)"
        )

        return DetectionResult(
            technologies=technologies,
            categorized=categorized,
            stats=DetectionStats(
                total_signatures=len(self.signatures),
                detection_time_ms=elapsed_ms,
                html_size=len(html),
            ),
        )

    def detect_from_headers(
        self, headers: Optional[Mapping[str, str]]
    ) -> List[DetectedTechnology]:
        """Emit technologies straight from response header values.

        Each technology is reported once, by the first rule that fires for it.
        """
        normalized = _normalize_headers(headers)
        found: Dict[str, DetectedTechnology] = {}

        for rule in self.header_rules:
            if rule.name in found or not rule.matches(normalized):
                continue
            found[rule.name] = DetectedTechnology(
                name=rule.name,
                confidence=_clamp_confidence(float(rule.confidence)),
                categories=rule.categories,
                detection_method=DETECTION_METHOD_HEADER,
            )

        return list(found.values())

    def to_legacy_grouping(self, result: DetectionResult) -> LegacyTechnologies:
        """Project a detection result onto the fixed ten-bucket view."""
        legacy = LegacyTechnologies()

        for tech in result.technologies:
            for category in tech.categories:
                bucket = LEGACY_CATEGORY_MAP.get(category)
                if bucket is None:
                    continue
                names = getattr(legacy, bucket)
                if tech.name not in names:
                    names.append(tech.name)

        return legacy

    def _evaluate(
        self,
        signature: Signature,
        html: str,
        html_lower: str,
        threshold: float,
        multiplier: float,
    ) -> Optional[DetectedTechnology]:
        matched = sum(
            1 for pattern in signature.patterns
            if _pattern_matches(pattern, html, html_lower)
        )
        if matched == 0:
            return None

        ratio = matched / len(signature.patterns)
        required = REQUIRES_ALL_THRESHOLD if signature.requires_all else threshold
        if ratio < required:
            return None

        for exclude in signature.exclude:
            if exclude.search(html):
                logger.debug(
                    f"{signature.name} vetoed by exclusion pattern {exclude.pattern!r}"
                )
                return None

        version = None
        if signature.version is not None:
            version_match = signature.version.search(html)
            if version_match:
                version = version_match.group(1)

        return DetectedTechnology(
            name=signature.name,
            confidence=_clamp_confidence(signature.confidence * ratio * multiplier),
            categories=signature.categories,
            version=version,
            detection_method=DETECTION_METHOD_PATTERN,
        )

    @staticmethod
    def _suppressed_names(detected_frameworks: Set[str]) -> Set[str]:
        suppressed: Set[str] = set()
        for framework, names in FRAMEWORK_PRECEDENCE.items():
            if framework in detected_frameworks:
                suppressed.update(names)
        return suppressed

    @staticmethod
    def _apply_contextual_boosts(
        detections: List[DetectedTechnology],
    ) -> List[DetectedTechnology]:
        present = {tech.name for tech in detections}
        boosted = []

        for tech in detections:
            confidence = tech.confidence
            for name, required, points in CONTEXTUAL_BOOSTS:
                if tech.name == name and required in present:
                    confidence = _clamp_confidence(confidence + points)
            if confidence != tech.confidence:
                tech = DetectedTechnology(
                    name=tech.name,
                    confidence=confidence,
                    categories=tech.categories,
                    version=tech.version,
                    detection_method=tech.detection_method,
                )
            boosted.append(tech)

        return boosted

    @staticmethod
    def _merge(detections: List[DetectedTechnology]) -> List[DetectedTechnology]:
        merged: Dict[str, DetectedTechnology] = {}

        for tech in detections:
            existing = merged.get(tech.name)
            if existing is None:
                merged[tech.name] = tech
                continue

            categories = existing.categories + tuple(
                c for c in tech.categories if c not in existing.categories
            )
            merged[tech.name] = DetectedTechnology(
                name=tech.name,
                confidence=max(existing.confidence, tech.confidence),
                categories=categories,
                version=existing.version or tech.version,
                detection_method=DETECTION_METHOD_MERGED,
            )

        return list(merged.values())


_default_detector = TechnologyDetector()


def detect_technologies(
    html: str, headers: Optional[Mapping[str, str]] = None
) -> DetectionResult:
    """Convenience function to detect technologies with the built-in tables.

    Args:
        html: HTML content
        headers: HTTP response headers

    Returns:
        DetectionResult
    """
    return _default_detector.detect(html, headers)


def convert_to_legacy_format(result: DetectionResult) -> LegacyTechnologies:
    """Convenience wrapper around TechnologyDetector.to_legacy_grouping."""
    return _default_detector.to_legacy_grouping(result)
