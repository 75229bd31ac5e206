"""On-page SEO scoring."""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from webanalyzer.config import AnalysisThresholds, default_thresholds
from webanalyzer.models import (
    HeadingDetails,
    ImageDetails,
    LinkDetails,
    SEOAnalysis,
    SEODetails,
    TextElementDetails,
)

logger = logging.getLogger(__name__)

MAX_SEO_SCORE = 100


class SEOAnalyzer:
    """Scores a single page on title, description, headings, images and links.

    Points are additive and capped at 100:

    - title within bounds +15, present but off-length +5
    - description within bounds +15, present but off-length +5
    - an H1 +10 (more than one H1 -5), any H2 +10
    - image alt coverage 100% +15, partial coverage +10, below that +5
    - internal links +10, robots meta +5, canonical link +5, Open Graph +10
    """

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def analyze(self, html: str) -> SEOAnalysis:
        """Analyze HTML and return the SEO score with issues and recommendations."""
        soup = BeautifulSoup(html or "", "html.parser")
        analysis = SEOAnalysis(details=SEODetails())
        score = 0

        score += self._score_title(soup, analysis)
        score += self._score_description(soup, analysis)
        score += self._score_headings(soup, analysis)
        score += self._score_images(soup, analysis)
        score += self._score_links(soup, analysis)
        score += self._score_extras(soup, analysis)

        analysis.score = min(score, MAX_SEO_SCORE)
        logger.debug(f"SEO score {analysis.score} with {len(analysis.issues)} issues")
        return analysis

    def _score_title(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        title_tag = soup.find("title")
        title = title_tag.get_text() if title_tag else ""

        if not title:
            analysis.issues.append("Missing title")
            analysis.recommendations.append("Add a unique, descriptive title")
            return 0

        t = self.thresholds
        length = len(title)
        optimal = t.title_min <= length <= t.title_max
        analysis.details.title = TextElementDetails(exists=True, length=length, optimal=optimal)

        if optimal:
            return 15

        too = "short" if length < t.title_min else "long"
        analysis.issues.append(f"Title too {too} ({length} characters)")
        analysis.recommendations.append(
            f"Keep the title between {t.title_min}-{t.title_max} characters"
        )
        return 5

    def _score_description(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        tag = soup.find("meta", attrs={"name": "description"})
        description = tag.get("content") if tag else None

        if not description:
            analysis.issues.append("Missing meta description")
            analysis.recommendations.append("Add a unique meta description")
            return 0

        t = self.thresholds
        length = len(description)
        optimal = t.meta_description_min <= length <= t.meta_description_max
        analysis.details.description = TextElementDetails(
            exists=True, length=length, optimal=optimal
        )

        if optimal:
            return 15

        too = "short" if length < t.meta_description_min else "long"
        analysis.issues.append(f"Description too {too} ({length} characters)")
        analysis.recommendations.append(
            f"Keep the meta description between "
            f"{t.meta_description_min}-{t.meta_description_max} characters"
        )
        return 5

    def _score_headings(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        h1_count = len(soup.find_all("h1"))
        h2_count = len(soup.find_all("h2"))
        headings = HeadingDetails(
            h1_count=h1_count,
            h2_count=h2_count,
            h3_count=len(soup.find_all("h3")),
            has_h1=h1_count > 0,
            multiple_h1=h1_count > 1,
        )
        analysis.details.headings = headings
        score = 0

        if headings.has_h1:
            score += 10
            if headings.multiple_h1:
                analysis.issues.append("Multiple H1 tags found")
                analysis.recommendations.append("Use a single H1 tag per page")
                score -= 5
        else:
            analysis.issues.append("No H1 tag found")
            analysis.recommendations.append("Add a single, descriptive H1 tag")

        if headings.h2_count > 0:
            score += 10
        else:
            analysis.recommendations.append("Add H2 tags to structure the content")

        return score

    def _score_images(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        images = soup.find_all("img")
        with_alt = sum(1 for img in images if (img.get("alt") or "").strip())
        details = ImageDetails(
            total=len(images),
            with_alt=with_alt,
            without_alt=len(images) - with_alt,
        )
        analysis.details.images = details

        if not images:
            return 0

        details.alt_coverage = with_alt / len(images) * 100

        if details.alt_coverage == 100:
            return 15
        if details.alt_coverage >= self.thresholds.image_alt_partial_coverage:
            analysis.recommendations.append("Add alt attributes to the remaining images")
            return 10

        analysis.issues.append(f"{details.without_alt} images without alt attribute")
        analysis.recommendations.append("Add descriptive alt attributes to all images")
        return 5

    def _score_links(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        links = LinkDetails()

        for link in soup.find_all("a", href=True):
            href = link["href"]
            if not href:
                continue
            if href.startswith("http") or href.startswith("//"):
                links.external += 1
            else:
                links.internal += 1

            rel = link.get("rel") or []
            if "nofollow" in " ".join(rel).lower():
                links.nofollow += 1

        analysis.details.links = links

        if links.internal > 0:
            return 10
        analysis.recommendations.append("Add internal links to improve navigation")
        return 0

    def _score_extras(self, soup: BeautifulSoup, analysis: SEOAnalysis) -> int:
        score = 0

        if soup.find("meta", attrs={"name": "robots"}):
            score += 5
        else:
            analysis.recommendations.append("Consider a robots meta tag to control indexing")

        if soup.find("link", rel="canonical"):
            score += 5
        else:
            analysis.recommendations.append("Add a canonical URL to avoid duplicate content")

        og_tag = soup.find(
            "meta", attrs={"property": lambda value: bool(value) and value.startswith("og:")}
        )
        if og_tag:
            score += 10
        else:
            analysis.recommendations.append("Add Open Graph tags to improve social sharing")

        return score
