"""Tests for the on-page SEO scorer."""

from webanalyzer.config import AnalysisThresholds
from webanalyzer.seo_analyzer import SEOAnalyzer


DESCRIPTION = "Acme builds durable widgets. " * 5  # 145 characters

WELL_OPTIMIZED_HTML = f"""
<html>
  <head>
    <title>Acme Widgets - Quality Widgets for Every Need</title>
    <meta name="description" content="{DESCRIPTION}">
    <meta name="robots" content="index, follow">
    <meta property="og:title" content="Acme Widgets">
    <link rel="canonical" href="https://acme.example/">
  </head>
  <body>
    <h1>Acme Widgets</h1>
    <h2>Catalogue</h2>
    <img src="/a.png" alt="Blue widget">
    <img src="/b.png" alt="Red widget">
    <a href="/about">About</a>
    <a href="https://partner.example/" rel="nofollow sponsored">Partner</a>
  </body>
</html>
"""


class TestSEOAnalyzer:
    """Test cases for SEOAnalyzer."""

    def test_well_optimized_page(self):
        analysis = SEOAnalyzer().analyze(WELL_OPTIMIZED_HTML)

        assert analysis.score == 95
        assert analysis.issues == []
        assert analysis.details.title.optimal is True
        assert analysis.details.description.length == 145
        assert analysis.details.images.alt_coverage == 100
        assert analysis.details.links.internal == 1
        assert analysis.details.links.external == 1
        assert analysis.details.links.nofollow == 1

    def test_empty_page(self):
        analysis = SEOAnalyzer().analyze("")

        assert analysis.score == 0
        assert "Missing title" in analysis.issues
        assert "Missing meta description" in analysis.issues
        assert "No H1 tag found" in analysis.issues
        assert analysis.details.title.exists is False

    def test_short_title(self):
        analysis = SEOAnalyzer().analyze("<title>Home</title>")

        assert "Title too short (4 characters)" in analysis.issues
        assert analysis.details.title.exists is True
        assert analysis.details.title.optimal is False
        assert analysis.score == 5

    def test_long_description(self):
        html = f'<meta name="description" content="{"x" * 200}">'
        analysis = SEOAnalyzer().analyze(html)

        assert "Description too long (200 characters)" in analysis.issues
        assert analysis.score == 5

    def test_multiple_h1(self):
        analysis = SEOAnalyzer().analyze("<h1>One</h1><h1>Two</h1>")

        assert "Multiple H1 tags found" in analysis.issues
        assert analysis.details.headings.h1_count == 2
        assert analysis.score == 5

    def test_poor_alt_coverage(self):
        html = '<img src="a.png" alt="A"><img src="b.png">'
        analysis = SEOAnalyzer().analyze(html)

        assert "1 images without alt attribute" in analysis.issues
        assert analysis.details.images.alt_coverage == 50
        assert analysis.score == 5

    def test_partial_alt_coverage(self):
        html = '<img alt="1"><img alt="2"><img alt="3"><img alt="4"><img alt="">'
        analysis = SEOAnalyzer().analyze(html)

        assert analysis.details.images.without_alt == 1
        assert analysis.score == 10
        assert not any("images without alt" in issue for issue in analysis.issues)

    def test_score_capped(self):
        analysis = SEOAnalyzer().analyze(WELL_OPTIMIZED_HTML * 2)
        assert analysis.score <= 100

    def test_custom_thresholds(self):
        analyzer = SEOAnalyzer(AnalysisThresholds(title_min=1, title_max=10))
        analysis = analyzer.analyze("<title>Home</title>")

        assert analysis.details.title.optimal is True
        assert analysis.score == 15

    def test_to_dict(self):
        data = SEOAnalyzer().analyze(WELL_OPTIMIZED_HTML).to_dict()

        assert data["score"] == 95
        assert data["details"]["headings"]["has_h1"] is True
        assert set(data) == {"score", "issues", "recommendations", "details"}
