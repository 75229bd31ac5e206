"""Command-line interface for the web analyzer."""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

from webanalyzer.analyzer import PageAnalyzer
from webanalyzer.config import Config
from webanalyzer.constants import ANALYSIS_MODES
from webanalyzer.crawler import WebCrawler, ensure_public_url
from webanalyzer.exceptions import WebAnalyzerError
from webanalyzer.lighthouse_report import get_metrics_status
from webanalyzer.logging_config import setup_logging
from webanalyzer.models import DetectionResult
from webanalyzer.technology_detector import TechnologyDetector


def _write_output(data: Any, output_file: Optional[str]) -> None:
    """Print JSON to stdout or write it to a file."""
    output = json.dumps(data, indent=2, default=str)
    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def print_analysis(result: Dict[str, Any]) -> None:
    """Print an analysis response in a formatted way."""
    print(f"\n{'=' * 60}")
    print(f"Analysis for: {result.get('url')}")
    print(f"{'=' * 60}")

    if result.get("error"):
        print(f"\n❌ {result['error']}")

    print(f"\n  • Title: {result.get('title') or '-'}")
    print(f"  • Description: {result.get('description') or '-'}")
    print(f"  • Image: {result.get('image') or '-'}")
    print(f"  • Favicon: {result.get('favicon') or '-'}")

    seo = result.get("seo")
    if seo:
        print(f"\n📊 SEO Score: {seo['score']}/100")
        if seo["issues"]:
            print("\n⚠️  Issues:")
            for issue in seo["issues"]:
                print(f"  • {issue}")
        if seo["recommendations"]:
            print("\n💡 Recommendations:")
            for rec in seo["recommendations"]:
                print(f"  • {rec}")

    technologies = result.get("technologies")
    if technologies and any(technologies.values()):
        print("\n🧩 Technologies:")
        for bucket, names in technologies.items():
            if names:
                print(f"  • {bucket}: {', '.join(names)}")

    performance = result.get("performance")
    if performance:
        if performance.get("error"):
            print(f"\n⚡ Performance: {performance['error']}")
        elif "performance_score" in performance:
            print(f"\n⚡ Performance ({performance['source']}):")
            print(f"  • Performance: {performance['performance_score']}/100")
            print(f"  • Accessibility: {performance['accessibility_score']}/100")
            print(f"  • Best practices: {performance['best_practices_score']}/100")
            print(f"  • SEO: {performance['seo_score']}/100")
            statuses = get_metrics_status(performance)
            for metric, status in statuses.items():
                label = metric.replace("_", " ").capitalize()
                print(f"  • {label}: {performance[metric]} ({status})")
        else:
            print(f"\n⚡ Performance (basic): {performance['score']}/100")
            print(f"  • Response time: {performance['response_time_ms']:.0f}ms")
            for rec in performance.get("recommendations", []):
                print(f"  • {rec}")

    print(f"\n{'=' * 60}\n")


def print_detection(url: str, result: DetectionResult) -> None:
    """Print detected technologies as a table."""
    print(f"\nTechnologies detected on {url}:\n")
    if not result.technologies:
        print("  (none)")
    for tech in result.technologies:
        version = f" {tech.version}" if tech.version else ""
        print(
            f"  {tech.confidence:6.1f}  {tech.name}{version}"
            f"  [{', '.join(tech.categories)}]  ({tech.detection_method})"
        )
    stats = result.stats
    print(
        f"\n{stats.total_signatures} signatures checked against "
        f"{stats.html_size} characters in {stats.detection_time_ms:.1f}ms\n"
    )


def analyze_command(args):
    """Analyze a URL."""
    config = Config.from_env()
    analyzer = PageAnalyzer(config)

    try:
        result = asyncio.run(analyzer.analyze(args.url, analysis=args.analysis))
    except WebAnalyzerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)
    finally:
        analyzer.close()

    if args.output == "json":
        _write_output(result, args.output_file)
    else:
        print_analysis(result)


def detect_command(args):
    """Fetch a URL and run the local technology detector."""
    config = Config.from_env()

    try:
        url = ensure_public_url(args.url)
    except WebAnalyzerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    crawler = WebCrawler(user_agent=config.user_agent, timeout=config.timeout)
    try:
        fetch_result = crawler.fetch(url)
    finally:
        crawler.close()
    if not fetch_result.success:
        print(f"Error: {fetch_result.error}")
        sys.exit(1)

    detector = TechnologyDetector()
    detection = detector.detect(fetch_result.html, fetch_result.headers)

    if args.output == "json":
        data = detection.to_dict()
        data["legacy"] = detector.to_legacy_grouping(detection).to_dict()
        _write_output(data, args.output_file)
    else:
        print_detection(url, detection)


def lookup_command(args):
    """Look up a URL with the hosted Wappalyzer API."""
    from webanalyzer.external.wappalyzer import WappalyzerAPI

    config = Config.from_env()

    try:
        url = ensure_public_url(args.url)
        client = WappalyzerAPI(config.wappalyzer_api_key)
        result = asyncio.run(client.lookup(url))
    except WebAnalyzerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    if args.output == "json":
        _write_output(result.to_dict(), args.output_file)
        return

    print(f"\n{result.total_technologies} technologies for {result.url} "
          f"({result.analysis_time_ms:.0f}ms):\n")
    for tech in result.technologies:
        categories = ", ".join(c.get("name", "") for c in tech.get("categories", []))
        version = f" {tech['version']}" if tech.get("version") else ""
        print(f"  {tech.get('confidence', 0):3}  {tech.get('name')}{version}  [{categories}]")


def screenshot_command(args):
    """Save a PNG screenshot of a URL."""
    from webanalyzer.screenshot import capture_screenshot

    try:
        png = asyncio.run(capture_screenshot(args.url, full_page=args.full_page))
    except WebAnalyzerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    with open(args.output_file, "wb") as f:
        f.write(png)
    print(f"Screenshot written to {args.output_file}")


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="Web Analyzer - metadata, SEO, technology and performance analysis of web pages"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging verbosity (default: LOG_LEVEL from the environment, else INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command parser
    analyze_parser = subparsers.add_parser("analyze", help="Analyze a URL.")
    analyze_parser.add_argument("url", help="URL to analyze")
    analyze_parser.add_argument(
        "--analysis",
        "-a",
        choices=list(ANALYSIS_MODES),
        default="basic",
        help="Analysis mode (default: basic)",
    )
    analyze_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    analyze_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    analyze_parser.set_defaults(func=analyze_command)

    # Detect command parser
    detect_parser = subparsers.add_parser(
        "detect", help="Detect the technologies of a URL with the local signatures."
    )
    detect_parser.add_argument("url", help="URL to inspect")
    detect_parser.add_argument(
        "--output", "-o", choices=["text", "json"], default="text",
        help="Output format (default: text)",
    )
    detect_parser.add_argument(
        "--output-file", "-f", help="Write output to file (only for json format)",
    )
    detect_parser.set_defaults(func=detect_command)

    # Lookup command parser
    lookup_parser = subparsers.add_parser(
        "lookup", help="Look up the technologies of a URL with the Wappalyzer API."
    )
    lookup_parser.add_argument("url", help="URL to look up")
    lookup_parser.add_argument(
        "--output", "-o", choices=["text", "json"], default="text",
        help="Output format (default: text)",
    )
    lookup_parser.add_argument(
        "--output-file", "-f", help="Write output to file (only for json format)",
    )
    lookup_parser.set_defaults(func=lookup_command)

    # Screenshot command parser
    screenshot_parser = subparsers.add_parser(
        "screenshot", help="Save a PNG screenshot of a URL."
    )
    screenshot_parser.add_argument("url", help="URL to capture")
    screenshot_parser.add_argument(
        "--output-file", "-f", required=True, help="PNG file to write",
    )
    screenshot_parser.add_argument(
        "--full-page", action="store_true", help="Capture the full scrollable page",
    )
    screenshot_parser.set_defaults(func=screenshot_command)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
    except WebAnalyzerError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    # Configure logging based on flags, falling back to LOG_LEVEL
    setup_logging(
        level=args.log_level or config.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
