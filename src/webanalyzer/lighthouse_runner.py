"""
Lighthouse Performance Analyzer

Runs Google Lighthouse via CLI (headless Chrome) to collect scores, Core Web
Vitals and optimization opportunities without a PageSpeed Insights key.
"""

import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from webanalyzer.constants import LIGHTHOUSE_CATEGORIES
from webanalyzer.exceptions import PerformanceAnalysisError
from webanalyzer.lighthouse_report import parse_lighthouse_result
from webanalyzer.models import PerformanceMetrics

logger = logging.getLogger(__name__)


class LighthouseRunner:
    """Runs Lighthouse audits and parses results."""

    def __init__(
        self,
        chrome_flags: Optional[list[str]] = None,
        timeout: int = 90,
        only_categories: Optional[list[str]] = None,
        executable: str = "lighthouse",
    ):
        """
        Initialize the Lighthouse runner.

        Args:
            chrome_flags: Chrome flags (default: headless, no sandbox)
            timeout: Timeout for Lighthouse execution in seconds
            only_categories: Categories to run (performance, accessibility, best-practices, seo)
            executable: Lighthouse CLI name or path
        """
        self.chrome_flags = chrome_flags or ["--headless", "--no-sandbox"]
        self.timeout = timeout
        self.only_categories = only_categories or list(LIGHTHOUSE_CATEGORIES)
        self.executable = executable

    @staticmethod
    def is_available(executable: str = "lighthouse") -> bool:
        """Whether the Lighthouse CLI is on PATH."""
        return shutil.which(executable) is not None

    def build_command(self, url: str, output_path: str) -> list[str]:
        cmd = [
            self.executable,
            url,
            "--output=json",
            f"--output-path={output_path}",
            "--quiet",
            "--chrome-flags=" + " ".join(self.chrome_flags),
        ]
        if self.only_categories:
            cmd.append("--only-categories=" + ",".join(self.only_categories))
        return cmd

    def run_lighthouse(self, url: str) -> PerformanceMetrics:
        """
        Run Lighthouse on a URL and return parsed results.

        Args:
            url: The URL to audit

        Returns:
            PerformanceMetrics with source 'lighthouse'

        Raises:
            PerformanceAnalysisError: If the CLI is missing, fails, times out or
                writes an unreadable report
        """
        logger.info(f"Running Lighthouse on {url}")

        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as tmp_file:
            output_path = tmp_file.name

        try:
            result = subprocess.run(
                self.build_command(url, output_path),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )

            if result.returncode != 0:
                logger.error(f"Lighthouse failed for {url}: {result.stderr}")
                raise PerformanceAnalysisError(
                    f"Lighthouse exited with code {result.returncode}",
                    details={"stderr": (result.stderr or "")[-500:]},
                )

            with open(output_path, "r") as f:
                lighthouse_data = json.load(f)

        except FileNotFoundError:
            logger.error(f"Lighthouse CLI '{self.executable}' not found or wrote no report")
            raise PerformanceAnalysisError("Lighthouse CLI is not installed or wrote no report")
        except subprocess.TimeoutExpired:
            logger.error(f"Lighthouse timeout for {url} after {self.timeout}s")
            raise PerformanceAnalysisError(f"Lighthouse timed out after {self.timeout}s")
        except json.JSONDecodeError as e:
            logger.error(f"Unreadable Lighthouse report for {url}: {e}")
            raise PerformanceAnalysisError("Lighthouse produced an unreadable report")
        finally:
            Path(output_path).unlink(missing_ok=True)

        logger.info(f"Lighthouse completed successfully for {url}")
        return parse_lighthouse_result(lighthouse_data, url, source="lighthouse")
