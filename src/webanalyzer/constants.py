# src/webanalyzer/constants.py
"""Centralized constants for the web analyzer.

This module contains the scoring constants and magic numbers used across
modules. For user-configurable values, see config.py and AnalysisThresholds.
"""

# =============================================================================
# Technology Detection Constants
# =============================================================================

# Minimum match ratio for framework signatures (one strong marker out of five)
FRAMEWORK_MATCH_THRESHOLD = 0.2

# Minimum match ratio for every other signature
GENERAL_MATCH_THRESHOLD = 0.3

# Match ratio required when a signature sets requires_all
REQUIRES_ALL_THRESHOLD = 1.0

# Confidence multiplier applied to framework detections
FRAMEWORK_CONFIDENCE_MULTIPLIER = 1.2

# Confidence bounds for every reported technology
MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 100.0

# Provenance labels for detected technologies
DETECTION_METHOD_PATTERN = "pattern"
DETECTION_METHOD_HEADER = "header"
DETECTION_METHOD_MERGED = "merged"


# =============================================================================
# Fetch Constants
# =============================================================================

# Page fetch timeout in seconds
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10

# Maximum attempts for a page fetch
DEFAULT_MAX_RETRIES = 2

# Base for exponential backoff between fetch attempts
EXPONENTIAL_BACKOFF_BASE = 2

# HTTP status codes that trigger user-agent rotation
HTTP_CODES_TRIGGER_UA_ROTATION = [401, 403]

# Redirect hops followed per fetch, each target is re-checked against the host guard
MAX_REDIRECTS = 10

# Hostnames that are never fetched
BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"}

# Analysis modes accepted by PageAnalyzer
ANALYSIS_MODES = ("basic", "seo", "tech", "performance", "full")


# =============================================================================
# Performance Constants
# =============================================================================

# Maximum opportunities / diagnostics kept from a Lighthouse report
MAX_PERFORMANCE_OPPORTUNITIES = 10
MAX_PERFORMANCE_DIAGNOSTICS = 10

# PageSpeed Insights request timeout in seconds
PSI_TIMEOUT_SECONDS = 120.0

# Lighthouse categories requested from PSI and the local CLI
LIGHTHOUSE_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

# Basic performance analyzer: response time penalties (ms -> points)
BASIC_PERF_RESPONSE_PENALTIES = [
    (3000, 30, "Very slow response time (>3s) - optimize your server"),
    (1500, 15, "Slow response time (>1.5s) - consider a CDN"),
    (800, 8, "Acceptable response time, but it can be improved"),
]

# Basic performance analyzer: HTML size penalties (bytes -> points)
BASIC_PERF_SIZE_PENALTIES = [
    (1024 * 1024, 20, "Very large HTML (>1MB) - compress the content"),
    (512 * 1024, 10, "Large HTML (>512KB) - enable gzip compression"),
]

# Basic performance analyzer: missing header penalties
BASIC_PERF_NO_COMPRESSION_PENALTY = 10
BASIC_PERF_NO_CACHE_CONTROL_PENALTY = 5

# Basic performance analyzer request timeout in seconds
BASIC_PERF_TIMEOUT_SECONDS = 15


# =============================================================================
# External API Constants
# =============================================================================

# Wappalyzer lookup timeout in seconds
WAPPALYZER_TIMEOUT_SECONDS = 30.0
