"""Clients for third-party analysis APIs."""

from webanalyzer.external.pagespeed_insights import PageSpeedInsightsAPI
from webanalyzer.external.wappalyzer import WappalyzerAPI

__all__ = [
    "PageSpeedInsightsAPI",
    "WappalyzerAPI",
]
