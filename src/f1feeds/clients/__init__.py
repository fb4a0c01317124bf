"""Upstream API clients."""

from f1feeds.clients.ergast import ErgastClient, ErgastHosts
from f1feeds.clients.openf1 import OpenF1Client

__all__ = ["ErgastClient", "ErgastHosts", "OpenF1Client"]
