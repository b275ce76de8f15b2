"""
MindTrade App - Trading Journal Client

A thin client for the MindTrade trading-journal backend. Logs trades,
derives today's rule status, maps history filters to query strings,
streams the AI coach over SSE and exports trade history to CSV.
"""

__version__ = "0.1.0"
__author__ = "MindTrade Team"
