"""
Matchup Helper - Champion Matchup Notes

A local-first notebook for League of Legends matchups: per-matchup notes,
tags and builds with version history, plus a log of played matches.
"""

__version__ = "0.1.0"
