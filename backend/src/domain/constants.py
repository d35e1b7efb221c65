"""
Domain Constants

This module contains constant definitions valid across the domain layer.
"""

# Competitions available on the Football-Data.org free tier
SUPPORTED_COMPETITIONS = {
    "PL": "Premier League",
    "PD": "Primera Division",
    "SA": "Serie A",
    "BL1": "Bundesliga",
    "FL1": "Ligue 1",
    "DED": "Eredivisie",
    "ELC": "Championship",
    "PPL": "Primeira Liga",
    "BSA": "Campeonato Brasileiro Série A",
    "WC": "FIFA World Cup",
    "EC": "European Championship",
    "CL": "UEFA Champions League",
}

# Vendor status -> display status
FINISHED_STATUSES = {"FINISHED", "AWARDED"}
ONGOING_STATUSES = {"IN_PLAY", "PAUSED", "LIVE"}

# Tokens stripped from team names before fuzzy comparison
CLUB_NAME_TOKENS = ["fc", "cf", "sc", "ac", "afc", "bfc", "cfc", "dfc", "club"]

# Default lookback window for team statistics (days)
TEAM_STATS_LOOKBACK_DAYS = 90

# Bounded estimates for figures the vendor does not provide
ESTIMATED_CORNERS_RANGE = (5.0, 7.0)
ESTIMATED_YELLOW_CARDS_RANGE = (2.0, 3.0)
ESTIMATED_RED_CARDS_RANGE = (0.1, 0.3)

# Suggested wait after the vendor rate limit is hit (10 requests/minute)
RATE_LIMIT_RETRY_AFTER_SECONDS = 60
