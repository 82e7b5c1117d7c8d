"""
Centralized Default Configuration for Quizsync.

This file serves as the "Source of Truth" for display engine settings.
These values are used as fallbacks if a setting is missing from the app config.
"""

DEFAULT_APP_CONFIGS = {
    # --- Render timing ---
    'DISPLAY_TICK_MS': 16,              # One render frame
    'DISPLAY_COALESCE_MS': 16,          # Latest-wins window for display updates
    'DISPLAY_UNLOCK_DELAY_MS': 32,      # Settle delay before the channel reopens
    'DISPLAY_QUIET_ZONE_MS': 150,       # Hold window opened on navigation start
    'DISPLAY_SETTLE_MS': 40,            # Extra hold after navigation completes
    'DISPLAY_EXPLANATION_DELAY_MS': 0,  # Delay before the producer runs

    # --- Texts ---
    'DISPLAY_LOADING_TEXT': 'Loading question…',
    'DISPLAY_NO_EXPLANATION_TEXT': 'No explanation available',

    # --- Sessions ---
    'DISPLAY_MAX_SESSIONS': 256,
}
