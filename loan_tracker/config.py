"""Centralized configuration for the Loan Tracker engine.

This module contains all magic numbers, default values, and business rule
constants used by the validation, ledger and statistics services. Runtime
overrides go through ``EngineConfig`` in ``data_structures``.
"""

# =============================================================================
# INTEREST
# =============================================================================

# Default annual interest rate (8.25%)
DEFAULT_INTEREST_RATE = 0.0825

# Day count used to turn the annual rate into a daily rate
DAYS_PER_YEAR = 365

# =============================================================================
# VALIDATION RULES
# =============================================================================

# Smallest and largest amount a single transaction may carry
MIN_AMOUNT = 0.01
MAX_AMOUNT = 999999999.99

# Maximum notes length, measured after sanitization
MAX_NOTE_LENGTH = 500

# Amounts closer than this are considered the same for duplicate checks
DUPLICATE_TOLERANCE = 0.01

# =============================================================================
# TRANSACTION TYPES
# =============================================================================

LOAN_OUT_LABEL = "Loan Out"
PAYMENT_LABEL = "Payment"

# Type label used for the synthetic "interest to today" export row
CURRENT_INTEREST_LABEL = "Current Interest"
CURRENT_INTEREST_NOTE = "Interest accrued to today"

# =============================================================================
# DISPLAY FORMATS
# =============================================================================

# Date format for storage and backups (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Date format for display
DATE_FORMAT_DISPLAY = "%b %d, %Y"

CURRENCY_SYMBOL = "$"

# =============================================================================
# STORAGE / EXPORT
# =============================================================================

DATA_VERSION = "1.0"
APP_VERSION = "2.0.0"

DEFAULT_DB_NAME = "loan_tracker.db"
BACKUP_PREFIX = "loan_tracker_backup_"
EXPORT_PREFIX = "loan_tracker_"

# Settings key holding a persisted interest rate override
SETTING_INTEREST_RATE = "interest_rate"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL_ENV_VAR = "LOAN_TRACKER_LOG_LEVEL"
