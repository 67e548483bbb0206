# File: const.py
"""Constants for the cyclecal engines.

This file centralizes defaults, configuration keys, record field names and
safety limits so the engines and their callers agree on a single spelling.
Record field names follow the camelCase shapes consumed by the existing
frontend (eventDate, reminderDays, startDate, ...).
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
PACKAGE_TITLE = "cyclecal"

# Logger
LOGGER = logging.getLogger(__package__)

# Safety limit for date calculation loops
MAX_DATE_CALCULATION_ITERATIONS = 100

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_ROLL_ELAPSED_REMINDERS = "roll_elapsed_reminders"
CONF_DEFAULT_INTERVAL_DAYS = "default_interval_days"
CONF_CONFIDENCE_SPREAD_CEILING_DAYS = "confidence_spread_ceiling_days"
CONF_TOP_TAGS_LIMIT = "top_tags_limit"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_ROLL_ELAPSED_REMINDERS = True

# Interval length used when the history holds a single interval
DEFAULT_INTERVAL_DAYS = 28

# Average interval length reported for an empty history
EMPTY_HISTORY_INTERVAL_DAYS = 0

# Standard deviation (days) at which prediction confidence reaches zero
DEFAULT_CONFIDENCE_SPREAD_CEILING_DAYS = 7.0

DEFAULT_TOP_TAGS_LIMIT = 5

DEFAULT_REMINDER_DAYS = 0

# Look-ahead window for upcoming_within
DEFAULT_UPCOMING_WINDOW_DAYS = 30

# String spellings accepted for boolean record flags
FLAG_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FLAG_FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})

# Gap samples needed before a spread (and so a confidence) is meaningful
MIN_GAPS_FOR_CONFIDENCE = 2

CONFIDENCE_MIN = 0
CONFIDENCE_MAX = 100

# Decimal places for average duration
DURATION_PRECISION = 2

# Group name for events stored without a type
EVENT_TYPE_OTHER = "other"

# ------------------------------------------------------------------------------------------------
# Recurring Event Record Fields
# ------------------------------------------------------------------------------------------------
FIELD_ID = "id"
FIELD_MONGO_ID = "_id"
FIELD_TITLE = "title"
FIELD_TYPE = "type"
FIELD_EVENT_DATE = "eventDate"
FIELD_DATE = "date"
FIELD_IS_RECURRING = "isRecurring"
FIELD_REMINDER_DAYS = "reminderDays"
FIELD_REMINDER_OFFSET_DAYS = "reminderOffsetDays"
FIELD_MONTHLY_REMINDER = "monthlyReminder"
FIELD_MONTHLY_REMINDER_DAY = "monthlyReminderDay"

# Occurrence output fields
FIELD_REMINDER_DATE = "reminderDate"
FIELD_DAYS_UNTIL_REMINDER = "daysUntilReminder"
FIELD_DAYS_UNTIL_EVENT = "daysUntilEvent"
FIELD_ORIGINAL_DATE = "originalDate"

# Event summary output fields
FIELD_TOTAL_EVENTS = "totalEvents"
FIELD_UPCOMING_EVENTS = "upcomingEvents"
FIELD_EVENTS_BY_TYPE = "eventsByType"

# ------------------------------------------------------------------------------------------------
# Cycle Interval Record Fields
# ------------------------------------------------------------------------------------------------
FIELD_START_DATE = "startDate"
FIELD_END_DATE = "endDate"
FIELD_SYMPTOMS = "symptoms"
FIELD_MOODS = "moods"
FIELD_MOOD = "mood"

# Cycle statistics output fields
FIELD_AVERAGE_CYCLE_LENGTH = "averageCycleLength"
FIELD_AVERAGE_PERIOD_LENGTH = "averagePeriodLength"
FIELD_NEXT_PREDICTED_DATE = "nextPredictedDate"
FIELD_COMMON_SYMPTOMS = "commonSymptoms"
FIELD_COMMON_MOODS = "commonMoods"
FIELD_TOTAL_CYCLES = "totalCycles"
FIELD_PREDICTION_CONFIDENCE = "predictionConfidence"
FIELD_CYCLE_LENGTHS = "cycleLengths"
