"""
Constants Module - Centralized configuration values
===================================================

PURPOSE: Single source of truth for the tee sheet URL, selectors, text markers
and retry cadence used across the codebase
PATTERN: Modular constants organized by category
SCOPE: Application-wide configuration values
"""
from tracking import t

from typing import Tuple

# Site
BOOKING_URL = 'https://lorabaygolf.clubhouseonline-e3.com/TeeTimes/TeeSheet.aspx'
COURSE_NAME = 'Lora Bay'
SESSION_DATE_STORAGE_KEY = 'CHO.TT.selectedDate'
# The tee sheet stores the selected day as midnight Eastern expressed in UTC.
SESSION_DATE_UTC_HOUR = 4

# Timezones
DEFAULT_REFERENCE_TIMEZONE = 'America/New_York'
DEFAULT_BROWSER_TIMEZONE = 'America/Toronto'
DEFAULT_BROWSER_LOCALE = 'en-CA'

# Booking windows
DEFAULT_FAR_HORIZON_DAYS = 30
DEFAULT_NEAR_HORIZON_DAYS = 3
DEFAULT_PARTY_SIZE = 4

# Browser context
BROWSER_VIEWPORT = {'width': 1280, 'height': 720}
BROWSER_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'

# Login form
LOGIN_USERNAME_PLACEHOLDER = 'Username'
LOGIN_PASSWORD_PLACEHOLDER = 'Password'
LOGIN_BUTTON_NAME = 'Login'

# Tee sheet DOM
BOOKING_FRAME_SELECTOR = 'iframe#module'
DATE_ITEM_SELECTOR = 'div.item.ng-scope.slick-slide'
SELECTED_DATE_SELECTOR = 'div.item.ng-scope.slick-slide.date-selected'
DATE_LABEL_SELECTOR = 'div.date.ng-binding'
COURSE_FIELD_SELECTOR = f'div.input-wpr:has(label:text-is("Golf Course")) div.input:text-is("{COURSE_NAME}")'
SLOT_INDICATOR_SELECTOR = 'div.flex-row.ng-scope div.time.ng-binding'
SLOT_ROW_SELECTOR = 'div.flex-row.ng-scope:not(.unavailable)'
SLOT_TIME_SELECTOR = 'div.teesheet-leftcol.ng-scope div.time.ng-binding'
SLOT_CAPACITY_SELECTOR = 'div.availability.ng-scope strong.value.ng-binding'
SLOT_HANDLE_ATTRIBUTE = 'data-teetime-slot'
AVAILABLE_CAPACITY_SELECTOR = f'{SLOT_ROW_SELECTOR} {SLOT_CAPACITY_SELECTOR}'

# Acquisition form
CONFLICT_TEXT_SELECTOR = 'text=/Time Cannot be Locked/i'
BOOK_NOW_SELECTOR = 'a.btn.btn-primary:has-text("BOOK NOW")'
ADD_GROUP_TEXT = 'ADD BUDDIES & GROUPS'
PARTICIPANT_GROUP_PATTERN = r'Test group \(\d+ people\)'
CONFLICT_DISMISS_SELECTORS = [
    'button:has-text("OK")',
    'button:has-text("Close")',
    'a:has-text("OK")',
    '.modal .close',
]
CONFIRMATION_NUMBER_PATTERN = r'confirmation\s*(?:#|number|no\.?)\s*:?\s*([A-Z0-9-]{4,})'

# Page text markers
TOO_EARLY_MARKER = 'will become available on'
NO_RESULTS_TEXT = 'Your search returned no times to be displayed'
NO_TIMES_WAIT_PATTERN = 'text=/no.*tee.*times.*available/i'
TOO_EARLY_WAIT_PATTERN = 'text=/will become available/i'

# Secondary channel
DEFAULT_TEE_SHEET_API_FRAGMENT = '/api/v1/teetimes'

# Timeouts (milliseconds unless noted)
TIMEOUTS = {
    'navigation': 30000,
    'date_data_load': 10000,
    'date_click_confirm': 3000,
    'availability_capture': 8000,
    'candidate_race': 3500,
    'confirmation': 5000,
    'conflict_dismiss': 1500,
}

# Retry cadence (seconds)
MAX_POLL_ATTEMPTS = 30
TOO_EARLY_DELAY_SECONDS = 1.0
SETTLE_DELAY_SECONDS = 0.5
ALL_BOOKED_STOP_AFTER_ATTEMPTS = 10
EMPTY_RESULT_BACKOFF_STEPS: Tuple[float, ...] = (1.0, 5.0, 10.0, 15.0, 30.0)
EMPTY_RESULT_BACKOFF_BASE_SECONDS = 30.0
EMPTY_RESULT_BACKOFF_JITTER_SECONDS = 90.0

# Failure reasons recorded on requests
FAILURE_DATE_SELECTION = 'Could not select date'
FAILURE_NO_AVAILABILITY = 'No available times'
FAILURE_SLOT_LOCKED = 'Time slot locked by another user'
FAILURE_BOOKING_INCOMPLETE = 'Failed to complete booking'


def session_date_value(iso_date: str) -> str:
    """Return the sessionStorage payload the tee sheet expects for a play date."""
    t('infrastructure.constants.session_date_value')
    return f'"{iso_date}T{SESSION_DATE_UTC_HOUR:02d}:00:00.000Z"'
