"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Check-in outcome messages (wire format shared with the scanner app)
CHECKIN_SUCCESS_MESSAGE = "Successfully scanned"
CHECKIN_DUPLICATE_MESSAGE = "User already scanned"

# Error messages returned as {"error": ...}
MISSING_FIELDS_MESSAGE = "Missing required fields"
INVALID_PAYLOAD_MESSAGE = "Invalid payload format"
USER_NOT_FOUND_MESSAGE = "User not found"
CHECKIN_FAILED_MESSAGE = "Failed to update user status"
LIST_FAILED_MESSAGE = "Failed to export users"
CREATE_FAILED_MESSAGE = "Failed to create users"
UPDATE_FAILED_MESSAGE = "Failed to update user"
DELETE_FAILED_MESSAGE = "Failed to delete user"

# Column sizes for roster records
RECORD_ID_LENGTH = 64
MAX_TEXT_FIELD_LENGTH = 200

# Roster fields an administrator may edit. Check-in fields are owned by the
# check-in engine and never appear here.
EDITABLE_FIELDS = ("name", "title", "district", "region")

# Column order for CSV export
EXPORT_COLUMNS = (
    "id",
    "name",
    "title",
    "district",
    "region",
    "scanned",
    "scanTime",
    "scannedTimes",
    "createdAt",
)
