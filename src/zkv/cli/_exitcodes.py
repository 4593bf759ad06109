"""Process exit codes for the zkv CLI."""

SUCCESS = 0
USAGE_ERROR = 1
NOT_FOUND = 2
CONFLICT = 3
BACKEND_ERROR = 4
