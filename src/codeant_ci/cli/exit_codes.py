"""Process exit codes returned by codeant-ci commands."""

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_MISSING_FILE = 2
EXIT_BAD_PRESIGN = 3
EXIT_COMPLETION_FAILED = 4
