"""Exceptions raised by the backend client.

Every data or session call raises one of these instead of returning an
error value; views catch them at their own boundary.
"""

GENERIC_MESSAGE = "An error occurred"

# PostgREST's code for "JSON object requested, multiple (or no) rows returned"
SINGLE_ROW_CODE = "PGRST116"


class BackendError(Exception):
	def __init__(self, message: str, code: str | None = None, status: int | None = None, details=None):
		super().__init__(message)
		self.message = message
		self.code = code
		self.status = status
		self.details = details

	def __str__(self) -> str:
		return self.message or GENERIC_MESSAGE


class NoRowsError(BackendError):
	def __init__(self, table: str):
		super().__init__(
			"JSON object requested, multiple (or no) rows returned",
			code=SINGLE_ROW_CODE,
			status=406,
			details=f"The result contains 0 rows ({table})",
		)


class MultipleRowsError(BackendError):
	def __init__(self, table: str, count: int):
		super().__init__(
			"JSON object requested, multiple (or no) rows returned",
			code=SINGLE_ROW_CODE,
			status=406,
			details=f"The result contains {count} rows ({table})",
		)


class AuthError(BackendError):
	pass


def display_message(exc: Exception) -> str:
	message = str(exc) if isinstance(exc, Exception) else ""
	return message or GENERIC_MESSAGE
