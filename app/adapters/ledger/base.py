from abc import ABC, abstractmethod
from typing import Any


class AbstractLedgerClient(ABC):
	"""Interface for the external system of record receiving waitlist entries."""

	database_id: str

	@abstractmethod
	async def create_page(self, payload: dict[str, Any]) -> dict[str, Any]:
		"""Create a page (record) in the ledger.

		Args:
			payload: Page body including the parent reference and properties.

		Returns:
			dict[str, Any]: Created page as returned by the ledger service.

		Raises:
			LedgerAppError: If the service answers with an error status, times
				out, or cannot be reached.
		"""
		...

	@abstractmethod
	async def retrieve_database(self) -> dict[str, Any]:
		"""Read metadata of the configured target database.

		Returns:
			dict[str, Any]: Database object as returned by the ledger service.

		Raises:
			LedgerAppError: Same conditions as ``create_page``.
		"""
		...
