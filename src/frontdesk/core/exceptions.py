"""FrontDesk exception hierarchy."""

from __future__ import annotations


class FrontDeskError(Exception):
    """Base exception for all FrontDesk errors."""


class InvalidRequestError(FrontDeskError):
    """A request is missing a required field or carries an invalid value."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class TicketNotFoundError(FrontDeskError):
    """No ticket exists with the given id."""

    def __init__(self, ticket_id: str) -> None:
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id!r} not found")


class TicketConflictError(FrontDeskError):
    """Ticket already left the pending state."""

    def __init__(self, ticket_id: str, status: str) -> None:
        self.ticket_id = ticket_id
        self.status = status
        super().__init__(f"Ticket {ticket_id!r} is already {status}")


class StoreUnavailableError(FrontDeskError):
    """Backing store (Redis, DynamoDB) could not be reached."""
