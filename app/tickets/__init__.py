"""Ticket domain service and ticket code generation."""

from .codes import TicketCodeGenerator, random_code, sequence_code
from .service import TicketService

__all__ = [
    "TicketCodeGenerator",
    "TicketService",
    "random_code",
    "sequence_code",
]
