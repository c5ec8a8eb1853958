"""FastAPI dependencies shared by the route modules."""

from fastapi import Request

from relay.services.transfer_service import TransferService


def get_transfer_service(request: Request) -> TransferService:
    """
    Return the TransferService built at application startup.
    """
    return request.app.state.transfer_service
