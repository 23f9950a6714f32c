"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from hnreader.services.reader import ReaderSession


def get_reader(request: Request) -> ReaderSession:
    """Provide the process-wide ReaderSession."""
    reader = getattr(request.app.state, "reader", None)
    if reader is None:
        raise HTTPException(status_code=503, detail="Reader is not ready")
    return reader


# Type aliases for commonly used dependencies
ReaderDep = Annotated[ReaderSession, Depends(get_reader)]
