"""
Result models returned across component boundaries
"""

from typing import Optional
from pydantic import BaseModel


class ActionResult(BaseModel):
    """Outcome of a remote mutation"""
    success: bool
    error: Optional[str] = None


class InsightResult(BaseModel):
    """Outcome of a weekly insights request"""
    success: bool
    summary: Optional[str] = None
    error: Optional[str] = None
