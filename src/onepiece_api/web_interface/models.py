# src/onepiece_api/web_interface/models.py
from typing import List, Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Admin login body. Both fields are optional here so a missing one is reported as MISSING_CREDENTIALS."""
    username: Optional[str] = Field(None, description="Admin username")
    password: Optional[str] = Field(None, description="Admin password")


class ExecuteSqlRequest(BaseModel):
    """Scripts to execute, in order."""
    fileNames: List[str] = Field(default_factory=list, description="SQL file names inside the bundled schemas directory")
