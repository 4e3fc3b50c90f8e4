"""
Input context models.

Encapsulates all data required to resolve a pages request.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class PageRequest(BaseModel):
    """
    Incoming request as seen by the resolution pipeline.

    This model decouples the service layer from FastAPI's Request object.
    `path` is percent-decoded with the query stripped; `raw_path` is the
    undecoded request target path.
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    host: str
    path: str
    raw_path: str = ""
    query_string: str = ""
    if_none_match: Optional[str] = None

    @property
    def query_suffix(self) -> str:
        """`?query` for building redirect locations, or an empty string."""
        return f"?{self.query_string}" if self.query_string else ""
