from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoaderOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp_directory: Optional[Path] = Field(default=None, examples=["./tmp"])
    keep_temp_artifact: bool = False

    def staging_dir(self) -> Path:
        return self.temp_directory or Path(tempfile.gettempdir())
