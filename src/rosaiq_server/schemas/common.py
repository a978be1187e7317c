"""Field types shared by the response schemas."""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from ..clock import as_utc

# SQLite returns naive values; every stored timestamp is UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
