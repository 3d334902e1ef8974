from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, condecimal

from booking_engine.domain.value_objects.datetime_range import ensure_utc

Money = condecimal(max_digits=12, decimal_places=2, ge=0)

# Naive datetimes on the wire are read as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
