import datetime

from pydantic import BaseModel


class Session(BaseModel):
    date: datetime.date
