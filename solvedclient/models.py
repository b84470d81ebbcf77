from typing import List

from pydantic import BaseModel


class SolvedStatus(BaseModel):
    file: int
    field: int
    solved: bool


class UnsolvedFields(BaseModel):
    file: int
    first: int
    last: int
    fields: List[int]
