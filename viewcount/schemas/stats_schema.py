from pydantic import BaseModel


class PageStatsOut(BaseModel):
    page_key: str
    views: int
    visitors: int
