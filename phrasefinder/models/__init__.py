from phrasefinder.models.keyword import KeywordRecord
from phrasefinder.models.search_engine_result import SearchEngineResult
from phrasefinder.models.finding import Finding

__all__ = ["KeywordRecord", "SearchEngineResult", "Finding"]
