from .search import SearchRequest, SearchResponse, SearchResultResponse, ensure_searchable

__all__ = ["SearchRequest", "SearchResponse", "SearchResultResponse", "ensure_searchable"]
