"""Pagination for API v1 list endpoints."""

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """25 rows per page; clients may ask for up to 200 with ``page_size``."""

    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 200


class LedgerPagination(StandardResultsSetPagination):
    """Larger pages for money listings that are usually reviewed in bulk."""

    page_size = 50
    max_page_size = 500
