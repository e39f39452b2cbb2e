# shared/common/pagination.py
"""
Custom Pagination Classes for API responses
"""

from typing import Any, Optional

from rest_framework import serializers
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response


class OffsetPagination(LimitOffsetPagination):
    """
    Optional limit/offset pagination over a plain list.

    Without ``limit`` every row from ``offset`` on is returned. The total
    before slicing is kept on ``self.count`` so views can report it.
    Out-of-range or non-integer parameters are a 400, not a silent default.
    """

    default_limit = None
    limit_query_param = 'limit'
    offset_query_param = 'offset'
    max_limit = 500

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.limit = self.get_limit(request)
        self.offset = self.get_offset(request)
        self.count = self.get_count(queryset)

        if self.limit is None:
            return list(queryset[self.offset:])
        return list(queryset[self.offset:self.offset + self.limit])

    def get_limit(self, request) -> Optional[int]:
        limit = self._query_int(request, self.limit_query_param, min_value=1, max_value=self.max_limit)
        return self.default_limit if limit is None else limit

    def get_offset(self, request) -> int:
        offset = self._query_int(request, self.offset_query_param, min_value=0)
        return offset or 0

    def get_paginated_response(self, data: Any) -> Response:
        return Response(data)

    def _query_int(self, request, param: str, **bounds) -> Optional[int]:
        raw = request.query_params.get(param)
        if raw in (None, ''):
            return None
        try:
            return serializers.IntegerField(**bounds).run_validation(raw)
        except ValidationError as e:
            raise ValidationError({param: e.detail})
