from core.filters.builder import (
    FilterBuilder,
    PageInfo,
    PageRequest,
    contains,
    is_unset,
    resolve_sort,
)

__all__ = [
    'FilterBuilder',
    'PageInfo',
    'PageRequest',
    'contains',
    'is_unset',
    'resolve_sort',
]
