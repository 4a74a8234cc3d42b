"""
PaginationStrategy module for handling different API pagination patterns
"""

from enum import Enum
from typing import Dict, Protocol


class PaginationType(str, Enum):
    """Supported pagination conventions"""
    OFFSET = 'offset'
    CURSOR = 'cursor'
    PAGE = 'page'


class PaginationStrategy(Protocol):
    """Protocol for different pagination strategies"""

    page_size: int

    def get_page_params(self, page_num: int) -> Dict[str, int]:
        """Return query parameters for a 1-based page number"""
        ...


def _check_page_num(page_num: int) -> None:
    if page_num < 1:
        raise ValueError(f"Page numbers start at 1, got {page_num}")


class OffsetLimitPagination:
    """Offset/limit pagination: offset = (page - 1) * page_size"""

    def __init__(self, page_size: int, offset_param: str = 'offset', limit_param: str = 'limit'):
        self.page_size = page_size
        self.offset_param = offset_param
        self.limit_param = limit_param

    def get_page_params(self, page_num: int) -> Dict[str, int]:
        """Calculate offset for the requested page"""
        _check_page_num(page_num)
        return {
            self.offset_param: (page_num - 1) * self.page_size,
            self.limit_param: self.page_size
        }


class CursorBasedPagination:
    """
    Cursor pagination using the page number as the cursor value

    The server's own next-cursor token is never read, so this only works
    against APIs that accept a sequential cursor.
    """

    def __init__(self, page_size: int, cursor_param: str = 'cursor', limit_param: str = 'limit'):
        self.page_size = page_size
        self.cursor_param = cursor_param
        self.limit_param = limit_param

    def get_page_params(self, page_num: int) -> Dict[str, int]:
        """Use the page number as cursor"""
        _check_page_num(page_num)
        return {
            self.cursor_param: page_num,
            self.limit_param: self.page_size
        }


class PageBasedPagination:
    """Page number / page size pagination"""

    def __init__(self, page_size: int, page_param: str = 'page', size_param: str = 'pageSize'):
        self.page_size = page_size
        self.page_param = page_param
        self.size_param = size_param

    def get_page_params(self, page_num: int) -> Dict[str, int]:
        _check_page_num(page_num)
        return {
            self.page_param: page_num,
            self.size_param: self.page_size
        }


class PaginationFactory:
    """Factory for creating appropriate pagination strategy based on config"""

    STRATEGIES = {
        PaginationType.OFFSET: OffsetLimitPagination,
        PaginationType.CURSOR: CursorBasedPagination,
        PaginationType.PAGE: PageBasedPagination
    }

    @classmethod
    def create_strategy(cls, pagination_type: PaginationType, page_size: int) -> PaginationStrategy:
        """
        Create pagination strategy instance for a pagination type

        Args:
            pagination_type: One of the PaginationType members (or its string value)
            page_size: Number of items requested per page

        Returns:
            Strategy whose get_page_params builds the query parameters

        Raises:
            ValueError: If the type is unknown or page_size is not positive
        """
        try:
            strategy_type = PaginationType(pagination_type)
        except ValueError:
            raise ValueError(f"Unsupported pagination strategy: {pagination_type}") from None

        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        strategy_class = cls.STRATEGIES[strategy_type]
        return strategy_class(page_size)
