"""
List Query Domain Model

Request-style paging and sorting parameters, converted into query options.
"""

from typing import Optional

from pydantic import BaseModel, Field

from modelbase.repositories.options import ListOpt, SortOrder, page_opt, sort_opt


class ListQuery(BaseModel):
    """List Query Conditions"""

    # Pagination
    page: int = Field(1, ge=1, description="Page Number")
    page_size: int = Field(20, ge=1, le=100, description="Items Per Page")
    # Sorting
    sort_by: Optional[str] = Field(
        None, pattern=r"^[A-Za-z_][A-Za-z0-9_]*$", description="Sort Field"
    )
    sort_order: str = Field("desc", pattern="^(asc|desc)$", description="Sort Order")

    def to_options(self) -> list[ListOpt]:
        """
        Convert to query options

        Returns:
            list[ListOpt]: [sort (if sort_by is set), page]
        """
        opts: list[ListOpt] = []
        if self.sort_by:
            opts.append(sort_opt(self.sort_by, SortOrder(self.sort_order)))
        opts.append(page_opt(self.page, self.page_size))
        return opts
