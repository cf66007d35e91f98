"""
Product catalog loaded from CSV and searched through the LLM.
"""

from pathlib import Path
from typing import List
import json
import logging

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from wizybot.services.ai.search_service import ItemSearchService

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = [
    "displayTitle", "embeddingText", "url", "imageUrl", "productType",
    "discount", "price", "variants", "createDate",
]


class ProductCatalogError(Exception):
    """Raised when the product catalog cannot be loaded"""
    pass


class ProductNotFoundError(LookupError):
    """Raised when a search finds no relevant products"""
    pass


class ProductSearchError(Exception):
    """Raised when a product search fails for any other reason"""
    pass


class Product(BaseModel):
    """One catalog row; serialized with the catalog's column names"""
    model_config = ConfigDict(populate_by_name=True)

    display_title: str = Field(alias="displayTitle")
    embedding_text: str = Field(default="", alias="embeddingText")
    url: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    product_type: str = Field(default="", alias="productType")
    discount: str = ""
    price: str = ""
    variants: str = ""
    create_date: str = Field(default="", alias="createDate")


class ProductService:
    def __init__(
        self,
        products_path: str,
        search_service: ItemSearchService,
        constraints: str = "Must select 2 items."
    ):
        self.products_path = Path(products_path)
        self.search_service = search_service
        self.constraints = constraints
        self.products: List[Product] = []

    @property
    def is_loaded(self) -> bool:
        return bool(self.products)

    def load_products(self) -> List[Product]:
        """
        Load the catalog from CSV. Every column is read as text.

        Raises:
            ProductCatalogError: if the file is missing, unreadable or lacks displayTitle
        """
        try:
            df = pd.read_csv(self.products_path, dtype=str, keep_default_na=False, skip_blank_lines=True)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ProductCatalogError(f"Failed to load products: {e}") from e

        if "displayTitle" not in df.columns:
            raise ProductCatalogError(
                f"Failed to load products: {self.products_path} has no displayTitle column"
            )

        known_columns = [c for c in PRODUCT_COLUMNS if c in df.columns]
        self.products = [Product(**row) for row in df[known_columns].to_dict("records")]
        logger.info(f"Loaded {len(self.products)} products from {self.products_path}")
        return self.products

    async def search_by_name(self, name: str) -> str:
        """
        Find products related to `name`.

        Returns:
            JSON array of the relevant product records

        Raises:
            ProductNotFoundError: if the search selects nothing
            ProductSearchError: if the search fails otherwise
        """
        try:
            titles = [product.display_title for product in self.products]
            indices = await self.search_service.search_items(name, titles, self.constraints)
            relevant = self._select(indices)
        except Exception as e:
            logger.exception(f"Error during product search: {e}")
            raise ProductSearchError(f"Unable to search products: {e}") from e

        if not relevant:
            raise ProductNotFoundError(f"No products found for: {name}")

        return json.dumps([product.model_dump(by_alias=True) for product in relevant])

    def _select(self, indices: List[int]) -> List[Product]:
        selected = []
        for index in indices:
            if not 1 <= index <= len(self.products):
                logger.warning(f"Ignoring out-of-range product index {index}")
                continue
            selected.append(self.products[index - 1])
        return selected
