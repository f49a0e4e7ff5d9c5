"""Pydantic models validating Foodora GraphQL responses.

A response that does not match these models is rejected as a whole.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FoodoraModel(BaseModel):
    """Base model accepting upstream camelCase names."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Product Schemas
# ============================================================================


class ProductAttribute(FoodoraModel):
    key: str
    value: str


class ActiveCampaign(FoodoraModel):
    benefit_quantity: float = Field(..., alias="benefitQuantity")
    cart_item_usage_limit: float | None = Field(..., alias="cartItemUsageLimit")
    description: str
    discount_type: str = Field(..., alias="discountType")
    discount_value: float = Field(..., alias="discountValue")
    end_time: str = Field(..., alias="endTime")
    id: str
    is_auto_addable: bool = Field(..., alias="isAutoAddable")
    is_benefit: bool = Field(..., alias="isBenefit")
    is_trigger: bool = Field(..., alias="isTrigger")
    name: str
    teaser_format: str | None = Field(..., alias="teaserFormat")
    total_trigger_threshold_float: float | None = Field(..., alias="totalTriggerThresholdFloat")
    trigger_quantity: float = Field(..., alias="triggerQuantity")
    type: str


class ProductBadge(FoodoraModel):
    text: str
    type: str


class WeightValue(FoodoraModel):
    unit: str
    value: float


class WeightableAttributes(FoodoraModel):
    weighted_original_price: float = Field(..., alias="weightedOriginalPrice")
    weighted_price: float = Field(..., alias="weightedPrice")
    weight_value: WeightValue = Field(..., alias="weightValue")


class FoodLabellingInfo(FoodoraModel):
    label_title: str = Field(..., alias="labelTitle")
    label_values: list[str] = Field(..., alias="labelValues")


class FoodLabelling(FoodoraModel):
    additives: list[FoodLabellingInfo] | None = None
    allergens: list[FoodLabellingInfo] | None = None
    nutrition_facts: list[FoodLabellingInfo] | None = Field(default=None, alias="nutritionFacts")
    product_claims: list[FoodLabellingInfo] | None = Field(default=None, alias="productClaims")
    product_infos: list[FoodLabellingInfo] | None = Field(default=None, alias="productInfos")
    warnings: list[FoodLabellingInfo] | None = None


class FoodoraProduct(FoodoraModel):
    """Product as returned by the category listing and product details.

    ``attributes`` is nullable on listings. ``food_labelling`` is only
    present on product details.
    """

    attributes: list[ProductAttribute] | None
    active_campaigns: list[ActiveCampaign] | None = Field(..., alias="activeCampaigns")
    badges: list[str]
    description: str
    favourite: bool
    global_catalog_id: str = Field(..., alias="globalCatalogID")
    is_available: bool = Field(..., alias="isAvailable")
    name: str
    nmr_ad_id: str = Field(..., alias="nmrAdID")
    original_price: float = Field(..., alias="originalPrice")
    packaging_charge: float = Field(..., alias="packagingCharge")
    parent_id: str = Field(..., alias="parentID")
    price: float
    product_badges: list[ProductBadge] | None = Field(..., alias="productBadges")
    product_id: str = Field(..., alias="productID")
    stock_amount: float = Field(..., alias="stockAmount")
    stock_prediction: str = Field(..., alias="stockPrediction")
    tags: list[str]
    type: str
    urls: list[str]
    vendor_id: str = Field(..., alias="vendorID")
    weightable_attributes: WeightableAttributes | None = Field(..., alias="weightableAttributes")
    food_labelling: FoodLabelling | None = Field(default=None, alias="foodLabelling")

    def attribute(self, key: str) -> str | None:
        """Look up an attribute value by key."""
        for attribute in self.attributes or []:
            if attribute.key == key:
                return attribute.value
        return None


# ============================================================================
# Category Product List
# ============================================================================


class CategoryProductGroup(FoodoraModel):
    """A subcategory grouping returned for a top-level category."""

    id: str
    name: str
    items: list[FoodoraProduct]


class CategoryProductList(FoodoraModel):
    category_products: list[CategoryProductGroup] | None = Field(..., alias="categoryProducts")


class CategoryProductListData(FoodoraModel):
    category_product_list: CategoryProductList = Field(..., alias="categoryProductList")


class CategoryProductListResponse(FoodoraModel):
    data: CategoryProductListData

    @property
    def groups(self) -> list[CategoryProductGroup]:
        return self.data.category_product_list.category_products or []


# ============================================================================
# Product Details
# ============================================================================


class ShopItemsList(FoodoraModel):
    headline: str
    localized_headline: str = Field(..., alias="localizedHeadline")
    request_id: str = Field(..., alias="requestID")
    shop_item_id: str = Field(..., alias="shopItemID")
    shop_items: list[dict[str, Any]] = Field(..., alias="shopItems")
    shop_item_type: str = Field(..., alias="shopItemType")
    swimlane_filter_type: str = Field(..., alias="swimlaneFilterType")
    tracking_id: str = Field(..., alias="trackingID")
    swimlane_tracking_key: str = Field(..., alias="swimlaneTrackingKey")


class PageInfo(FoodoraModel):
    is_last: bool = Field(..., alias="isLast")
    page_number: int = Field(..., alias="pageNumber")


class Tracking(FoodoraModel):
    experiment_id: str = Field(..., alias="experimentID")
    experiment_variation: str = Field(..., alias="experimentVariation")


class CrossSellProducts(FoodoraModel):
    shop_items_list: list[ShopItemsList] = Field(..., alias="shopItemsList")
    page_info: PageInfo | None = Field(..., alias="pageInfo")
    tracking: Tracking


class ProductDetails(FoodoraModel):
    cross_sell_products: CrossSellProducts | None = Field(default=None, alias="crossSellProducts")
    product: FoodoraProduct


class ProductDetailsData(FoodoraModel):
    product_details: ProductDetails = Field(..., alias="productDetails")


class ProductDetailsResponse(FoodoraModel):
    data: ProductDetailsData
