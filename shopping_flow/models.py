"""
Dataclass models for the shopping flow pipeline.

`to_dict()` produces the camelCase wire shape consumed by the storefront;
`from_dict()` accepts that shape (and snake_case keys) back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .enums import DeliveryType, IntentType, SavingsPriority, SubstitutionType


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


# ─────────────────────────────────────────────────────────────
# Intent
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class IntentEntities:
    product: Optional[str] = None
    quantity: Optional[int] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.product is not None:
            out["product"] = self.product
        if self.quantity is not None:
            out["quantity"] = self.quantity
        if self.category is not None:
            out["category"] = self.category
        if self.brand is not None:
            out["brand"] = self.brand
        if self.price_min is not None or self.price_max is not None:
            price_range: Dict[str, float] = {}
            if self.price_min is not None:
                price_range["min"] = self.price_min
            if self.price_max is not None:
                price_range["max"] = self.price_max
            out["priceRange"] = price_range
        return out

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "IntentEntities":
        data = data or {}
        price_range = _pick(data, "priceRange", "price_range", default={}) or {}
        quantity = data.get("quantity")
        return cls(
            product=data.get("product"),
            quantity=int(quantity) if quantity is not None else None,
            category=data.get("category"),
            brand=data.get("brand"),
            price_min=price_range.get("min"),
            price_max=price_range.get("max"),
        )


@dataclass(frozen=True)
class Intent:
    type: IntentType
    entities: IntentEntities
    confidence: float
    original_query: str
    english_query: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "entities": self.entities.to_dict(),
            "confidence": self.confidence,
            "originalQuery": self.original_query,
            "englishQuery": self.english_query or self.original_query,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intent":
        raw_type = data.get("type") or IntentType.SEARCH_PRODUCT.value
        try:
            intent_type = IntentType(raw_type)
        except ValueError:
            intent_type = IntentType.GENERAL_QUERY
        original = _pick(data, "originalQuery", "original_query", default="") or ""
        return cls(
            type=intent_type,
            entities=IntentEntities.from_dict(data.get("entities")),
            confidence=float(data.get("confidence", 0.0)),
            original_query=original,
            english_query=_pick(data, "englishQuery", "english_query", default=original) or original,
        )


# ─────────────────────────────────────────────────────────────
# Product
# ─────────────────────────────────────────────────────────────
@dataclass
class WarehouseInfo:
    location: str
    distance: float
    estimated_delivery: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "distance": self.distance,
            "estimatedDelivery": self.estimated_delivery,
        }


@dataclass
class SupplierInfo:
    id: str
    name: str
    reliability: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "reliability": self.reliability}


@dataclass
class Product:
    id: str
    name: str
    description: str
    price: float
    brand: str
    category: str
    image: str
    rating: float
    reviews: int
    in_stock: bool
    quantity: int
    warehouse: WarehouseInfo
    supplier: SupplierInfo
    original_price: Optional[float] = None
    discount: Optional[float] = None
    is_great_value: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "brand": self.brand,
            "category": self.category,
            "image": self.image,
            "rating": self.rating,
            "reviews": self.reviews,
            "inStock": self.in_stock,
            "quantity": self.quantity,
            "warehouse": self.warehouse.to_dict(),
            "supplier": self.supplier.to_dict(),
        }
        if self.original_price is not None:
            out["originalPrice"] = self.original_price
        if self.discount is not None:
            out["discount"] = self.discount
        if self.is_great_value is not None:
            out["isGreatValue"] = self.is_great_value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        wh = data.get("warehouse") or {}
        sup = data.get("supplier") or {}
        original_price = _pick(data, "originalPrice", "original_price")
        discount = data.get("discount")
        great_value = _pick(data, "isGreatValue", "is_great_value")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            price=float(data.get("price", 0) or 0),
            brand=str(data.get("brand", "")),
            category=str(data.get("category", "general")),
            image=str(data.get("image", "")),
            rating=float(data.get("rating", 0) or 0),
            reviews=int(data.get("reviews", 0) or 0),
            in_stock=bool(_pick(data, "inStock", "in_stock", default=True)),
            quantity=int(data.get("quantity", 0) or 0),
            warehouse=WarehouseInfo(
                location=str(wh.get("location", "")),
                distance=float(wh.get("distance", 0) or 0),
                estimated_delivery=str(_pick(wh, "estimatedDelivery", "estimated_delivery", default="")),
            ),
            supplier=SupplierInfo(
                id=str(sup.get("id", "")),
                name=str(sup.get("name", "")),
                reliability=float(sup.get("reliability", 0) or 0),
            ),
            original_price=float(original_price) if original_price is not None else None,
            discount=float(discount) if discount is not None else None,
            is_great_value=bool(great_value) if great_value is not None else None,
        )


@dataclass
class SearchResult:
    products: List[Product]
    query: str
    refined_query: str
    suggestions: List[str]
    total_results: int
    search_time: float
    best_match: Optional[Product] = None
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products": [p.to_dict() for p in self.products],
            "query": self.query,
            "refinedQuery": self.refined_query,
            "suggestions": list(self.suggestions),
            "totalResults": self.total_results,
            "searchTime": self.search_time,
            "bestMatch": self.best_match.to_dict() if self.best_match else None,
            "usedFallback": self.used_fallback,
        }


# ─────────────────────────────────────────────────────────────
# Delivery
# ─────────────────────────────────────────────────────────────
@dataclass
class Coordinates:
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Coordinates"]:
        if not data:
            return None
        try:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip_code: str
    coordinates: Optional[Coordinates] = None
    delivery_instructions: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
        }
        if self.coordinates:
            out["coordinates"] = self.coordinates.to_dict()
        if self.delivery_instructions:
            out["deliveryInstructions"] = self.delivery_instructions
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeliveryAddress":
        return cls(
            street=str(data.get("street", "")),
            city=str(data.get("city", "")),
            state=str(data.get("state", "")),
            zip_code=str(_pick(data, "zipCode", "zip_code", "zip", default="")),
            coordinates=Coordinates.from_dict(data.get("coordinates")),
            delivery_instructions=_pick(data, "deliveryInstructions", "delivery_instructions"),
        )


@dataclass
class WarehouseLocation:
    address: str
    city: str
    state: str
    zip: str
    coordinates: Coordinates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "coordinates": self.coordinates.to_dict(),
        }


@dataclass
class OperationalHours:
    open: str
    close: str
    is_open_24_hours: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"open": self.open, "close": self.close, "isOpen24Hours": self.is_open_24_hours}


@dataclass
class Warehouse:
    id: str
    name: str
    location: WarehouseLocation
    distance: float
    capacity: int
    current_stock: int
    delivery_radius: float
    operational_hours: OperationalHours
    delivery_methods: List[str] = field(default_factory=list)
    last_mile_partners: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location.to_dict(),
            "distance": self.distance,
            "capacity": self.capacity,
            "currentStock": self.current_stock,
            "deliveryRadius": self.delivery_radius,
            "operationalHours": self.operational_hours.to_dict(),
            "deliveryMethods": list(self.delivery_methods),
            "lastMilePartners": list(self.last_mile_partners),
        }


@dataclass
class DeliveryMethod:
    id: str
    name: str
    type: DeliveryType
    estimated_time: str
    cost: float
    available: bool
    cutoff_time: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "estimatedTime": self.estimated_time,
            "cost": self.cost,
            "available": self.available,
        }
        if self.cutoff_time:
            out["cutoffTime"] = self.cutoff_time
        return out


@dataclass
class RouteStep:
    instruction: str
    distance: float
    duration: str
    coordinates: Coordinates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instruction": self.instruction,
            "distance": self.distance,
            "duration": self.duration,
            "coordinates": self.coordinates.to_dict(),
        }


@dataclass
class DeliverySlot:
    id: str
    date: str
    time_slot: str
    available: bool
    premium: bool
    cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "timeSlot": self.time_slot,
            "available": self.available,
            "premium": self.premium,
            "cost": self.cost,
        }


@dataclass
class DeliveryRoute:
    id: str
    warehouse_id: str
    delivery_address: DeliveryAddress
    estimated_distance: float
    estimated_time: str
    steps: List[RouteStep]
    last_mile_partner: str
    delivery_slots: List[DeliverySlot]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "warehouseId": self.warehouse_id,
            "deliveryAddress": self.delivery_address.to_dict(),
            "estimatedDistance": self.estimated_distance,
            "estimatedTime": self.estimated_time,
            "steps": [s.to_dict() for s in self.steps],
            "lastMilePartner": self.last_mile_partner,
            "deliverySlots": [s.to_dict() for s in self.delivery_slots],
        }


@dataclass
class LastMileCoordination:
    partner: str
    tracking_id: str
    estimated_delivery: datetime
    real_time_updates: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partner": self.partner,
            "trackingId": self.tracking_id,
            "estimatedDelivery": self.estimated_delivery.isoformat(),
            "realTimeUpdates": self.real_time_updates,
        }


@dataclass
class DeliveryPlan:
    selected_products: List[Product]
    optimal_warehouse: Warehouse
    delivery_route: DeliveryRoute
    delivery_options: List[DeliveryMethod]
    recommended_delivery: DeliveryMethod
    last_mile_coordination: LastMileCoordination
    total_delivery_cost: float
    total_estimated_time: str
    sustainability_score: float
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selectedProducts": [p.to_dict() for p in self.selected_products],
            "optimalWarehouse": self.optimal_warehouse.to_dict(),
            "deliveryRoute": self.delivery_route.to_dict(),
            "deliveryOptions": [o.to_dict() for o in self.delivery_options],
            "recommendedDelivery": self.recommended_delivery.to_dict(),
            "lastMileCoordination": self.last_mile_coordination.to_dict(),
            "totalDeliveryCost": self.total_delivery_cost,
            "totalEstimatedTime": self.total_estimated_time,
            "sustainabilityScore": self.sustainability_score,
            "isFallback": self.is_fallback,
        }


# ─────────────────────────────────────────────────────────────
# Cart
# ─────────────────────────────────────────────────────────────
@dataclass
class CartItem:
    id: str
    product: Product
    quantity: int = 1
    added_at: Optional[str] = None
    selected_variant: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "addedAt": self.added_at,
        }
        if self.selected_variant:
            out["selectedVariant"] = self.selected_variant
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        product = Product.from_dict(data.get("product") or {})
        return cls(
            id=str(data.get("id") or product.id),
            product=product,
            quantity=max(1, int(data.get("quantity", 1) or 1)),
            added_at=_pick(data, "addedAt", "added_at"),
            selected_variant=_pick(data, "selectedVariant", "selected_variant"),
        )


@dataclass
class RollbackProduct:
    """Promotion catalog row: a temporarily reduced price."""
    id: str
    name: str
    price: float
    original_price: float
    rollback_price: float
    savings: float
    savings_percentage: float
    category: str
    brand: str
    image: str
    rating: float
    in_stock: bool
    rollback_end_date: datetime
    alternative_for: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "originalPrice": self.original_price,
            "rollbackPrice": self.rollback_price,
            "savings": self.savings,
            "savingsPercentage": self.savings_percentage,
            "category": self.category,
            "brand": self.brand,
            "image": self.image,
            "rating": self.rating,
            "inStock": self.in_stock,
            "rollbackEndDate": self.rollback_end_date.isoformat(),
            "alternativeFor": self.alternative_for,
        }


@dataclass
class GreatValueProduct:
    """Promotion catalog row: store-brand equivalent of a name brand."""
    id: str
    name: str
    price: float
    equivalent_brand: str
    equivalent_price: float
    savings: float
    savings_percentage: float
    quality_rating: str
    category: str
    image: str
    rating: float
    reviews: int
    in_stock: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "equivalentBrand": self.equivalent_brand,
            "equivalentPrice": self.equivalent_price,
            "savings": self.savings,
            "savingsPercentage": self.savings_percentage,
            "qualityRating": self.quality_rating,
            "category": self.category,
            "image": self.image,
            "rating": self.rating,
            "reviews": self.reviews,
            "inStock": self.in_stock,
        }


@dataclass
class BundleTemplate:
    id: str
    name: str
    categories: List[str]
    min_items: int
    discount: float


@dataclass
class RollbackOpportunity:
    product: RollbackProduct
    replaces_product_id: str
    savings: float
    priority: SavingsPriority
    time_left: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "replacesProductId": self.replaces_product_id,
            "savings": self.savings,
            "priority": self.priority.value,
            "timeLeft": self.time_left,
        }


@dataclass
class GreatValueRecommendation:
    product: GreatValueProduct
    replaces_product_id: str
    savings: float
    quality_comparison: str
    priority: SavingsPriority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "replacesProductId": self.replaces_product_id,
            "savings": self.savings,
            "qualityComparison": self.quality_comparison,
            "priority": self.priority.value,
        }


@dataclass
class BundleOpportunity:
    id: str
    name: str
    products: List[Product]
    bundle_price: float
    original_price: float
    savings: float
    applicable_items: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "products": [p.to_dict() for p in self.products],
            "bundlePrice": self.bundle_price,
            "originalPrice": self.original_price,
            "savings": self.savings,
            "applicableItems": list(self.applicable_items),
        }


@dataclass
class ProductSubstitution:
    original_product: Product
    suggested_product: Product
    substitution_type: SubstitutionType
    reason: str
    savings: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalProduct": self.original_product.to_dict(),
            "suggestedProduct": self.suggested_product.to_dict(),
            "substitutionType": self.substitution_type.value,
            "reason": self.reason,
            "savings": self.savings,
            "confidence": self.confidence,
        }


@dataclass
class CartOptimization:
    original_cart: List[CartItem]
    recommended_substitutions: List[ProductSubstitution]
    rollback_opportunities: List[RollbackOpportunity]
    great_value_recommendations: List[GreatValueRecommendation]
    bundle_deals: List[BundleOpportunity]
    total_original_price: float
    total_optimized_price: float
    total_savings: float
    savings_percentage: float
    sustainability_score: float
    nutrition_score: Optional[float] = None
    applied_bundle: Optional[BundleOpportunity] = None
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalCart": [c.to_dict() for c in self.original_cart],
            "recommendedSubstitutions": [s.to_dict() for s in self.recommended_substitutions],
            "rollbackOpportunities": [r.to_dict() for r in self.rollback_opportunities],
            "greatValueRecommendations": [g.to_dict() for g in self.great_value_recommendations],
            "bundleDeals": [b.to_dict() for b in self.bundle_deals],
            "appliedBundle": self.applied_bundle.to_dict() if self.applied_bundle else None,
            "totalOriginalPrice": self.total_original_price,
            "totalOptimizedPrice": self.total_optimized_price,
            "totalSavings": self.total_savings,
            "savingsPercentage": self.savings_percentage,
            "sustainabilityScore": self.sustainability_score,
            "nutritionScore": self.nutrition_score,
            "isFallback": self.is_fallback,
        }


# ─────────────────────────────────────────────────────────────
# Preferences
# ─────────────────────────────────────────────────────────────
@dataclass
class DeliveryPreferences:
    priority_speed: bool = False
    priority_cost: bool = False
    environmentally_friendly: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["DeliveryPreferences"]:
        if not data:
            return None
        return cls(
            priority_speed=bool(_pick(data, "prioritySpeed", "priority_speed", default=False)),
            priority_cost=bool(_pick(data, "priorityCost", "priority_cost", default=False)),
            environmentally_friendly=bool(
                _pick(data, "environmentallyFriendly", "environmentally_friendly", default=False)
            ),
        )


@dataclass
class CartPreferences:
    prefer_great_value: bool = False
    prefer_name_brands: bool = False
    sustainability_focus: bool = False
    budget_conscious: bool = False
    nutrition_focus: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["CartPreferences"]:
        if not data:
            return None
        return cls(
            prefer_great_value=bool(_pick(data, "preferGreatValue", "prefer_great_value", default=False)),
            prefer_name_brands=bool(_pick(data, "preferNameBrands", "prefer_name_brands", default=False)),
            sustainability_focus=bool(_pick(data, "sustainabilityFocus", "sustainability_focus", default=False)),
            budget_conscious=bool(_pick(data, "budgetConscious", "budget_conscious", default=False)),
            nutrition_focus=bool(_pick(data, "nutritionFocus", "nutrition_focus", default=False)),
        )
